"""
Enhancement pipeline: the editor's "Enhance" action.

This file:
- Validates the input text (non-empty, within MAX_INPUT_WORDS)
- Resolves the target (custom count or length preference)
- Folds persona + tone into the tone descriptor
- Runs a single enhancement or the batch orchestrator
- Cleans the reply and splits subject / body for display
- Fences overlapping runs so a stale result can be discarded
"""

from __future__ import annotations
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from service.batching import BATCH_SIZE, BatchOrchestrator, BatchProgress, needs_batching
from service.enhancer import EnhanceOptions, EnhanceRequest, EnhanceResult, Enhancer
from service.errors import ValidationError
from service.persona import Preferences
from service.prompts import EMAIL
from service.targets import target_for_text
from service.text_utils import clean_ai_response, count_words, split_subject

log = logging.getLogger("Enhance")

MAX_INPUT_WORDS = 2000


class RequestFence:
    """Generation counter: only the most recently started run is current."""

    def __init__(self):
        self._lock = threading.Lock()
        self._generation = 0

    def begin(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation


@dataclass
class PipelineOutcome:
    body: str = ""
    subject: Optional[str] = None
    word_count: int = 0
    target_words: int = 0
    warning: Optional[str] = None
    error: Optional[str] = None
    batches: int = 1
    source: str = "api"
    generation: int = 0
    stale: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def validate_input(text: str, max_words: int = MAX_INPUT_WORDS) -> int:
    if not (text or "").strip():
        raise ValidationError("Content is required")
    n = count_words(text)
    if n > max_words:
        raise ValidationError(f"Text exceeds {max_words} words limit. Please shorten your input.")
    return n


class EnhancementPipeline:
    def __init__(
        self,
        enhancer: Enhancer,
        max_input_words: int = MAX_INPUT_WORDS,
        batch_size: int = BATCH_SIZE,
        on_progress: Optional[Callable[[BatchProgress], None]] = None,
    ):
        self.enhancer = enhancer
        self.max_input_words = max_input_words
        self.batch_size = batch_size
        self.fence = RequestFence()
        self.batcher = BatchOrchestrator(enhancer, batch_size=batch_size, on_progress=on_progress)

    def run(
        self,
        text: str,
        preferences: Optional[Preferences] = None,
        options: Optional[EnhanceOptions] = None,
        *,
        custom_target: Optional[int] = None,
        input_type: str = EMAIL,
    ) -> PipelineOutcome:
        preferences = preferences or Preferences()
        options = options or EnhanceOptions()
        generation = self.fence.begin()

        try:
            validate_input(text, self.max_input_words)
            target = target_for_text(text, preferences.length, custom_target)
        except (ValidationError, ValueError) as e:
            return PipelineOutcome(error=str(e), generation=generation)

        request = EnhanceRequest(
            content=text,
            tone=preferences.tone_descriptor(),
            target_words=target,
            input_type=input_type,
        )
        log.info("enhancing text to %d words", target)

        if needs_batching(target, options, self.batch_size):
            result = self.batcher.run(request, options)
        else:
            result = self.enhancer.enhance(request, options)

        outcome = self._present(result, target)
        outcome.generation = generation
        outcome.stale = not self.fence.is_current(generation)
        if outcome.stale:
            log.info("discarding stale result of run %d", generation)
        return outcome

    # ---- internal ----

    @staticmethod
    def _present(result: EnhanceResult, target: int) -> PipelineOutcome:
        batches = int(result.meta.get("batches", 1))
        if not result.ok:
            return PipelineOutcome(error=result.error, target_words=target, batches=batches, source=result.source)
        content = clean_ai_response(result.enhanced_content)
        subject, body = split_subject(content)
        body = body.strip()
        return PipelineOutcome(
            body=body,
            subject=subject.strip() if subject is not None else None,
            word_count=count_words(body),
            target_words=target,
            warning=result.warning,
            batches=batches,
            source=result.source,
        )
