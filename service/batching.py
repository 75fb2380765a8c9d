"""
Batch orchestrator for long targets.

Chunks are built check-then-append: before each token is added, a chunk that
already holds BATCH_SIZE tokens is closed. Chunks therefore hold at most
BATCH_SIZE tokens and 1200 words split 500/500/200.

Chunks run strictly one after another; the first failing chunk aborts the
batch. The concatenation gets one final pass toward the overall target.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from service.enhancer import EnhanceOptions, EnhanceRequest, EnhanceResult, Enhancer
from service.text_utils import clean_ai_response

log = logging.getLogger("Enhance")

BATCH_SIZE = 500
BATCH_SEPARATOR = "\n\n"


def split_batches(text: str, batch_size: int = BATCH_SIZE) -> List[str]:
    batches: List[str] = []
    current: List[str] = []
    for word in (text or "").split():
        if len(current) >= batch_size:
            batches.append(" ".join(current))
            current = []
        current.append(word)
    if current:
        batches.append(" ".join(current))
    return batches


def needs_batching(target_words: int, options: EnhanceOptions, batch_size: int = BATCH_SIZE) -> bool:
    return target_words > batch_size and not options.offline


def final_pass_tone(tone: str, target_words: int) -> str:
    return f"{tone}. CRITICAL: Maintain the same structure but adjust to exactly {target_words} words."


@dataclass
class BatchProgress:
    index: int      # 1-based
    total: int


class BatchOrchestrator:
    def __init__(
        self,
        enhancer: Enhancer,
        batch_size: int = BATCH_SIZE,
        on_progress: Optional[Callable[[BatchProgress], None]] = None,
    ):
        self.enhancer = enhancer
        self.batch_size = batch_size
        self.on_progress = on_progress

    def run(self, request: EnhanceRequest, options: Optional[EnhanceOptions] = None) -> EnhanceResult:
        options = options or EnhanceOptions()
        batches = split_batches(request.content, self.batch_size)
        if not batches:
            return EnhanceResult(error="Content is required")

        sub_target = min(request.target_words // len(batches), self.batch_size)
        log.info("batching %d chunks, %d words each toward %d", len(batches), sub_target, request.target_words)

        processed: List[str] = []
        for i, chunk in enumerate(batches, start=1):
            if self.on_progress:
                self.on_progress(BatchProgress(index=i, total=len(batches)))
            res = self.enhancer.enhance(
                EnhanceRequest(
                    content=chunk,
                    tone=request.tone,
                    target_words=max(1, sub_target),
                    input_type=request.input_type,
                ),
                options,
            )
            if not res.ok:
                log.error("batch %d of %d failed: %s", i, len(batches), res.error)
                return EnhanceResult(error=res.error, meta={"failed_batch": i, "batches": len(batches)})
            processed.append(clean_ai_response(res.enhanced_content))

        final = self.enhancer.enhance(
            EnhanceRequest(
                content=BATCH_SEPARATOR.join(processed),
                tone=final_pass_tone(request.tone, request.target_words),
                target_words=request.target_words,
                input_type=request.input_type,
            ),
            options,
        )
        final.meta["batches"] = len(batches)
        return final
