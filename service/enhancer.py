"""
Enhancement client.

Flow per call:
1. offline mode            -> OfflineGenerator, no network
2. health check            -> unreachable / aiEnabled=false degrades (policy)
3. POST /api/enhance       -> prompt from service.prompts
4. verify word count       -> accept, warn, or correct locally
5. errors                  -> application errors become EnhanceResult.error,
                              transport failures degrade (policy)

Nothing here raises on a failed enhancement; every path ends in an
EnhanceResult.
"""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Protocol

from service.errors import EnhanceError, TransportError, ValidationError
from service.offline import OfflineGenerator
from service.prompts import EMAIL, build_prompt
from service.text_utils import adjust_to_word_count, count_words, join_subject, split_subject

log = logging.getLogger("Enhance")

TOLERANCE_MIN_WORDS = 5
TOLERANCE_RATIO = 0.05
CORRECTION_RATIO = 0.5


class FallbackPolicy(str, Enum):
    DEGRADE = "degrade"        # transport failure -> offline generator
    FAIL_FAST = "fail_fast"    # transport failure -> EnhanceResult.error

    @classmethod
    def parse(cls, value: Any) -> "FallbackPolicy":
        if isinstance(value, cls):
            return value
        return cls(str(value or cls.DEGRADE.value).strip().lower())


@dataclass(frozen=True)
class EnhanceOptions:
    offline: bool = False
    fallback: FallbackPolicy = FallbackPolicy.DEGRADE


@dataclass(frozen=True)
class EnhanceRequest:
    content: str
    tone: str
    target_words: int
    input_type: str = EMAIL

    def validate(self) -> None:
        if not (self.content or "").strip():
            raise ValidationError("Content is required")
        if not isinstance(self.target_words, int) or self.target_words < 1:
            raise ValidationError("Invalid target word count")


@dataclass
class EnhanceResult:
    enhanced_content: str = ""
    subject: Optional[str] = None
    warning: Optional[str] = None
    error: Optional[str] = None
    source: str = "api"                      # api | offline
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"enhancedContent": self.enhanced_content}
        for key, val in (("subject", self.subject), ("warning", self.warning), ("error", self.error)):
            if val is not None:
                out[key] = val
        return out


class BackendLike(Protocol):
    def health(self) -> Dict[str, Any]: ...
    def enhance(self, payload: Dict[str, Any]) -> Dict[str, Any]: ...


def tolerance_for(target_words: int) -> int:
    return max(TOLERANCE_MIN_WORDS, int(target_words * TOLERANCE_RATIO))


class Enhancer:
    def __init__(
        self,
        backend: Optional[BackendLike],
        offline: Optional[OfflineGenerator] = None,
        rng: Optional[random.Random] = None,
    ):
        self.backend = backend
        self.rng = rng or random.Random()
        self.offline = offline or OfflineGenerator(rng=self.rng)

    # ---------------------------
    # MAIN ENTRYPOINT
    # ---------------------------

    def enhance(self, request: EnhanceRequest, options: Optional[EnhanceOptions] = None) -> EnhanceResult:
        options = options or EnhanceOptions()
        try:
            request.validate()
        except ValidationError as e:
            return EnhanceResult(error=e.message)

        if options.offline or self.backend is None:
            log.info("offline mode: generating %d words", request.target_words)
            return self._offline(request)

        try:
            health = self.backend.health()
            if not health.get("aiEnabled"):
                log.info("AI service not available, using offline mode")
                return self._offline(request, reason="ai_disabled")

            prompt = build_prompt(request.content, request.tone, request.target_words, request.input_type)
            log.info("requesting %d words from API (%s)", request.target_words, prompt.action)
            data = self.backend.enhance({
                "content": prompt.user,
                "tone": request.tone,
                "targetWords": request.target_words,
                "inputType": request.input_type,
            })
        except TransportError as e:
            if options.fallback is FallbackPolicy.FAIL_FAST:
                log.warning("transport failure, failing fast: %s", e.message)
                return EnhanceResult(error=e.message)
            log.warning("transport failure, using offline mode: %s", e.message)
            return self._offline(request, reason="transport")
        except EnhanceError as e:
            log.error("enhance failed: %s", e.message)
            return EnhanceResult(error=e.message)

        return self.verify(data["enhancedContent"], request.target_words)

    # ---------------------------
    # VERIFICATION / CORRECTION
    # ---------------------------

    def verify(self, content: str, target_words: int) -> EnhanceResult:
        """Compare the body (subject excluded) to the target and correct large drift."""
        subject, body = split_subject(content)
        actual = count_words(body)
        drift = abs(actual - target_words)
        log.info("API response received: %d words (requested %d)", actual, target_words)

        if drift <= tolerance_for(target_words):
            return EnhanceResult(enhanced_content=content, subject=subject, meta={"words": actual})

        note = f"Note: The AI generated {actual} words instead of the requested {target_words} words."
        log.warning("word count mismatch: requested %d, got %d", target_words, actual)

        if drift <= target_words * CORRECTION_RATIO:
            return EnhanceResult(enhanced_content=content, subject=subject, warning=note, meta={"words": actual})

        fixed = adjust_to_word_count(body, target_words, rng=self.rng)
        log.info("local fix applied: %d words", count_words(fixed))
        return EnhanceResult(
            enhanced_content=join_subject(subject, fixed),
            subject=subject,
            warning=f"{note} A local adjustment was made.",
            meta={"words": target_words, "adjusted": True},
        )

    # ---- internal ----

    def _offline(self, request: EnhanceRequest, reason: str = "offline") -> EnhanceResult:
        text = self.offline.generate(request.content, request.target_words, request.input_type)
        subject, _ = split_subject(text)
        return EnhanceResult(enhanced_content=text, subject=subject, source="offline", meta={"reason": reason})
