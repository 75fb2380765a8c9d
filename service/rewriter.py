"""
Backend rewriter (OpenAI chat completions).

Design:
- Enforces the backend limits before and after the model call:
  input budget (estimated tokens), output token budget derived from the
  target, and a 10% overshoot margin on the returned word count.
- Maps SDK failures onto service.errors so routes can pick a status code.

API:
    Rewriter.from_settings(settings).rewrite(content, tone="friendly", target_words=120, input_type="email")
      -> (enhanced_content, word_count)
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

import openai
from openai import OpenAI

from service.errors import InputTooLongError, ResponseTooLongError, UpstreamError, ValidationError
from service.prompts import build_system_directive
from service.text_utils import count_words, split_subject

if TYPE_CHECKING:  # app.container imports this module
    from app.config import Settings

log = logging.getLogger("Backend")

RESPONSE_MARGIN_DIVISOR = 10      # 10% overshoot allowed
OUTPUT_HEADROOM = 1.5
MIN_OUTPUT_TOKENS = 1000


@dataclass(frozen=True)
class RewriterConfig:
    model: str = "gpt-3.5-turbo"
    temperature: float = 0.7
    presence_penalty: float = 0.1
    frequency_penalty: float = 0.1
    max_input_tokens: int = 16000
    max_output_tokens: int = 4000
    tokens_per_word: float = 1.3

    @classmethod
    def from_settings(cls, s: "Settings") -> "RewriterConfig":
        return cls(
            model=s.OPENAI_MODEL,
            temperature=s.OPENAI_TEMPERATURE,
            presence_penalty=s.OPENAI_PRESENCE_PENALTY,
            frequency_penalty=s.OPENAI_FREQUENCY_PENALTY,
            max_input_tokens=s.MAX_INPUT_TOKENS,
            max_output_tokens=s.MAX_OUTPUT_TOKENS,
            tokens_per_word=s.TOKENS_PER_WORD,
        )


class Rewriter:
    def __init__(self, client: Optional[OpenAI] = None, config: Optional[RewriterConfig] = None):
        self.client = client
        self.config = config or RewriterConfig()

    @classmethod
    def from_settings(cls, settings: "Settings") -> "Rewriter":
        client = None
        if settings.OPENAI_API_KEY:
            try:
                client = OpenAI(api_key=settings.OPENAI_API_KEY)
                log.info("OpenAI client initialized successfully")
            except openai.OpenAIError as e:
                log.error("Failed to initialize OpenAI: %s", e)
        else:
            log.warning("OPENAI_API_KEY missing; AI features will be disabled")
        return cls(client, RewriterConfig.from_settings(settings))

    @property
    def enabled(self) -> bool:
        return self.client is not None

    # ---- limits ----

    def estimate_tokens(self, text: str) -> int:
        return math.ceil(round(count_words(text) * self.config.tokens_per_word, 6))

    def output_budget(self, target_words: int) -> int:
        want = math.ceil(round(target_words * self.config.tokens_per_word * OUTPUT_HEADROOM, 6))
        return min(self.config.max_output_tokens, max(MIN_OUTPUT_TOKENS, want))

    @staticmethod
    def max_allowed_words(target_words: int) -> int:
        # ceil(target * 1.1) without float drift (20 * 1.1 == 22.000000000000004)
        return target_words + math.ceil(target_words / RESPONSE_MARGIN_DIVISOR)

    # ---- main ----

    def rewrite(self, content: str, *, tone: str, target_words: int, input_type: str) -> Tuple[str, int]:
        if not self.enabled:
            raise UpstreamError(
                "AI enhancement is currently unavailable. Please check the server configuration.",
                status=503,
            )
        if not (content or "").strip():
            raise ValidationError("Content is required")
        if not isinstance(target_words, int) or target_words < 1:
            raise ValidationError("Invalid target word count")
        if self.estimate_tokens(content) > self.config.max_input_tokens:
            raise InputTooLongError(f"Input too long. Maximum {self.config.max_input_tokens} tokens allowed.")

        enhanced = self._complete(
            system=build_system_directive(tone, target_words, input_type),
            user=content,
            max_tokens=self.output_budget(target_words),
        )

        _, body = split_subject(enhanced)
        words = count_words(body)
        if words > self.max_allowed_words(target_words):
            raise ResponseTooLongError(
                f"Response too long ({words} words). Please try again for a shorter version.",
                content=enhanced,
                word_count=words,
            )
        return enhanced, words

    # ---- internal ----

    def _complete(self, *, system: str, user: str, max_tokens: int) -> str:
        try:
            completion = self.client.chat.completions.create(
                model=self.config.model,
                temperature=self.config.temperature,
                max_tokens=max_tokens,
                presence_penalty=self.config.presence_penalty,
                frequency_penalty=self.config.frequency_penalty,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
            )
        except openai.AuthenticationError as e:
            raise UpstreamError("Invalid API key. Please check your OpenAI API key configuration.", status=401) from e
        except openai.RateLimitError as e:
            raise UpstreamError("Rate limit exceeded. Please try again in a moment.", status=429) from e
        except openai.OpenAIError as e:
            log.exception("OpenAI call failed: %s", e)
            raise UpstreamError(str(e) or "Failed to enhance content. Please try again.", status=500) from e

        choices = getattr(completion, "choices", None) or []
        text = (choices[0].message.content or "").strip() if choices else ""
        if not text:
            raise UpstreamError("No content received from AI", status=500)
        return text
