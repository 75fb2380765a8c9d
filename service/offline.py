"""
Offline generator.

Synthesizes a plausible rewrite of exactly `target_words` body words without
calling any service. Used in offline/test mode and as the degrade path when
the backend is unreachable.

Body = everything after the optional Subject line (greeting and signature
included). The body length is an exact match, unlike the live path.
"""

from __future__ import annotations
import logging
import random
import re
from typing import List, Optional

from service.prompts import is_email
from service.text_utils import count_words, split_subject, words_of

log = logging.getLogger("Enhance")

FILLER_WORDS = (
    "effectively", "efficiently", "specifically", "particularly",
    "notably", "significantly", "consequently", "furthermore",
    "additionally", "moreover", "therefore", "however",
    "nevertheless", "meanwhile", "subsequently", "accordingly",
)
SUBJECT_OPTIONS = (
    "Quick update", "Important information", "Follow-up",
    "Request for feedback", "Project status", "Next steps",
)
GREETINGS = ("Hi,", "Hello,", "Hey team,", "Good day,", "Greetings,")
SIGNATURES = ("Best,", "Regards,", "Thanks,", "Cheers,", "Sincerely,")

DECORATION_CHANCE = 0.15

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


class OfflineGenerator:
    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self.rng = rng or random.Random(seed)

    def generate(self, content: str, target_words: int, input_type: str = "email") -> str:
        if target_words < 1:
            raise ValueError("target_words must be >= 1")

        subject, main = split_subject(content)
        if subject is None and is_email(input_type):
            subject = self.rng.choice(SUBJECT_OPTIONS)

        words = words_of(main)
        greeting = self.rng.choice(GREETINGS) if self.rng.random() < DECORATION_CHANCE else None
        signature = self.rng.choice(SIGNATURES) if self.rng.random() < DECORATION_CHANCE else None

        budget = target_words - count_words(greeting or "") - count_words(signature or "")
        if budget < 1:
            # decorations never crowd out the text itself
            greeting = signature = None
            budget = target_words

        if budget > len(words):
            core = self._expand(words, budget)
        else:
            core = self._shorten(words, budget)
        core = self._fit(core, budget)
        if subject is None and greeting is None and core[0].lower().startswith("subject:"):
            # a leading "Subject:" word would read back as a subject line
            core[0] = self.rng.choice(FILLER_WORDS)

        parts = [p for p in (greeting, self._paragraphs(core), signature) if p]
        body = "\n\n".join(parts)

        log.debug("offline: generated %d words (target %d)", count_words(body), target_words)
        if subject is not None:
            return f"Subject: {subject}\n\n{body}"
        return body

    # ---- internal ----

    def _expand(self, words: List[str], target: int) -> List[str]:
        fillers = [self.rng.choice(FILLER_WORDS) for _ in range(target - len(words))]
        out: List[str] = []
        i = 0
        for w in words:
            out.append(w)
            if i < len(fillers) and self.rng.random() > 0.5:
                out.append(fillers[i])
                i += 1
        out.extend(fillers[i:])
        return out[:target]

    def _shorten(self, words: List[str], target: int) -> List[str]:
        keep = target / len(words)
        return [w for w in words if self.rng.random() < keep][:target]

    def _fit(self, words: List[str], target: int) -> List[str]:
        if len(words) > target:
            return words[:target]
        return words + [self.rng.choice(FILLER_WORDS) for _ in range(target - len(words))]

    @staticmethod
    def _paragraphs(words: List[str]) -> str:
        text = " ".join(words)
        return "\n\n".join(p.strip() for p in _SENTENCE_END.split(text) if p.strip())
