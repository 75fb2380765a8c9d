"""
Persona & preferences records.

Preferences are persisted by an external document store keyed by user; this
module only validates the shape it hands us and folds the persona into the
tone descriptor sent with every enhancement.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Tuple

from service.errors import ValidationError
from service.targets import LengthPreference

STYLES = ("gen-z", "millennial", "professional")
FORMALITIES = ("casual", "balanced", "formal")
TONES = ("professional", "friendly", "confident", "empathetic", "neutral", "persuasive")
KNOWN_TRAITS = (
    "Emoji-friendly 😊",
    "Tech-savvy",
    "Concise",
    "Engaging",
    "Data-driven",
    "Collaborative",
    "Innovative",
    "Results-oriented",
    "Authentic",
)
KNOWN_CONTEXTS = ("Startup", "Corporate", "Creative Agency", "Tech Company", "Remote-first")

DEFAULT_TRAITS = ("Tech-savvy", "Concise", "Emoji-friendly 😊")


def _label(value: Any, name: str) -> str:
    s = str(value or "").strip()
    if not s:
        raise ValidationError(f"{name} is required")
    return s


def _choice(value: Any, options: Iterable[str], name: str) -> str:
    s = _label(value, name).lower()
    if s not in options:
        raise ValidationError(f"Unknown {name}: {value!r}")
    return s


@dataclass(frozen=True)
class Persona:
    style: str = "gen-z"
    formality: str = "balanced"
    traits: Tuple[str, ...] = DEFAULT_TRAITS
    context: str = "Tech Company"

    def __post_init__(self):
        object.__setattr__(self, "style", _choice(self.style, STYLES, "style"))
        object.__setattr__(self, "formality", _choice(self.formality, FORMALITIES, "formality"))
        object.__setattr__(self, "context", _label(self.context, "context"))
        if isinstance(self.traits, str):
            raise ValidationError("traits must be a list of labels")
        traits = tuple(_label(t, "trait") for t in (self.traits or ()))
        # de-dup, keep order
        object.__setattr__(self, "traits", tuple(dict.fromkeys(traits)))

    def describe(self, tone: str) -> str:
        """Tone descriptor, e.g. "friendly with gen-z style, casual formality, in a Startup context, emphasizing Concise"."""
        out = f"{tone} with {self.style} style, {self.formality} formality, in a {self.context} context"
        if self.traits:
            out = f"{out}, emphasizing {', '.join(self.traits)}"
        return out


@dataclass(frozen=True)
class Preferences:
    persona: Persona = field(default_factory=Persona)
    tone: str = "professional"
    length: LengthPreference = LengthPreference.BALANCED

    def __post_init__(self):
        object.__setattr__(self, "tone", _choice(self.tone, TONES, "tone"))
        try:
            object.__setattr__(self, "length", LengthPreference.parse(self.length))
        except ValueError as e:
            raise ValidationError(str(e)) from e

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "Preferences":
        """Build from the stored document ({style, formality, traits, context, tone, length}); missing keys take defaults."""
        d = data or {}
        base = cls()
        persona = Persona(
            style=d.get("style", base.persona.style),
            formality=d.get("formality", base.persona.formality),
            traits=d.get("traits", base.persona.traits),
            context=d.get("context", base.persona.context),
        )
        return cls(
            persona=persona,
            tone=d.get("tone", base.tone),
            length=d.get("length", base.length),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "style": self.persona.style,
            "formality": self.persona.formality,
            "traits": list(self.persona.traits),
            "context": self.persona.context,
            "tone": self.tone,
            "length": self.length.value,
        }

    def tone_descriptor(self) -> str:
        return self.persona.describe(self.tone)
