"""
Container: creates and holds singletons.

Provides:
- Settings
- Rewriter (OpenAI-backed; disabled when no API key is configured)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from app.config import Settings
from service.rewriter import Rewriter


@dataclass
class Container:
    settings: Settings
    # Filled during __post_init__ unless injected (tests pass a fake-backed Rewriter)
    rewriter: Optional[Rewriter] = None

    def __post_init__(self):
        if self.rewriter is None:
            self.rewriter = Rewriter.from_settings(self.settings)

    @property
    def ai_enabled(self) -> bool:
        return bool(self.rewriter and self.rewriter.enabled)
