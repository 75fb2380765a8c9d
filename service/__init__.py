"""
Service package exports & light factories.

Exposes:
- make_options(settings): offline flag + fallback policy from Settings
- make_enhancer(settings), make_pipeline(settings)
"""

from __future__ import annotations
import random
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from app.config import Settings
    from service.enhancer import EnhanceOptions, Enhancer
    from service.pipeline import EnhancementPipeline


def make_enhancer(settings: "Settings", *, seed: Optional[int] = None) -> "Enhancer":
    # local imports: requests is only needed on the client side
    from sdk.client import BackendClient
    from service.enhancer import Enhancer

    backend = BackendClient(settings.BACKEND_URL, timeout=settings.REQUEST_TIMEOUT)
    return Enhancer(backend, rng=random.Random(seed))


def make_options(settings: "Settings") -> "EnhanceOptions":
    from service.enhancer import EnhanceOptions, FallbackPolicy

    return EnhanceOptions(
        offline=settings.OFFLINE_MODE,
        fallback=FallbackPolicy.parse(settings.FALLBACK_POLICY),
    )


def make_pipeline(settings: "Settings", *, seed: Optional[int] = None) -> "EnhancementPipeline":
    from service.pipeline import EnhancementPipeline

    return EnhancementPipeline(make_enhancer(settings, seed=seed))
