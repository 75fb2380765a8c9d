"""
Pipeline tests: the editor's Enhance action end to end against fakes.
"""

from __future__ import annotations
import random

from conftest import ScriptedBackend, words  # type: ignore
from service.enhancer import EnhanceOptions, Enhancer
from service.persona import Persona, Preferences
from service.pipeline import EnhancementPipeline, RequestFence, validate_input
from service.errors import ValidationError
import pytest

SHORT = "Hello world, this is a test."


def make(backend: ScriptedBackend, seed: int = 0) -> EnhancementPipeline:
    return EnhancementPipeline(Enhancer(backend, rng=random.Random(seed)))


def test_offline_concise_example_hits_exact_target():
    pipe = make(ScriptedBackend())
    out = pipe.run(SHORT, Preferences(length="concise"), EnhanceOptions(offline=True), input_type="generic")
    assert out.ok
    assert out.target_words == 25
    assert out.word_count == 25
    assert out.source == "offline"


def test_reply_is_cleaned_and_subject_split():
    backend = ScriptedBackend(replies=["Subject: **Sync moved**\n\n## Hi\n" + words(48) + " **done**"])
    out = make(backend).run(SHORT, Preferences(length="balanced"))
    assert out.subject == "Sync moved"
    assert out.body.startswith("Hi\n")
    assert "**" not in out.body
    assert out.word_count == 50
    assert out.target_words == 50


def test_tone_descriptor_reaches_backend():
    backend = ScriptedBackend(replies=[words(50)])
    prefs = Preferences(persona=Persona(style="professional", formality="formal", traits=("Data-driven",),
                                        context="Corporate"), tone="confident")
    make(backend).run(SHORT, prefs)
    assert backend.payloads[0]["tone"] == (
        "confident with professional style, formal formality, in a Corporate context, emphasizing Data-driven"
    )


def test_custom_target_and_batching_online():
    text = " ".join(f"w{i}" for i in range(1200))
    backend = ScriptedBackend(replies=[words(200), words(200), words(200), words(600)])
    out = make(backend).run(text, options=EnhanceOptions(), custom_target=600, input_type="generic")
    assert out.ok
    assert out.batches == 3
    assert out.word_count == 600
    assert len(backend.payloads) == 4


def test_large_target_offline_is_single_call():
    text = " ".join(f"w{i}" for i in range(700))
    out = make(ScriptedBackend()).run(text, options=EnhanceOptions(offline=True), custom_target=700)
    assert out.batches == 1
    assert out.word_count == 700


def test_validation_errors_surface_inline():
    pipe = make(ScriptedBackend())
    assert pipe.run("   ").error == "Content is required"
    too_long = pipe.run(words(2001))
    assert too_long.error == "Text exceeds 2000 words limit. Please shorten your input."
    assert pipe.run(SHORT, custom_target=0).error


def test_validate_input_counts_words():
    assert validate_input("a b c") == 3
    with pytest.raises(ValidationError):
        validate_input(words(11), max_words=10)


def test_upstream_error_reported():
    from service.errors import UpstreamError

    backend = ScriptedBackend(replies=[UpstreamError("Rate limit exceeded. Please try again in a moment.", status=429)])
    out = make(backend).run(SHORT)
    assert not out.ok
    assert out.error.startswith("Rate limit exceeded")
    assert out.body == ""


def test_newer_run_marks_older_result_stale():
    pipe = None

    class RacingBackend(ScriptedBackend):
        def enhance(self, payload):
            # a second Enhance click lands while this call is in flight
            pipe.fence.begin()
            return super().enhance(payload)

    pipe = make(RacingBackend(replies=[words(50)]))
    out = pipe.run(SHORT)
    assert out.stale is True

    fresh = make(ScriptedBackend(replies=[words(50)])).run(SHORT)
    assert fresh.stale is False


def test_request_fence_generations():
    fence = RequestFence()
    first = fence.begin()
    assert fence.is_current(first)
    second = fence.begin()
    assert not fence.is_current(first)
    assert fence.is_current(second)
