"""
Batch orchestrator tests: chunk boundaries, sequential sub-target calls,
abort on failure, and the single final corrective pass.
"""

from __future__ import annotations
import random
import pytest

from conftest import ScriptedBackend, words  # type: ignore
from service.batching import BatchOrchestrator, final_pass_tone, needs_batching, split_batches
from service.enhancer import EnhanceOptions, EnhanceRequest, Enhancer
from service.errors import UpstreamError
from service.text_utils import count_words


def numbered(n: int) -> str:
    return " ".join(f"w{i}" for i in range(n))


@pytest.mark.parametrize("n,sizes", [
    (1, [1]),
    (499, [499]),
    (500, [500]),
    (501, [500, 1]),
    (1000, [500, 500]),
    (1200, [500, 500, 200]),
])
def test_split_batches_sizes(n, sizes):
    assert [count_words(b) for b in split_batches(numbered(n))] == sizes


def test_split_batches_keeps_order_and_ignores_whitespace_runs():
    text = "  a b\n\nc   d  "
    assert split_batches(text, batch_size=3) == ["a b c", "d"]
    assert split_batches("   ") == []


def test_needs_batching_only_online_and_above_cap():
    assert needs_batching(501, EnhanceOptions())
    assert not needs_batching(500, EnhanceOptions())
    assert not needs_batching(900, EnhanceOptions(offline=True))


def test_1200_words_three_sequential_chunks_then_one_final_call():
    backend = ScriptedBackend(replies=[words(200, "a"), words(200, "b"), words(200, "c"), words(600, "z")])
    progress = []
    orch = BatchOrchestrator(Enhancer(backend, rng=random.Random(0)), on_progress=progress.append)

    res = orch.run(EnhanceRequest(content=numbered(1200), tone="neutral", target_words=600, input_type="generic"))

    assert res.ok
    assert res.enhanced_content == words(600, "z")
    assert res.meta["batches"] == 3
    assert [(p.index, p.total) for p in progress] == [(1, 3), (2, 3), (3, 3)]

    targets = [p["targetWords"] for p in backend.payloads]
    assert targets == [200, 200, 200, 600]
    assert "w0 w1" in backend.payloads[0]["content"]
    assert "w1000 w1001" in backend.payloads[2]["content"]

    final = backend.payloads[3]
    assert final["tone"] == final_pass_tone("neutral", 600)
    assert "CRITICAL: Maintain the same structure but adjust to exactly 600 words." in final["tone"]
    joined = "\n\n".join([words(200, "a"), words(200, "b"), words(200, "c")])
    assert joined in final["content"]


def test_sub_target_capped_at_batch_size():
    backend = ScriptedBackend(replies=[words(500), words(500), words(1500)])
    orch = BatchOrchestrator(Enhancer(backend))
    orch.run(EnhanceRequest(content=numbered(1000), tone="neutral", target_words=1500))
    assert [p["targetWords"] for p in backend.payloads] == [500, 500, 1500]


def test_chunk_failure_aborts_whole_batch():
    backend = ScriptedBackend(replies=[words(200), UpstreamError("Rate limit exceeded.", status=429)])
    orch = BatchOrchestrator(Enhancer(backend))
    res = orch.run(EnhanceRequest(content=numbered(1200), tone="neutral", target_words=600))
    assert not res.ok
    assert res.error == "Rate limit exceeded."
    assert res.meta["failed_batch"] == 2
    assert len(backend.payloads) == 2


def test_final_pass_result_gets_its_own_correction():
    backend = ScriptedBackend(replies=[words(300), words(300), words(1200)])
    orch = BatchOrchestrator(Enhancer(backend, rng=random.Random(3)))
    res = orch.run(EnhanceRequest(content=numbered(1000), tone="neutral", target_words=600))
    assert count_words(res.enhanced_content) == 600
    assert "A local adjustment was made." in res.warning


def test_chunk_markdown_is_cleaned_before_final_pass():
    backend = ScriptedBackend(replies=["**bold** " + words(299), words(300), words(600)])
    orch = BatchOrchestrator(Enhancer(backend))
    orch.run(EnhanceRequest(content=numbered(1000), tone="neutral", target_words=600))
    assert "**" not in backend.payloads[2]["content"]
