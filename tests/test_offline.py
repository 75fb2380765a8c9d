"""
Offline generator: exact body length for any content/target, subject handling.
"""

from __future__ import annotations
import random
import pytest

from service.offline import SUBJECT_OPTIONS, OfflineGenerator
from service.text_utils import count_words, split_subject

SAMPLE = (
    "Hi team. The launch moved to Thursday because QA found two blockers. "
    "Please update your calendars and let me know if the new date doesn't work."
)


@pytest.mark.parametrize("seed", range(12))
@pytest.mark.parametrize("target", [1, 2, 5, 10, 25, 60, 200])
def test_body_is_exactly_target(seed, target):
    gen = OfflineGenerator(seed=seed)
    out = gen.generate(SAMPLE, target, "email")
    _, body = split_subject(out)
    assert count_words(body) == target


@pytest.mark.parametrize("content", ["", "one", "Subject: only a subject", "word " * 300])
def test_exact_length_on_odd_inputs(content):
    out = OfflineGenerator(seed=3).generate(content, 40, "generic")
    _, body = split_subject(out)
    assert count_words(body) == 40


@pytest.mark.parametrize("seed", range(200))
def test_mid_text_subject_word_never_becomes_a_subject(seed):
    content = "Hi\nSubject: budget review for the next quarter. We need the final numbers by Friday please."
    out = OfflineGenerator(seed=seed).generate(content, 8, "generic")
    subject, body = split_subject(out)
    assert subject is None
    assert count_words(body) == 8


def test_leading_subject_word_is_replaced_when_no_subject():
    class Scripted(random.Random):
        # no greeting, no signature, drop "x", keep the rest
        draws = iter([0.99, 0.99, 0.99, 0.0, 0.0, 0.0, 0.0])

        def random(self):
            return next(self.draws, 0.0)

    out = OfflineGenerator(rng=Scripted(2)).generate("x\nsubject:notes one two three", 3, "generic")
    assert split_subject(out)[0] is None
    assert out.split()[1:] == ["one", "two"]
    assert not out.lower().startswith("subject:")


def test_existing_subject_is_kept_and_not_counted():
    out = OfflineGenerator(seed=1).generate("Subject: Launch date\n\n" + SAMPLE, 30, "email")
    subject, body = split_subject(out)
    assert subject == "Launch date"
    assert count_words(body) == 30
    assert "Launch date" not in body


def test_email_without_subject_gets_one():
    subject, _ = split_subject(OfflineGenerator(seed=5).generate(SAMPLE, 20, "email"))
    assert subject in SUBJECT_OPTIONS


def test_generic_text_gets_no_subject():
    subject, _ = split_subject(OfflineGenerator(seed=5).generate(SAMPLE, 20, "generic"))
    assert subject is None


def test_same_seed_same_output():
    a = OfflineGenerator(seed=42).generate(SAMPLE, 50)
    b = OfflineGenerator(seed=42).generate(SAMPLE, 50)
    assert a == b


def test_expanding_keeps_original_words_in_order():
    class NeverDecorate(random.Random):
        def random(self):
            return 0.99

    out = OfflineGenerator(rng=NeverDecorate(1)).generate(SAMPLE, 60, "generic")
    produced = out.split()
    assert len(produced) == 60
    it = iter(produced)
    assert all(w in it for w in SAMPLE.split())


def test_decorations_dropped_when_no_room():
    class AlwaysDecorate(random.Random):
        def random(self):
            return 0.0

    out = OfflineGenerator(rng=AlwaysDecorate(1)).generate(SAMPLE, 1, "generic")
    assert count_words(out) == 1


def test_target_must_be_positive():
    with pytest.raises(ValueError):
        OfflineGenerator().generate(SAMPLE, 0)
