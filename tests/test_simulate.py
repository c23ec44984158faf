from __future__ import annotations

import random

import pytest

from pref_core import smoke
from pref_core.simulate import all_omitted, generate_answers


def test_generate_answers_follows_type(synthetic_bank):
    answers = generate_answers(synthetic_bank, "estj")
    for number, q in synthetic_bank.items():
        chosen = answers[number]["choice"]
        assert q.options[chosen].pole in "ESTJ"


def test_omissions_are_seeded(real_bank):
    a = generate_answers(real_bank, "INFP", 0.3, random.Random(11))
    b = generate_answers(real_bank, "INFP", 0.3, random.Random(11))
    assert a == b
    assert 0 < sum(v is None for v in a.values()) < len(real_bank)
    assert all(v is None for v in generate_answers(real_bank, "INFP", 1.0).values())
    assert set(all_omitted(real_bank).values()) == {None}


@pytest.mark.parametrize("code", ["EST", "ESTX", "SETJ"])
def test_bad_type_codes(synthetic_bank, code):
    with pytest.raises(ValueError):
        generate_answers(synthetic_bank, code)


def test_smoke_run_recovers_canonical_types():
    assert smoke.run_smoke() == ["ESTJ", "INFP", "ENTP", "ESTJ", "INFP", "INFP"]
