from __future__ import annotations

import pytest

from pref_core.dichotomies import DICHOTOMIES, DICHOTOMY_ORDER
from pref_core.item_params import ItemParameterTable, build_table, load_item_params
from pref_core.question_bank import answer_key_bank


def build_synthetic_records(
    *,
    per_dichotomy: int = 6,
    a_values: tuple[float, ...] = (1.2, 1.8, 2.4),
    b_values: tuple[float, ...] = (-1.0, 0.0, 1.0),
    facets: bool = True,
) -> list[dict]:
    """Deterministic parameter rows, interleaving dichotomies like the real form."""

    records: list[dict] = []
    for slot in range(per_dichotomy):
        for name in DICHOTOMY_ORDER:
            d = DICHOTOMIES[name]
            rec = {
                "index": len(records),
                "dichotomy": name,
                "a": a_values[slot % len(a_values)],
                "b": b_values[slot % len(b_values)],
            }
            if facets:
                rec["facet"] = d.facets[slot % 2 * 5]
            records.append(rec)
    return records


def build_synthetic_table(**kwargs) -> ItemParameterTable:
    return build_table(build_synthetic_records(**kwargs), version="synthetic")


def build_synthetic_bank(table: ItemParameterTable):
    return answer_key_bank(table)


@pytest.fixture
def synthetic_table() -> ItemParameterTable:
    return build_synthetic_table()


@pytest.fixture
def synthetic_bank(synthetic_table):
    return build_synthetic_bank(synthetic_table)


@pytest.fixture(scope="session")
def real_table() -> ItemParameterTable:
    return load_item_params()


@pytest.fixture(scope="session")
def real_bank(real_table):
    return answer_key_bank(real_table)
