from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from . import config
from .dichotomies import DICHOTOMIES, DICHOTOMY_ORDER
from .item_params import ItemParameterTable, load_item_params
from .types import ItemParams

MIN_ITEMS_PER_DICHOTOMY: int = 15
A_RANGE: tuple[float, float] = (0.3, 4.0)


def _blank_dichotomy() -> dict[str, object]:
    return {
        "items": 0,
        "facets": {},
        "flags": {},
        "a_min": None,
        "a_max": None,
        "b_min": None,
        "b_max": None,
    }


def audit_items(items: Iterable[ItemParams]) -> dict[str, object]:
    coverage: dict[str, dict[str, object]] = {d: _blank_dichotomy() for d in DICHOTOMY_ORDER}
    warnings: list[str] = []
    total = 0

    for item in items:
        total += 1
        data = coverage.setdefault(item.dichotomy, _blank_dichotomy())
        data["items"] += 1  # type: ignore[operator]
        facets: dict[str, int] = data["facets"]  # type: ignore[assignment]
        if item.facet:
            facets[item.facet] = facets.get(item.facet, 0) + 1
            known = DICHOTOMIES[item.dichotomy].facets if item.dichotomy in DICHOTOMIES else ()
            if item.facet not in known:
                warnings.append(f"item {item.index}: facet {item.facet!r} does not belong to {item.dichotomy}")
        flags: dict[str, int] = data["flags"]  # type: ignore[assignment]
        for flag in item.flags:
            flags[flag] = flags.get(flag, 0) + 1

        for key, val in (("a", item.a), ("b", item.b)):
            lo, hi = data[f"{key}_min"], data[f"{key}_max"]
            data[f"{key}_min"] = val if lo is None else min(lo, val)  # type: ignore[type-var]
            data[f"{key}_max"] = val if hi is None else max(hi, val)  # type: ignore[type-var]

        if not A_RANGE[0] <= item.a <= A_RANGE[1]:
            warnings.append(f"item {item.index}: a={item.a} outside {A_RANGE}")
        if not config.THETA_MIN <= item.b <= config.THETA_MAX:
            warnings.append(f"item {item.index}: b={item.b} outside the theta range")

    for d in DICHOTOMY_ORDER:
        n = coverage[d]["items"]
        if n < MIN_ITEMS_PER_DICHOTOMY:  # type: ignore[operator]
            warnings.append(f"{d} has {n} items (<{MIN_ITEMS_PER_DICHOTOMY})")

    return {"coverage": coverage, "warnings": warnings, "totals": {"items": total}}


def audit_table(table: ItemParameterTable) -> dict[str, object]:
    summary = audit_items(table.items)
    summary["version"] = table.version
    return summary


def print_report(summary: dict[str, object]) -> None:
    coverage: dict[str, dict[str, object]] = summary["coverage"]  # type: ignore[assignment]
    print(f"=== Item Parameters ({summary.get('version', '?')}) ===")
    for d in DICHOTOMY_ORDER:
        data = coverage[d]
        print(f"\n{d}: {data['items']} items  a=[{data['a_min']}, {data['a_max']}]  b=[{data['b_min']}, {data['b_max']}]")
        for facet, n in sorted(data["facets"].items()):  # type: ignore[union-attr]
            print(f"    {facet:<18} {n:3d}")
        if data["flags"]:
            print(f"    flags: {data['flags']}")

    warnings: list[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings:
        print("\nWarnings:")
        for msg in warnings:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")

    print("\nTotals:", summary["totals"])


def write_summary(summary: dict[str, object], path: Path) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    return text


def main(argv: list[str] | None = None) -> int:
    args = list(argv or [])
    table = load_item_params(args[0] if args else None)
    summary = audit_table(table)
    print_report(summary)
    if len(args) > 1:
        write_summary(summary, Path(args[1]))
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    import sys
    raise SystemExit(main(sys.argv[1:]))
