"""Calibrated 2PL item parameters and the registry that serves them.

The parameter table is external, versioned data: the engine never adjusts it.
``build_table`` validates a dataset once and freezes it together with the
dichotomy → item-index lookup the orchestrator needs, so every scoring request
works from one immutable snapshot.
"""
from __future__ import annotations

import json
import logging
import math
import threading
import importlib.resources as ir
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from . import config
from .dichotomies import DICHOTOMIES, DICHOTOMY_ORDER
from .types import ItemParams

log = logging.getLogger(__name__)

__all__ = [
    "ItemTableError",
    "ItemParameterTable",
    "ParameterRegistry",
    "build_table",
    "load_item_params",
    "DEFAULT_DATASET",
]

DEFAULT_DATASET = "data/item_params.json"


class ItemTableError(ValueError):
    """The item parameter dataset violates its contract."""


@dataclass(frozen=True)
class ItemParameterTable:
    version: str
    items: Tuple[ItemParams, ...]
    by_dichotomy: Mapping[str, Tuple[int, ...]]
    by_facet: Mapping[str, Tuple[int, ...]]

    def __len__(self) -> int:
        return len(self.items)

    def item(self, index: int) -> ItemParams:
        if not 0 <= int(index) < len(self.items):
            raise KeyError(index)
        return self.items[int(index)]

    def indices_for(self, dichotomy: str) -> Tuple[int, ...]:
        return self.by_dichotomy.get(dichotomy, ())

    def indices_for_facet(self, facet: str) -> Tuple[int, ...]:
        return self.by_facet.get(facet, ())

    def summary(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "items": len(self.items),
            "dichotomies": {d: len(self.indices_for(d)) for d in DICHOTOMY_ORDER},
            "facets": {f: len(ix) for f, ix in sorted(self.by_facet.items())},
        }


def _as_float(raw: Any, field: str, index: Any) -> float:
    try:
        val = float(raw)
    except (TypeError, ValueError):
        raise ItemTableError(f"item {index}: {field} must be a number, got {raw!r}") from None
    if not math.isfinite(val):
        raise ItemTableError(f"item {index}: {field} must be finite, got {raw!r}")
    return val


def _parse_record(raw: Mapping[str, Any]) -> ItemParams:
    index = raw.get("index")
    try:
        idx = int(index)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ItemTableError(f"item index must be an integer, got {index!r}") from None

    dichotomy = raw.get("dichotomy")
    if dichotomy not in DICHOTOMIES:
        raise ItemTableError(f"item {idx}: unknown dichotomy {dichotomy!r}")

    # accept the nested {"params": {"a":..,"b":..}} shape as well as flat a/b
    params = raw.get("params") if isinstance(raw.get("params"), Mapping) else raw
    a = _as_float(params.get("a"), "a", idx)
    b = _as_float(params.get("b"), "b", idx)
    if a <= 0.0:
        raise ItemTableError(f"item {idx}: discrimination a must be > 0, got {a}")

    facet = raw.get("facet", raw.get("primaryFacet"))
    flags = tuple(str(f) for f in (raw.get("flags") or ()))
    return ItemParams(index=idx, dichotomy=str(dichotomy), a=a, b=b,
                      facet=str(facet) if facet else None, flags=flags)


def build_table(records: Iterable[Mapping[str, Any]], version: str) -> ItemParameterTable:
    """Validate raw records and freeze them into an ``ItemParameterTable``.

    Indices must be contiguous and 0-based; any violation raises
    ``ItemTableError`` rather than producing a table with gaps.
    """

    parsed = sorted((_parse_record(r) for r in records), key=lambda it: it.index)
    if not parsed:
        raise ItemTableError("item parameter table is empty")
    for expected, item in enumerate(parsed):
        if item.index != expected:
            if item.index < expected:
                raise ItemTableError(f"duplicate item index {item.index}")
            raise ItemTableError(f"item indices must be contiguous from 0; missing {expected}")

    by_dichotomy: Dict[str, List[int]] = {d: [] for d in DICHOTOMY_ORDER}
    by_facet: Dict[str, List[int]] = {}
    for item in parsed:
        by_dichotomy[item.dichotomy].append(item.index)
        if item.facet:
            by_facet.setdefault(item.facet, []).append(item.index)

    return ItemParameterTable(
        version=str(version),
        items=tuple(parsed),
        by_dichotomy=MappingProxyType({d: tuple(ix) for d, ix in by_dichotomy.items()}),
        by_facet=MappingProxyType({f: tuple(ix) for f, ix in by_facet.items()}),
    )


def _table_from_payload(payload: Any, fallback_version: str) -> ItemParameterTable:
    if isinstance(payload, list):
        return build_table(payload, fallback_version)
    if isinstance(payload, Mapping):
        items = payload.get("items")
        if isinstance(items, list):
            return build_table(items, str(payload.get("version") or fallback_version))
        # legacy shape: {"0": {...}, "1": {...}}
        records = []
        for key, rec in payload.items():
            if isinstance(rec, Mapping):
                records.append({"index": key, **rec})
        if records:
            return build_table(records, fallback_version)
    raise ItemTableError("item parameter payload must be a list or an object with 'items'")


def load_item_params(path: Optional[str | Path] = None) -> ItemParameterTable:
    """Load a parameter dataset from ``path`` or the packaged default."""

    src = path or config.ITEM_PARAMS_PATH
    if src:
        p = Path(src)
        try:
            text = p.read_text(encoding="utf-8")
        except OSError as exc:
            raise ItemTableError(f"cannot read item parameters from {p}: {exc}") from exc
        fallback = p.stem
    else:
        text = ir.files(__package__).joinpath(DEFAULT_DATASET).read_text(encoding="utf-8")
        fallback = "packaged"
    try:
        payload = json.loads(text)
    except ValueError as exc:
        raise ItemTableError(f"item parameters are not valid JSON: {exc}") from exc
    table = _table_from_payload(payload, fallback)
    log.info("loaded item parameters version=%s items=%d", table.version, len(table))
    return table


class ParameterRegistry:
    """Process-wide holder of the current parameter table.

    Readers call ``current()`` once per scoring request and keep the returned
    snapshot; ``reload`` builds the replacement completely before swapping the
    reference, so a request never sees a half-loaded table.
    """

    def __init__(self, table: Optional[ItemParameterTable] = None) -> None:
        self._lock = threading.Lock()
        self._table = table

    def current(self) -> ItemParameterTable:
        table = self._table
        if table is None:
            with self._lock:
                if self._table is None:
                    self._table = load_item_params()
                table = self._table
        return table

    def reload(self, path: Optional[str | Path] = None) -> ItemParameterTable:
        fresh = load_item_params(path)
        with self._lock:
            previous = self._table
            self._table = fresh
        log.info(
            "item parameters reloaded: %s -> %s",
            previous.version if previous else None,
            fresh.version,
        )
        return fresh

