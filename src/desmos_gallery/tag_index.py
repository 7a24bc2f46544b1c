from __future__ import annotations

from collections.abc import Iterable

from .graph_contract import GraphRecord


def unique_sorted_tags(records: Iterable[GraphRecord]) -> list[str]:
    tags: set[str] = set()
    for record in records:
        tags.update(record.tags)
    return sorted(tags)
