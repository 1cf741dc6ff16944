"""Cross-cloud identity merging.

An object documented by several clouds is stored once. Its description and
fields come from one candidate, picked by a single policy function; every
other candidate only adds its cloud to the membership list.

Known limitation: with ``first_wins`` an object's field list reflects only
the first cloud that documented it. Field sets are not unioned.
"""

from dataclasses import replace
from typing import Callable, Iterable

from sf_reference.domain.models import EntityRecord

CanonicalPolicy = Callable[[EntityRecord, EntityRecord], EntityRecord]


def first_wins(existing: EntityRecord, candidate: EntityRecord) -> EntityRecord:
    """Keep the record seen first; clouds are processed in configured order."""
    return existing


def merge_records(
    candidates: Iterable[EntityRecord],
    choose: CanonicalPolicy = first_wins,
) -> list[EntityRecord]:
    """Fold candidates sharing a name into one record per name.

    Args:
        candidates: Records in processing order.
        choose: Picks the canonical content between two records of one name.

    Returns:
        One record per name, in first-appearance order. ``clouds`` is the
        union of every candidate's clouds in the order they were seen, and
        ``cloud`` stays the first cloud seen.
    """
    merged: dict[str, EntityRecord] = {}
    for candidate in candidates:
        existing = merged.get(candidate.name)
        if existing is None:
            merged[candidate.name] = replace(
                candidate,
                fields=dict(candidate.fields),
                clouds=_union(candidate.clouds, [candidate.cloud]),
            )
            continue
        chosen = choose(existing, candidate)
        merged[candidate.name] = replace(
            chosen,
            cloud=existing.cloud,
            clouds=_union(existing.clouds, candidate.clouds, [candidate.cloud]),
        )
    return list(merged.values())


def _union(*groups: list[str]) -> list[str]:
    result: list[str] = []
    for group in groups:
        for cloud in group:
            if cloud and cloud not in result:
                result.append(cloud)
    return result
