"""Priority-ordered merge of per-provider results.

Several sources describe the same entity. For every field key the value of the
highest-priority provider that has a non-empty value wins; lower-priority
providers only fill gaps. The same resolver backs social links (one field per
link type) and per-code field merging.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping, Sized
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from redeemsync.domain.model import FieldProvenance, Provider

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


@dataclass(frozen=True, slots=True)
class ProviderResult[K: Hashable]:
    provider: Provider
    source_url: str
    fields: Mapping[K, object]


@dataclass(slots=True)
class MergeResult[K: Hashable]:
    fields: dict[K, object] = field(default_factory=dict)
    provenance: dict[K, FieldProvenance] = field(default_factory=dict)


def is_empty_value(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, Sized) and not isinstance(value, (bytes, bytearray)):
        return len(value) == 0
    return False


def order_by_priority[K: Hashable](
    results: Iterable[ProviderResult[K]],
    priority: Sequence[Provider],
) -> list[ProviderResult[K]]:
    """Stable-sort ``results`` by provider rank; unknown providers go last."""

    rank = {provider: index for index, provider in enumerate(priority)}
    fallback = len(rank)
    return sorted(results, key=lambda result: rank.get(result.provider, fallback))


def merge_by_priority[K: Hashable](
    results: Iterable[ProviderResult[K]],
    priority: Sequence[Provider] | None = None,
) -> MergeResult[K]:
    """Merge provider results, first non-empty value per field wins.

    ``results`` are taken in the order given unless ``priority`` is supplied, in
    which case they are re-ordered by it first. Input order of providers with
    the same rank is preserved, which keeps the outcome deterministic no matter
    in which order the sources finished fetching.
    """

    ordered = order_by_priority(results, priority) if priority is not None else list(results)
    merged: MergeResult[K] = MergeResult()
    for result in ordered:
        for key, value in result.fields.items():
            if key in merged.fields or is_empty_value(value):
                continue
            merged.fields[key] = value
            merged.provenance[key] = FieldProvenance(
                provider=result.provider,
                source_url=result.source_url,
            )
    return merged
