from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Callable, Dict, Iterable, List, Sequence

from worldrunes.domain.models import SolverResult, Unit
from worldrunes.domain.search_policy import DEFAULT_POLICY

CanonicalId = Callable[[str], str]


@dataclass
class UnlockFilterResult:
    """Outcome of the unlock gate.

    ``min_unit_count_filtered`` is 0 when every result was hidden, so it can
    be below ``min_unit_count_all``; ``has_team`` tells that case apart. No
    unlock suggestion is made then.
    """

    filtered: List[SolverResult]
    unlock_suggestions: List[Unit] = field(default_factory=list)
    min_unit_count_all: int = 0
    min_unit_count_filtered: int = 0

    @property
    def has_team(self) -> bool:
        return bool(self.filtered)

    @property
    def has_higher_minimum(self) -> bool:
        return self.min_unit_count_filtered > self.min_unit_count_all


def locked_units(result: SolverResult, unlocked_ids: AbstractSet[str]) -> List[Unit]:
    return [u for u in result.composition.units if u.unlockable and u.id not in unlocked_ids]


def canonical_signature(result: SolverResult, canonical_id: CanonicalId) -> str:
    return "|".join(sorted(canonical_id(u.id) for u in result.composition.units))


def _min_unit_count(results: Sequence[SolverResult]) -> int:
    return min((int(r.unit_count) for r in results), default=0)


def _suggest_unlocks(
    results: Sequence[SolverResult],
    min_all: int,
    unlocked_ids: AbstractSet[str],
) -> List[Unit]:
    smallest = [r for r in results if int(r.unit_count) == min_all]
    if not smallest:
        return []
    # Fewest locked units; min() keeps the first of equals.
    best = min(smallest, key=lambda r: len(locked_units(r, unlocked_ids)))
    out: List[Unit] = []
    seen = set()
    for unit in locked_units(best, unlocked_ids):
        if unit.id in seen:
            continue
        seen.add(unit.id)
        out.append(unit)
    return out


def apply_unlock_filter(
    results: Sequence[SolverResult],
    unlocked_ids: Iterable[str],
    canonical_id: CanonicalId | None = None,
) -> UnlockFilterResult:
    """Hide teams needing locked units and collapse interchangeable variants.

    When that raises the smallest reachable team size, suggest the locked
    units whose unlock brings it back down.
    """
    unlocked = frozenset(unlocked_ids or ())
    to_canonical = canonical_id or DEFAULT_POLICY.canonical_id()

    by_signature: Dict[str, SolverResult] = {}
    for result in results:
        if locked_units(result, unlocked):
            continue
        by_signature.setdefault(canonical_signature(result, to_canonical), result)
    filtered = list(by_signature.values())

    min_all = _min_unit_count(results)
    min_filtered = _min_unit_count(filtered)
    suggestions: List[Unit] = []
    if min_filtered > min_all:
        suggestions = _suggest_unlocks(results, min_all, unlocked)

    return UnlockFilterResult(
        filtered=filtered,
        unlock_suggestions=suggestions,
        min_unit_count_all=min_all,
        min_unit_count_filtered=min_filtered,
    )
