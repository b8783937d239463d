from __future__ import annotations

from typing import FrozenSet, List, Sequence, Tuple

from worldrunes.domain.models import SolverResult

_HASH_MASK = 0xFFFFFFFF


def unit_signature(result: SolverResult, sep: str = "|") -> str:
    return sep.join(sorted(u.id for u in result.composition.units))


def signature_hash(result: SolverResult) -> int:
    # 32-bit polynomial string hash; only used as a stable tie-break.
    h = 0
    for ch in unit_signature(result):
        h = (h * 31 + ord(ch)) & _HASH_MASK
    return h


def rank_key(result: SolverResult) -> Tuple[int, int, int, int, str]:
    return (
        int(result.unit_count),
        int(result.total_cost),
        int(result.four_cost_count()),
        signature_hash(result),
        unit_signature(result),
    )


def _group_key(result: SolverResult) -> Tuple[int, int, int]:
    return (int(result.unit_count), int(result.total_cost), int(result.four_cost_count()))


def _unit_id_set(result: SolverResult) -> FrozenSet[str]:
    return frozenset(u.id for u in result.composition.units)


def _diversify(group: List[SolverResult]) -> List[SolverResult]:
    # group is already ordered by fingerprint; start from the lowest.
    remaining = list(group)
    ordered = [remaining.pop(0)]
    while remaining:
        prev = _unit_id_set(ordered[-1])
        best_idx = 0
        best_diff = -1
        for idx, candidate in enumerate(remaining):
            diff = len(prev.symmetric_difference(_unit_id_set(candidate)))
            if diff > best_diff:
                best_diff = diff
                best_idx = idx
        ordered.append(remaining.pop(best_idx))
    return ordered


def rank_and_diversify(results: Sequence[SolverResult]) -> List[SolverResult]:
    """Order results: fewest units, cheapest, fewest 4-cost units.

    Within a run of equal (units, cost, 4-cost count) each next team is the one
    differing most from the team shown right before it.
    """
    base_sorted = sorted(results, key=rank_key)
    out: List[SolverResult] = []
    i = 0
    while i < len(base_sorted):
        key = _group_key(base_sorted[i])
        group: List[SolverResult] = []
        while i < len(base_sorted) and _group_key(base_sorted[i]) == key:
            group.append(base_sorted[i])
            i += 1
        if len(group) <= 1:
            out.extend(group)
            continue
        out.extend(_diversify(group))
    return out
