from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Set

from worldrunes.domain.catalog import Catalog
from worldrunes.domain.models import (
    Region,
    SearchTrace,
    SizeTrace,
    SolverConfig,
    SolverResult,
    TeamComposition,
    Unit,
)
from worldrunes.domain.search_policy import DEFAULT_POLICY, SearchPolicy
from worldrunes.engine.combinations import generate_combinations
from worldrunes.engine.validator import (
    ValidationResult,
    explain_composition,
    passes_prefilter,
    required_units,
    validate_composition,
)

logger = logging.getLogger(__name__)

MAX_TOTAL_RESULTS = 2000
# Brute force runs while fewer results than this have been accepted overall.
SMART_RESULT_TARGET = 10
SMART_PHASE_MIN_SIZE = 5
LARGE_POOL_WARNING = 50
INVALID_LOG_LIMIT = 3

# (max team size, combinations examined per size). Sizes 5-6 hold most
# valid teams and get the largest share.
_BUDGET_BY_SIZE = (
    (2, 10000),
    (3, 5000),
    (4, 2000),
    (5, 50000),
    (6, 20000),
    (7, 5000),
)
_BUDGET_LARGE_TEAMS = 2000


def max_combinations_for_size(size: int) -> int:
    for limit, budget in _BUDGET_BY_SIZE:
        if int(size) <= limit:
            return budget
    return _BUDGET_LARGE_TEAMS


@dataclass
class SearchOutcome:
    generation: int
    results: List[SolverResult]
    trace: SearchTrace = field(default_factory=SearchTrace)


class ResultStore:
    """Accepted compositions, unique by sorted unit ids, capped."""

    def __init__(self, cap: int = MAX_TOTAL_RESULTS):
        self.cap = int(cap)
        self._seen: Set[str] = set()
        self._results: List[SolverResult] = []

    def __len__(self) -> int:
        return len(self._results)

    @property
    def results(self) -> List[SolverResult]:
        return list(self._results)

    def is_full(self) -> bool:
        return len(self._results) >= self.cap

    def add(self, units: Sequence[Unit], validation: ValidationResult) -> bool:
        if self.is_full() or not validation.valid:
            return False
        composition = TeamComposition(
            units=tuple(units),
            emblem_assignments=validation.emblem_assignments,
            active_regions=validation.active_regions,
        )
        key = composition.signature()
        if key in self._seen:
            return False
        self._seen.add(key)
        self._results.append(SolverResult.from_composition(composition))
        return True


def unique_units(units: Sequence[Unit]) -> List[Unit]:
    out: List[Unit] = []
    seen: Set[str] = set()
    for unit in units:
        if unit.id in seen:
            continue
        seen.add(unit.id)
        out.append(unit)
    return out


def filter_units(units: Sequence[Unit], config: SolverConfig) -> List[Unit]:
    """Candidate pool: allow list, deny list, then unlockable units last."""
    filtered = list(units)
    if config.required_units:
        allowed = set(config.required_units)
        filtered = [u for u in filtered if u.id in allowed]
    if config.excluded_units:
        excluded = set(config.excluded_units)
        filtered = [u for u in filtered if u.id not in excluded]
    filtered.sort(key=lambda u: 1 if u.unlockable else 0)
    return filtered


class _SizeSearch:
    def __init__(
        self,
        size: int,
        emblem_1: str,
        emblem_2: str,
        regions: Mapping[str, Region],
        store: ResultStore,
        size_trace: SizeTrace,
        is_cancelled: Optional[Callable[[], bool]] = None,
    ):
        self.size = int(size)
        self.emblem_1 = emblem_1
        self.emblem_2 = emblem_2
        self.regions = regions
        self.store = store
        self.trace = size_trace
        self.is_cancelled = is_cancelled
        self.required_1 = required_units(regions.get(emblem_1))
        self.required_2 = required_units(regions.get(emblem_2))
        self.cancelled = False
        self._invalid_logged = 0

    def exhausted(self) -> bool:
        if self.trace.checked >= self.trace.budget or self.store.is_full():
            return True
        if self.is_cancelled is not None and self.is_cancelled():
            self.cancelled = True
        return self.cancelled

    def check(self, team: Sequence[Unit], prefilter: bool = True) -> None:
        self.trace.checked += 1
        if prefilter and not passes_prefilter(team, self.emblem_1, self.emblem_2, self.required_1, self.required_2):
            return
        validation = validate_composition(team, self.emblem_1, self.emblem_2, self.regions)
        if not validation.valid:
            if not prefilter:
                self._log_invalid(team)
            return
        self.trace.valid += 1
        if self.store.add(team, validation):
            self.trace.accepted += 1

    def _log_invalid(self, team: Sequence[Unit]) -> None:
        if self._invalid_logged >= INVALID_LOG_LIMIT or not logger.isEnabledFor(logging.DEBUG):
            return
        self._invalid_logged += 1
        report = explain_composition(team, self.emblem_1, self.emblem_2, self.regions)
        logger.debug(
            "  invalid #%d %s: %s (%d active, need 4)",
            self._invalid_logged,
            [u.id for u in team],
            report.summary(),
            report.active_count,
        )


@dataclass
class _Seeds:
    emblem_1_groups: List[List[Unit]]
    emblem_2_groups: List[List[Unit]]
    anchors: List[Unit]
    filler_pairs: Dict[str, List[List[Unit]]]


def _build_seeds(
    pool: Sequence[Unit],
    emblem_1: str,
    emblem_2: str,
    regions: Mapping[str, Region],
    policy: SearchPolicy,
) -> Optional[_Seeds]:
    emblem_1_units = [u for u in pool if u.has_region(emblem_1)]
    emblem_2_units = [u for u in pool if u.has_region(emblem_2)]
    anchor_units = [u for u in pool if u.has_region(policy.anchor_region)]
    # The emblem itself grants one contribution.
    need_1 = max(0, required_units(regions.get(emblem_1)) - 1)
    need_2 = max(0, required_units(regions.get(emblem_2)) - 1)
    if len(emblem_1_units) < need_1 or len(emblem_2_units) < need_2 or not anchor_units:
        return None

    def _groups(units: List[Unit], need: int) -> List[List[Unit]]:
        if need <= 0:
            return [[]]
        groups = list(generate_combinations(units, need, policy.emblem_group_limit))
        return groups[: policy.emblem_group_take]

    filler_pairs: Dict[str, List[List[Unit]]] = {}
    for region_id in policy.filler_regions:
        members = [u for u in pool if u.has_region(region_id)]
        pairs = list(generate_combinations(members, 2, policy.filler_pair_limit))
        filler_pairs[region_id] = pairs[: policy.filler_pair_take]

    logger.debug(
        "seeds: %s=%d units, %s=%d units, %s=%d units, fillers=%s",
        emblem_1,
        len(emblem_1_units),
        emblem_2,
        len(emblem_2_units),
        policy.anchor_region,
        len(anchor_units),
        {k: len(v) for k, v in filler_pairs.items()},
    )
    return _Seeds(
        emblem_1_groups=_groups(emblem_1_units, need_1),
        emblem_2_groups=_groups(emblem_2_units, need_2),
        anchors=anchor_units[: policy.anchor_take],
        filler_pairs=filler_pairs,
    )


def _run_smart_phase(
    search: _SizeSearch,
    pool: Sequence[Unit],
    seeds: _Seeds,
    policy: SearchPolicy,
) -> None:
    size = search.size
    for e1_group in seeds.emblem_1_groups:
        for e2_group in seeds.emblem_2_groups:
            for anchor in seeds.anchors:
                for region_id in policy.filler_regions:
                    for pair in seeds.filler_pairs.get(region_id, []):
                        if search.exhausted():
                            return
                        base = unique_units([*e1_group, *e2_group, anchor, *pair])
                        if len(base) == size:
                            search.check(base)
                        elif len(base) < size:
                            used = {u.id for u in base}
                            remaining = [u for u in pool if u.id not in used]
                            for fill in generate_combinations(remaining, size - len(base), policy.fill_limit):
                                if search.exhausted():
                                    break
                                search.check(base + fill)


def _run_brute_force(search: _SizeSearch, pool: Sequence[Unit]) -> None:
    remaining_budget = search.trace.budget - search.trace.checked
    for team in generate_combinations(pool, search.size, remaining_budget):
        if search.exhausted():
            break
        search.check(team, prefilter=False)


def search_with_trace(
    emblem_1: str,
    emblem_2: str,
    config: SolverConfig,
    catalog: Catalog,
    policy: SearchPolicy = DEFAULT_POLICY,
    is_cancelled: Optional[Callable[[], bool]] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    generation: int = 0,
) -> SearchOutcome:
    """
    Seeded composition search:
    - team sizes from ``config.min_units`` up to the smallest size cap
    - per size a seeded phase (emblem regions + anchor + filler pair), then
      plain enumeration while fewer than SMART_RESULT_TARGET teams were found
    - every phase is budgeted; results are best effort, never exhaustive
    """
    trace = SearchTrace()
    if not emblem_1 or not emblem_2:
        return SearchOutcome(generation, [], trace)
    regions = catalog.region_lookup()
    if emblem_1 not in regions or emblem_2 not in regions:
        logger.info("unknown emblem region(s): %s, %s", emblem_1, emblem_2)
        return SearchOutcome(generation, [], trace)

    pool = filter_units(catalog.units, config)
    trace.pool_size = len(pool)
    if len(pool) > LARGE_POOL_WARNING:
        logger.warning("large unit pool (%d units), results may be limited", len(pool))
    effective_max = min(int(config.max_units), int(config.max_board_size), len(pool))
    trace.effective_max_units = effective_max

    store = ResultStore()
    seeds: Optional[_Seeds] = None
    seeds_built = False

    for size in range(max(1, int(config.min_units)), effective_max + 1):
        if store.is_full():
            trace.result_cap_reached = True
            break
        size_trace = SizeTrace(size=size, budget=max_combinations_for_size(size))
        trace.sizes.append(size_trace)
        search = _SizeSearch(size, emblem_1, emblem_2, regions, store, size_trace, is_cancelled)

        if size >= SMART_PHASE_MIN_SIZE:
            if not seeds_built:
                seeds = _build_seeds(pool, emblem_1, emblem_2, regions, policy)
                seeds_built = True
            if seeds is not None:
                size_trace.smart_attempted = True
                _run_smart_phase(search, pool, seeds, policy)

        if len(store) < SMART_RESULT_TARGET and not search.cancelled:
            size_trace.brute_force_attempted = True
            _run_brute_force(search, pool)

        logger.debug(
            "size %d: budget %d, checked %d, valid %d, accepted %d, total %d",
            size,
            size_trace.budget,
            size_trace.checked,
            size_trace.valid,
            size_trace.accepted,
            len(store),
        )
        if progress_callback is not None:
            progress_callback(size, effective_max)
        if search.cancelled:
            trace.cancelled = True
            break

    if store.is_full():
        trace.result_cap_reached = True
    logger.info(
        "search %s+%s: %d results, %d candidates checked over %d sizes",
        emblem_1,
        emblem_2,
        len(store),
        trace.total_checked,
        len(trace.sizes),
    )
    return SearchOutcome(generation, store.results, trace)


def search(
    emblem_1: str,
    emblem_2: str,
    config: SolverConfig,
    catalog: Catalog,
    policy: SearchPolicy = DEFAULT_POLICY,
) -> List[SolverResult]:
    return search_with_trace(emblem_1, emblem_2, config, catalog, policy=policy).results
