from __future__ import annotations

from worldrunes.domain.catalog import Catalog
from worldrunes.domain.models import MIN_ACTIVE_REGIONS, SolverConfig, Unit
from worldrunes.domain.search_policy import DEFAULT_POLICY, SearchPolicy
from worldrunes.engine.ranking import rank_and_diversify
from worldrunes.engine.solver import (
    MAX_TOTAL_RESULTS,
    ResultStore,
    _build_seeds,
    filter_units,
    max_combinations_for_size,
    search,
    search_with_trace,
    unique_units,
)
from worldrunes.engine.validator import ValidationResult, validate_composition


def _catalog(regions: list[tuple[str, int]], units: list[tuple[str, int, list[str]]]) -> Catalog:
    return Catalog.from_dict(
        {
            "regions": [{"id": rid, "name": rid.title(), "requiredUnits": req} for rid, req in regions],
            "units": [{"id": uid, "name": uid.upper(), "cost": cost, "regions": regs} for uid, cost, regs in units],
        }
    )


def _six_region_catalog() -> Catalog:
    # Smallest valid teams need five units: north + south (one native each plus
    # an emblem), the targon anchor, and a pair from east or piltover.
    return _catalog(
        [("north", 2), ("south", 2), ("east", 2), ("targon", 1), ("piltover", 2), ("west", 3)],
        [
            ("n1", 1, ["north"]),
            ("s1", 1, ["south"]),
            ("e1", 1, ["east"]),
            ("e2", 1, ["east"]),
            ("t1", 2, ["targon"]),
            ("p1", 3, ["piltover"]),
            ("p2", 3, ["piltover"]),
            ("w1", 2, ["west"]),
        ],
    )


def _ids(result) -> list[str]:
    return sorted(u.id for u in result.composition.units)


def test_budget_table() -> None:
    assert [max_combinations_for_size(s) for s in range(1, 10)] == [
        10000,
        10000,
        5000,
        2000,
        50000,
        20000,
        5000,
        2000,
        2000,
    ]


def test_two_region_catalog_has_no_results() -> None:
    catalog = _catalog(
        [("alpha", 1), ("beta", 2)],
        [("a1", 1, ["alpha"]), ("b1", 1, ["beta"]), ("b2", 2, ["beta"])],
    )
    for config in (SolverConfig(), SolverConfig(min_units=1, max_units=3)):
        assert search("alpha", "beta", config, catalog) == []


def test_smallest_valid_team_ranks_first() -> None:
    catalog = _six_region_catalog()
    config = SolverConfig(min_units=1, max_units=8, max_board_size=9)

    results = search("north", "south", config, catalog)
    ranked = rank_and_diversify(results)

    assert min(r.unit_count for r in results) == 5
    assert _ids(ranked[0]) == ["e1", "e2", "n1", "s1", "t1"]
    assert ranked[0].unit_count == 5
    assert ranked[0].total_cost == 6
    assert _ids(ranked[1]) == ["n1", "p1", "p2", "s1", "t1"]


def test_every_result_is_valid_and_carriers_lack_region() -> None:
    catalog = _six_region_catalog()
    results = search("north", "south", SolverConfig(min_units=1), catalog)
    assert results
    regions = catalog.region_lookup()
    for result in results:
        comp = result.composition
        assert len(comp.active_regions) >= MIN_ACTIVE_REGIONS
        assert result.region_count == len(comp.active_regions)
        assert len(comp.emblem_assignments) == 2
        for assignment in comp.emblem_assignments:
            carrier = catalog.unit(assignment.unit_id)
            assert carrier is not None and carrier in comp.units
            assert not carrier.has_region(assignment.region_id)
        assert validate_composition(list(comp.units), "north", "south", regions).valid


def test_results_are_unique_by_unit_set() -> None:
    results = search("north", "south", SolverConfig(min_units=1), _six_region_catalog())
    signatures = [r.composition.signature() for r in results]
    assert len(signatures) == len(set(signatures))


def test_result_sizes_stay_within_bounds() -> None:
    catalog = _six_region_catalog()
    results = search("north", "south", SolverConfig(min_units=5, max_units=6, max_board_size=9), catalog)
    assert results
    assert all(5 <= r.unit_count <= 6 for r in results)

    capped = search("north", "south", SolverConfig(min_units=1, max_units=8, max_board_size=5), catalog)
    assert capped
    assert all(r.unit_count <= 5 for r in capped)


def test_min_units_above_board_size_searches_nothing() -> None:
    outcome = search_with_trace(
        "north",
        "south",
        SolverConfig(min_units=9, max_units=10, max_board_size=8),
        _six_region_catalog(),
    )
    assert outcome.results == []
    assert outcome.trace.sizes == []
    assert outcome.trace.effective_max_units == 8


def test_excluding_the_only_anchor_unit_leaves_nothing() -> None:
    catalog = _catalog(
        [("north", 2), ("south", 2), ("targon", 1), ("east", 2)],
        [
            ("n1", 1, ["north"]),
            ("s1", 1, ["south"]),
            ("t1", 2, ["targon"]),
            ("e1", 1, ["east"]),
            ("e2", 1, ["east"]),
        ],
    )
    assert search("north", "south", SolverConfig(min_units=1), catalog)
    excluded = SolverConfig(min_units=1, excluded_units=("t1",))
    assert search("north", "south", excluded, catalog) == []


def test_required_units_restrict_the_pool() -> None:
    catalog = _six_region_catalog()
    allowed = SolverConfig(min_units=1, required_units=("n1", "s1", "t1", "p1", "p2", "w1"))
    results = search("north", "south", allowed, catalog)
    assert results
    for result in results:
        assert {"e1", "e2"}.isdisjoint(result.composition.unit_ids())


def test_unknown_or_missing_emblem_returns_empty() -> None:
    catalog = _six_region_catalog()
    assert search("north", "nowhere", SolverConfig(min_units=1), catalog) == []
    assert search("", "south", SolverConfig(min_units=1), catalog) == []


def test_search_is_deterministic() -> None:
    catalog = _six_region_catalog()
    config = SolverConfig(min_units=1)
    first = [r.composition.signature() for r in search("north", "south", config, catalog)]
    second = [r.composition.signature() for r in search("north", "south", config, catalog)]
    assert first == second


def test_trace_records_phases_per_size() -> None:
    outcome = search_with_trace("north", "south", SolverConfig(min_units=4, max_units=6), _six_region_catalog())
    sizes = {s.size: s for s in outcome.trace.sizes}
    assert sorted(sizes) == [4, 5, 6]
    assert not sizes[4].smart_attempted
    assert sizes[5].smart_attempted
    assert sizes[5].brute_force_attempted
    assert sizes[5].accepted >= 2
    assert outcome.trace.total_accepted == len(outcome.results)
    assert outcome.trace.pool_size == 8
    assert not outcome.trace.cancelled


def test_progress_callback_sees_each_size() -> None:
    seen: list[tuple[int, int]] = []
    search_with_trace(
        "north",
        "south",
        SolverConfig(min_units=5, max_units=7),
        _six_region_catalog(),
        progress_callback=lambda size, top: seen.append((size, top)),
    )
    assert seen == [(5, 7), (6, 7), (7, 7)]


def test_cancelled_search_stops_and_reports() -> None:
    outcome = search_with_trace(
        "north",
        "south",
        SolverConfig(min_units=1),
        _six_region_catalog(),
        is_cancelled=lambda: True,
        generation=7,
    )
    assert outcome.generation == 7
    assert outcome.results == []
    assert outcome.trace.cancelled
    assert len(outcome.trace.sizes) == 1


def test_result_store_dedups_and_caps() -> None:
    a = Unit(id="a", name="A", cost=1, regions=("x",))
    b = Unit(id="b", name="B", cost=1, regions=("y",))
    c = Unit(id="c", name="C", cost=1, regions=("z",))
    ok = ValidationResult(True, active_regions=("x", "y", "z", "w"))
    store = ResultStore(cap=2)

    assert store.add([a, b], ok)
    assert not store.add([b, a], ok)
    assert not store.add([a, c], ValidationResult(False))
    assert store.add([a, c], ok)
    assert store.is_full()
    assert not store.add([b, c], ok)
    assert len(store) == 2


def test_filter_units_puts_unlockable_last_keeping_order() -> None:
    units = [
        Unit(id="u1", name="U1", cost=1, regions=("x",), unlockable=True),
        Unit(id="u2", name="U2", cost=1, regions=("x",)),
        Unit(id="u3", name="U3", cost=1, regions=("x",), unlockable=True),
        Unit(id="u4", name="U4", cost=1, regions=("x",)),
    ]
    pool = filter_units(units, SolverConfig())
    assert [u.id for u in pool] == ["u2", "u4", "u1", "u3"]

    pool = filter_units(units, SolverConfig(required_units=("u1", "u2", "u3"), excluded_units=("u3",)))
    assert [u.id for u in pool] == ["u2", "u1"]


def test_unique_units_keeps_first_occurrence() -> None:
    a = Unit(id="a", name="A", cost=1, regions=("x",))
    b = Unit(id="b", name="B", cost=2, regions=("y",))
    assert unique_units([a, b, a]) == [a, b]


def _junk_then(core: list[tuple[str, int, list[str]]], junk: int = 40) -> Catalog:
    # Junk units come first in pool order, so plain enumeration spends its
    # whole budget on teams that can never activate four regions.
    return _catalog(
        [("north", 2), ("south", 2), ("targon", 1), ("piltover", 2), ("void", 2), ("junk", 99)],
        [(f"j{i:02d}", 1, ["junk"]) for i in range(junk)] + core,
    )


_CORE = [
    ("n1", 1, ["north"]),
    ("s1", 1, ["south"]),
    ("t1", 2, ["targon"]),
    ("p1", 3, ["piltover"]),
    ("p2", 3, ["piltover"]),
]


def test_seeded_phase_finds_team_hidden_behind_large_pool() -> None:
    outcome = search_with_trace("north", "south", SolverConfig(min_units=5, max_units=5), _junk_then(_CORE))

    assert [r.composition.signature() for r in outcome.results] == ["n1,p1,p2,s1,t1"]
    size_5 = outcome.trace.sizes[0]
    assert size_5.smart_attempted and size_5.brute_force_attempted
    assert size_5.checked == max_combinations_for_size(5)
    assert size_5.accepted == 1


def test_seeded_phase_fills_bases_smaller_than_team_size() -> None:
    outcome = search_with_trace("north", "south", SolverConfig(min_units=6, max_units=6), _junk_then(_CORE))

    assert len(outcome.results) == 40
    for result in outcome.results:
        ids = set(result.composition.unit_ids())
        assert {"n1", "s1", "t1", "p1", "p2"} <= ids
        assert len(ids) == 6
    # Enough teams came from seeding, so plain enumeration is skipped.
    assert not outcome.trace.sizes[0].brute_force_attempted


def test_seeded_phase_follows_filler_region_order() -> None:
    core = _CORE + [("v1", 3, ["void"]), ("v2", 3, ["void"])]
    config = SolverConfig(min_units=5, max_units=5)

    default_order = search("north", "south", config, _junk_then(core))
    assert [r.composition.signature() for r in default_order] == [
        "n1,p1,p2,s1,t1",
        "n1,s1,t1,v1,v2",
    ]

    void_first = SearchPolicy(filler_regions=("void", "piltover"))
    flipped = search("north", "south", config, _junk_then(core), policy=void_first)
    assert [r.composition.signature() for r in flipped] == [
        "n1,s1,t1,v1,v2",
        "n1,p1,p2,s1,t1",
    ]


def test_seeds_need_an_anchor_unit() -> None:
    catalog = _junk_then(_CORE)
    regions = catalog.region_lookup()
    with_anchor = _build_seeds(catalog.units, "north", "south", regions, DEFAULT_POLICY)
    assert with_anchor is not None
    assert [u.id for u in with_anchor.anchors] == ["t1"]
    assert with_anchor.filler_pairs["piltover"] and with_anchor.filler_pairs["void"] == []

    without_anchor = [u for u in catalog.units if u.id != "t1"]
    assert _build_seeds(without_anchor, "north", "south", regions, DEFAULT_POLICY) is None

    outcome = search_with_trace(
        "north",
        "south",
        SolverConfig(min_units=5, max_units=5, excluded_units=("t1",)),
        catalog,
    )
    assert not outcome.trace.sizes[0].smart_attempted
    assert outcome.results == []


def test_seeds_need_enough_emblem_region_units() -> None:
    catalog = _junk_then(_CORE)
    pool = [u for u in catalog.units if u.id != "n1"]
    assert _build_seeds(pool, "north", "south", catalog.region_lookup(), DEFAULT_POLICY) is None


def test_result_cap_stops_remaining_sizes() -> None:
    # Thirty units, one region each: every four-unit team is valid.
    regions = [(f"r{i:02d}", 1) for i in range(30)]
    units = [(f"u{i:02d}", 1, [f"r{i:02d}"]) for i in range(30)]
    catalog = _catalog(regions, units)

    outcome = search_with_trace("r00", "r01", SolverConfig(min_units=4), catalog)

    assert len(outcome.results) == MAX_TOTAL_RESULTS
    assert outcome.trace.result_cap_reached
    assert [(s.size, s.checked, s.accepted) for s in outcome.trace.sizes] == [(4, 2000, 2000)]


def test_checked_candidates_never_exceed_size_budget() -> None:
    catalog = _junk_then(_CORE + [("v1", 3, ["void"]), ("v2", 3, ["void"])], junk=30)
    outcome = search_with_trace("north", "south", SolverConfig(min_units=3, max_units=7), catalog)

    assert [s.size for s in outcome.trace.sizes] == [3, 4, 5, 6, 7]
    for size_trace in outcome.trace.sizes:
        assert size_trace.checked <= max_combinations_for_size(size_trace.size)
    # Sizes 3-5 fall through to plain enumeration, which uses the whole budget.
    assert [s.checked for s in outcome.trace.sizes[:3]] == [5000, 2000, 50000]
    assert not outcome.trace.sizes[3].brute_force_attempted
