from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Dict, List, Tuple

MIN_ACTIVE_REGIONS = 4
MIN_BOARD_SIZE = 4
MAX_BOARD_SIZE = 10


@dataclass(frozen=True)
class Unit:
    id: str
    name: str
    cost: int
    regions: Tuple[str, ...]
    unlockable: bool = False

    def has_region(self, region_id: str) -> bool:
        return region_id in self.regions


@dataclass(frozen=True)
class Region:
    id: str
    name: str
    color: str = ""
    required_units: int = 1   # contributing units needed to activate the trait


@dataclass(frozen=True)
class EmblemAssignment:
    unit_id: str
    region_id: str


@dataclass(frozen=True)
class TeamComposition:
    units: Tuple[Unit, ...]
    emblem_assignments: Tuple[EmblemAssignment, ...] = ()
    active_regions: Tuple[str, ...] = ()

    def unit_ids(self) -> List[str]:
        return [u.id for u in self.units]

    def signature(self) -> str:
        return ",".join(sorted(self.unit_ids()))

    def display_units(self) -> List[Unit]:
        """Units in board order: cheapest first, then by name."""
        return sorted(self.units, key=lambda u: (int(u.cost), u.name))

    def emblem_region_for(self, unit_id: str) -> str:
        # The last assignment wins when one unit carries both emblems.
        region = ""
        for assignment in self.emblem_assignments:
            if assignment.unit_id == unit_id:
                region = assignment.region_id
        return region

    def region_counts(self) -> Dict[str, int]:
        """Native plus emblem contributions per region, in first-seen order."""
        counts: Dict[str, int] = {}
        for unit in self.units:
            for region_id in unit.regions:
                counts[region_id] = counts.get(region_id, 0) + 1
        for assignment in self.emblem_assignments:
            counts[assignment.region_id] = counts.get(assignment.region_id, 0) + 1
        return counts


@dataclass(frozen=True)
class SolverConfig:
    max_board_size: int = 9
    min_units: int = 5
    max_units: int = 8
    required_units: Tuple[str, ...] = ()   # allow list, empty = every unit
    excluded_units: Tuple[str, ...] = ()   # deny list

    def normalized(self) -> "SolverConfig":
        board = max(MIN_BOARD_SIZE, min(MAX_BOARD_SIZE, int(self.max_board_size or 0)))
        min_units = max(1, int(self.min_units or 0))
        max_units = min(int(self.max_units or 0), board)
        return replace(self, max_board_size=board, min_units=min_units, max_units=max_units)


@dataclass(frozen=True)
class SolverResult:
    composition: TeamComposition
    unit_count: int
    region_count: int
    total_cost: int

    @staticmethod
    def from_composition(composition: TeamComposition) -> "SolverResult":
        return SolverResult(
            composition=composition,
            unit_count=len(composition.units),
            region_count=len(composition.active_regions),
            total_cost=sum(int(u.cost or 0) for u in composition.units),
        )

    def four_cost_count(self) -> int:
        return sum(1 for u in self.composition.units if int(u.cost) == 4)


@dataclass
class SizeTrace:
    size: int
    budget: int
    checked: int = 0
    valid: int = 0
    accepted: int = 0
    smart_attempted: bool = False
    brute_force_attempted: bool = False


@dataclass
class SearchTrace:
    # Per-invocation progress; callers own it, nothing here is shared.
    pool_size: int = 0
    effective_max_units: int = 0
    sizes: List[SizeTrace] = field(default_factory=list)
    result_cap_reached: bool = False
    cancelled: bool = False

    @property
    def total_checked(self) -> int:
        return sum(s.checked for s in self.sizes)

    @property
    def total_accepted(self) -> int:
        return sum(s.accepted for s in self.sizes)
