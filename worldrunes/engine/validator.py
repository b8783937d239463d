from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from worldrunes.domain.models import MIN_ACTIVE_REGIONS, EmblemAssignment, Region, Unit


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    active_regions: Tuple[str, ...] = ()
    emblem_assignments: Tuple[EmblemAssignment, ...] = ()


@dataclass(frozen=True)
class RegionCheck:
    region_id: str
    count: int
    required: int
    active: bool


@dataclass
class CompositionReport:
    carrier_1: str = ""
    carrier_2: str = ""
    checks: List[RegionCheck] = field(default_factory=list)

    @property
    def active_count(self) -> int:
        return sum(1 for c in self.checks if c.active)

    def summary(self) -> str:
        return ", ".join(
            f"{c.region_id}:{c.count}/{c.required}{'+' if c.active else '-'}" for c in self.checks
        )


def required_units(region: Optional[Region]) -> int:
    if region is None:
        return 1
    return int(region.required_units or 0) or 1


def count_region_units(units: Sequence[Unit]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for unit in units:
        for region_id in unit.regions:
            counts[region_id] = counts.get(region_id, 0) + 1
    return counts


def find_carrier(units: Sequence[Unit], region_id: str) -> Optional[Unit]:
    # First unit in input order that lacks the region natively.
    for unit in units:
        if region_id not in unit.regions:
            return unit
    return None


def _region_checks(
    counts: Dict[str, int],
    emblem_1: str,
    emblem_2: str,
    regions: Mapping[str, Region],
) -> List[RegionCheck]:
    to_check = list(counts.keys())
    for emblem in (emblem_1, emblem_2):
        if emblem not in counts and emblem not in to_check:
            to_check.append(emblem)
    checks: List[RegionCheck] = []
    for region_id in to_check:
        region = regions.get(region_id)
        if region is None:
            continue
        count = int(counts.get(region_id, 0))
        required = required_units(region)
        checks.append(RegionCheck(region_id, count, required, count >= required))
    return checks


def validate_composition(
    units: Sequence[Unit],
    emblem_1: str,
    emblem_2: str,
    regions: Mapping[str, Region],
) -> ValidationResult:
    """Place both emblems on first-match carriers and check region activation.

    ``units`` must already be unique by id. A composition is valid when both
    emblems have a carrier lacking the region natively and at least
    ``MIN_ACTIVE_REGIONS`` regions reach their required unit count.
    """
    counts = count_region_units(units)

    carrier_1 = find_carrier(units, emblem_1)
    if carrier_1 is None:
        return ValidationResult(False)
    counts[emblem_1] = counts.get(emblem_1, 0) + 1

    carrier_2 = find_carrier(units, emblem_2)
    if carrier_2 is None:
        return ValidationResult(False)
    counts[emblem_2] = counts.get(emblem_2, 0) + 1

    active = tuple(c.region_id for c in _region_checks(counts, emblem_1, emblem_2, regions) if c.active)
    if len(active) < MIN_ACTIVE_REGIONS:
        return ValidationResult(False, active_regions=active)

    return ValidationResult(
        True,
        active_regions=active,
        emblem_assignments=(
            EmblemAssignment(unit_id=carrier_1.id, region_id=emblem_1),
            EmblemAssignment(unit_id=carrier_2.id, region_id=emblem_2),
        ),
    )


def explain_composition(
    units: Sequence[Unit],
    emblem_1: str,
    emblem_2: str,
    regions: Mapping[str, Region],
) -> CompositionReport:
    """Region counts after emblem placement, for diagnostics of rejected teams."""
    counts = count_region_units(units)
    report = CompositionReport()
    carrier_1 = find_carrier(units, emblem_1)
    if carrier_1 is not None:
        report.carrier_1 = carrier_1.id
        counts[emblem_1] = counts.get(emblem_1, 0) + 1
    carrier_2 = find_carrier(units, emblem_2)
    if carrier_2 is not None:
        report.carrier_2 = carrier_2.id
        counts[emblem_2] = counts.get(emblem_2, 0) + 1
    report.checks = _region_checks(counts, emblem_1, emblem_2, regions)
    return report


def passes_prefilter(
    units: Sequence[Unit],
    emblem_1: str,
    emblem_2: str,
    required_1: int,
    required_2: int,
) -> bool:
    """Cheap necessary conditions checked before full validation."""
    native_1 = sum(1 for u in units if emblem_1 in u.regions)
    native_2 = sum(1 for u in units if emblem_2 in u.regions)
    if native_1 + 1 < int(required_1) or native_2 + 1 < int(required_2):
        return False
    if find_carrier(units, emblem_1) is None or find_carrier(units, emblem_2) is None:
        return False
    return True
