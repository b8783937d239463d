from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Tuple


# ============================================================
# Region tables for the seeded search
# ============================================================
# Anchor: activates with a single unit, one is always seeded.
# Filler: activates with a pair; tried in this order, one pair per candidate.
DEFAULT_ANCHOR_REGION = "targon"
DEFAULT_FILLER_REGIONS: Tuple[str, ...] = (
    "piltover",
    "yordle",
    "shadow-isles",
    "void",
)

# Regions that exist as traits but have no emblem item.
DEFAULT_NON_EMBLEM_REGIONS: Tuple[str, ...] = ("targon", "shadow-isles")

# Only one of these four can show up per game, so teams differing only in
# which one they use are the same team for the player.
DEFAULT_INTERCHANGEABLE_UNITS: Tuple[str, ...] = ("aphelios", "leona", "zoe", "taric")
DEFAULT_INTERCHANGEABLE_TOKEN = "targon-1of4"


@dataclass(frozen=True)
class SearchPolicy:
    anchor_region: str = DEFAULT_ANCHOR_REGION
    filler_regions: Tuple[str, ...] = DEFAULT_FILLER_REGIONS
    non_emblem_regions: Tuple[str, ...] = DEFAULT_NON_EMBLEM_REGIONS
    interchangeable_units: Tuple[str, ...] = DEFAULT_INTERCHANGEABLE_UNITS
    interchangeable_token: str = DEFAULT_INTERCHANGEABLE_TOKEN
    # Seeding caps: generated / actually tried.
    emblem_group_limit: int = 80
    emblem_group_take: int = 60
    anchor_take: int = 10
    filler_pair_limit: int = 20
    filler_pair_take: int = 10
    fill_limit: int = 50

    def canonical_id(self) -> Callable[[str], str]:
        return make_canonical_id(self.interchangeable_units, self.interchangeable_token)


DEFAULT_POLICY = SearchPolicy()


def make_canonical_id(group: Tuple[str, ...], token: str) -> Callable[[str], str]:
    members = frozenset(group)

    def _canonical(unit_id: str) -> str:
        return token if unit_id in members else unit_id

    return _canonical


def identity_canonical_id(unit_id: str) -> str:
    return unit_id
