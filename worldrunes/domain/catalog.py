from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from worldrunes.domain.models import Region, Unit
from worldrunes.domain.search_policy import DEFAULT_POLICY, SearchPolicy


class Catalog:
    """
    Offline unit/region catalog:
      catalog.json

    Schema:
    {
      "version": "16.1",
      "regions": [
        {"id": "piltover", "name": "Piltover", "color": "#c8aa6e", "requiredUnits": 2},
        ...
      ],
      "units": [
        {"id": "vi", "name": "Vi", "cost": 2, "regions": ["piltover"], "unlockable": false},
        ...
      ]
    }
    """
    def __init__(self, units: Iterable[Unit] = (), regions: Iterable[Region] = (), version: str = ""):
        self.version = str(version or "")
        self._units: List[Unit] = []
        self._regions: List[Region] = []
        self._unit_by_id: Dict[str, Unit] = {}
        self._region_by_id: Dict[str, Region] = {}
        for unit in units:
            if unit.id in self._unit_by_id:
                continue
            self._unit_by_id[unit.id] = unit
            self._units.append(unit)
        for region in regions:
            if region.id in self._region_by_id:
                continue
            self._region_by_id[region.id] = region
            self._regions.append(region)

    @staticmethod
    def load(path: str | Path) -> "Catalog":
        p = Path(path)
        if not p.exists():
            return Catalog()
        raw = json.loads(p.read_text(encoding="utf-8", errors="replace"))
        return Catalog.from_dict(raw)

    @staticmethod
    def from_dict(raw: Any) -> "Catalog":
        if not isinstance(raw, dict):
            raise ValueError("Catalog must be a JSON object at the top level.")
        regions: List[Region] = []
        for r in raw.get("regions", []) or []:
            region = Catalog._parse_region(r)
            if region is not None:
                regions.append(region)
        units: List[Unit] = []
        for u in raw.get("units", []) or []:
            unit = Catalog._parse_unit(u)
            if unit is not None:
                units.append(unit)
        return Catalog(units=units, regions=regions, version=str(raw.get("version") or ""))

    # ── queries ──────────────────────────────────────────────
    @property
    def units(self) -> List[Unit]:
        return list(self._units)

    @property
    def regions(self) -> List[Region]:
        return list(self._regions)

    def unit(self, unit_id: str) -> Optional[Unit]:
        return self._unit_by_id.get(str(unit_id))

    def region(self, region_id: str) -> Optional[Region]:
        return self._region_by_id.get(str(region_id))

    def region_lookup(self) -> Dict[str, Region]:
        return dict(self._region_by_id)

    def required_units_for(self, region_id: str) -> int:
        region = self.region(region_id)
        return int(region.required_units) if region else 1

    def region_name_for(self, region_id: str) -> str:
        region = self.region(region_id)
        return region.name if region else region_id

    def emblem_regions(self, policy: SearchPolicy = DEFAULT_POLICY) -> List[Region]:
        """Regions that can be picked as an emblem."""
        blocked = set(policy.non_emblem_regions)
        return [r for r in self._regions if r.id not in blocked]

    @staticmethod
    def _parse_region(raw: Any) -> Optional[Region]:
        if not isinstance(raw, dict):
            return None
        rid = str(raw.get("id") or "").strip()
        if not rid:
            return None
        try:
            required = int(raw.get("requiredUnits", raw.get("required_units")) or 0)
        except (TypeError, ValueError):
            required = 0
        return Region(
            id=rid,
            name=str(raw.get("name") or "").strip() or rid,
            color=str(raw.get("color") or "").strip(),
            required_units=required if required > 0 else 1,
        )

    @staticmethod
    def _parse_unit(raw: Any) -> Optional[Unit]:
        if not isinstance(raw, dict):
            return None
        uid = str(raw.get("id") or "").strip()
        if not uid:
            return None
        regions_raw = raw.get("regions") or []
        if not isinstance(regions_raw, list):
            return None
        regions: List[str] = []
        for region_id in regions_raw:
            rid = str(region_id or "").strip()
            if rid and rid not in regions:
                regions.append(rid)
        if not regions:
            return None
        try:
            cost = int(raw.get("cost") or 0)
        except (TypeError, ValueError):
            return None
        return Unit(
            id=uid,
            name=str(raw.get("name") or "").strip() or uid,
            cost=cost,
            regions=tuple(regions),
            unlockable=bool(raw.get("unlockable", False)),
        )
