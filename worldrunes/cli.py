from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from worldrunes import i18n
from worldrunes.domain.catalog import Catalog
from worldrunes.domain.models import SolverConfig, SolverResult
from worldrunes.engine.ranking import rank_and_diversify
from worldrunes.engine.solver import search_with_trace
from worldrunes.engine.unlock_filter import apply_unlock_filter
from worldrunes.i18n import tr


def _split_ids(values: List[str]) -> List[str]:
    out: List[str] = []
    for raw in values or []:
        for part in str(raw).split(","):
            uid = part.strip()
            if uid and uid not in out:
                out.append(uid)
    return out


def active_region_badges(result: SolverResult, catalog: Catalog) -> List[str]:
    badges: List[str] = []
    for region_id, count in result.composition.region_counts().items():
        required = catalog.required_units_for(region_id)
        if count < required:
            continue
        badges.append(f"{catalog.region_name_for(region_id)} {count}/{required}")
    return badges


def format_team(result: SolverResult) -> str:
    parts: List[str] = []
    for unit in result.composition.display_units():
        emblem = result.composition.emblem_region_for(unit.id)
        parts.append(f"{unit.name}({unit.cost})" + (f"*{emblem}" if emblem else ""))
    return " · ".join(parts)


def result_to_dict(result: SolverResult) -> Dict[str, Any]:
    comp = result.composition
    return {
        "units": [u.id for u in comp.display_units()],
        "emblem_assignments": [
            {"unit_id": a.unit_id, "region": a.region_id} for a in comp.emblem_assignments
        ],
        "active_regions": list(comp.active_regions),
        "unit_count": int(result.unit_count),
        "region_count": int(result.region_count),
        "total_cost": int(result.total_cost),
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worldrunes",
        description="Find teams that activate four regions with two region emblems.",
    )
    parser.add_argument("--catalog", type=str, required=True, help="Path to catalog JSON (units + regions).")
    parser.add_argument("--emblem1", type=str, required=True, help="First emblem region id.")
    parser.add_argument("--emblem2", type=str, required=True, help="Second emblem region id.")
    parser.add_argument("--min-units", type=int, default=5, help="Smallest team size to search.")
    parser.add_argument("--max-units", type=int, default=8, help="Largest team size to search.")
    parser.add_argument("--board-size", type=int, default=9, help="Board size cap (4-10).")
    parser.add_argument("--require", action="append", default=[], help="Only search these unit ids (comma separated).")
    parser.add_argument("--exclude", action="append", default=[], help="Never use these unit ids (comma separated).")
    parser.add_argument("--unlocked", action="append", default=[], help="Unlockable unit ids already unlocked.")
    parser.add_argument("--limit", type=int, default=20, help="Rows to print (0 = all).")
    parser.add_argument(
        "--lang", type=str, default="", choices=["", *i18n.available_languages()], help="Output language."
    )
    parser.add_argument("--config-dir", type=str, default="", help="Directory that remembers the --lang choice.")
    parser.add_argument("--verbose", action="store_true", help="Log search progress.")
    parser.add_argument("--out-json", type=str, default="", help="Optional output path for JSON results.")
    return parser


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    if args.config_dir:
        i18n.init(Path(args.config_dir))
        if args.lang:
            i18n.set_language(args.lang)
    i18n.use_language(i18n.resolve_language(args.lang))

    catalog_path = Path(args.catalog)
    if not catalog_path.exists():
        print(tr("cli.catalog_missing", path=catalog_path))
        return 2
    try:
        catalog = Catalog.load(catalog_path)
    except (OSError, ValueError) as exc:
        print(tr("cli.catalog_invalid", path=catalog_path, error=exc))
        return 2
    if not catalog.units:
        print(tr("cli.catalog_empty", path=catalog_path))
        return 2
    for emblem in (args.emblem1, args.emblem2):
        if catalog.region(emblem) is None:
            print(tr("emblem.unknown", region=emblem))
            return 3

    config = SolverConfig(
        max_board_size=int(args.board_size),
        min_units=int(args.min_units),
        max_units=int(args.max_units),
        required_units=tuple(_split_ids(args.require)),
        excluded_units=tuple(_split_ids(args.exclude)),
    ).normalized()

    outcome = search_with_trace(args.emblem1, args.emblem2, config, catalog)
    if not outcome.results:
        print(tr("results.empty"))
        print(tr("results.empty_hint"))
        return 0

    ranked = rank_and_diversify(outcome.results)
    unlock = apply_unlock_filter(ranked, _split_ids(args.unlocked))
    if unlock.has_higher_minimum and unlock.unlock_suggestions:
        print(
            tr(
                "results.unlock_notice",
                current=unlock.min_unit_count_filtered,
                target=unlock.min_unit_count_all,
            )
            + " "
            + ", ".join(u.name for u in unlock.unlock_suggestions)
        )
    if not unlock.has_team:
        print(tr("results.filtered_empty"))
        return 0

    rows = unlock.filtered if int(args.limit) <= 0 else unlock.filtered[: int(args.limit)]
    print(
        tr(
            "results.summary",
            count=len(unlock.filtered),
            shown=len(rows),
            emblem_1=catalog.region_name_for(args.emblem1),
            emblem_2=catalog.region_name_for(args.emblem2),
        )
    )
    for rank, result in enumerate(rows, start=1):
        print(
            tr(
                "results.row",
                rank=rank,
                units=result.unit_count,
                cost=result.total_cost,
                team=format_team(result),
                regions=", ".join(active_region_badges(result, catalog)),
            )
        )
    if outcome.trace.result_cap_reached:
        print(tr("results.truncated"))

    if args.out_json:
        out_path = Path(args.out_json)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "emblems": [args.emblem1, args.emblem2],
            "results": [result_to_dict(r) for r in unlock.filtered],
            "unlock_suggestions": [u.id for u in unlock.unlock_suggestions],
        }
        out_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        print(tr("cli.wrote_json", path=out_path))
    return 0
