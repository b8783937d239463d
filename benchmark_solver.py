from __future__ import annotations

import argparse
import json
import statistics
import time
from pathlib import Path
from typing import Any, Dict, List

from worldrunes.domain.catalog import Catalog
from worldrunes.domain.models import SolverConfig


def _first_existing(paths: List[Path]) -> Path | None:
    for p in paths:
        if p.exists():
            return p
    return None


def _default_catalog_path() -> Path | None:
    return _first_existing(
        [
            Path("data/catalog.json"),
            Path("worldrunes") / "data" / "catalog.json",
        ]
    )


def _emblem_pairs(catalog: Catalog, emblem_1: str, emblem_2: str, all_pairs: bool) -> List[tuple[str, str]]:
    if not all_pairs:
        return [(emblem_1, emblem_2)]
    ids = [r.id for r in catalog.emblem_regions()]
    return [(a, b) for i, a in enumerate(ids) for b in ids[i + 1:]]


def _run_once(catalog: Catalog, pairs: List[tuple[str, str]], config: SolverConfig) -> Dict[str, Any]:
    from worldrunes.engine.ranking import rank_and_diversify
    from worldrunes.engine.solver import search_with_trace

    started = time.perf_counter()
    result_count = 0
    checked = 0
    capped = 0
    for emblem_1, emblem_2 in pairs:
        outcome = search_with_trace(emblem_1, emblem_2, config, catalog)
        rank_and_diversify(outcome.results)
        result_count += len(outcome.results)
        checked += int(outcome.trace.total_checked)
        capped += 1 if outcome.trace.result_cap_reached else 0
    elapsed_ms = (time.perf_counter() - started) * 1000.0
    return {
        "elapsed_ms": round(elapsed_ms, 2),
        "pairs": int(len(pairs)),
        "results": int(result_count),
        "checked": int(checked),
        "capped_pairs": int(capped),
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark composition search runtime and result counts.")
    parser.add_argument("--catalog", type=str, default="", help="Path to catalog JSON (optional).")
    parser.add_argument("--emblem1", type=str, default="", help="First emblem region id.")
    parser.add_argument("--emblem2", type=str, default="", help="Second emblem region id.")
    parser.add_argument("--all-pairs", action="store_true", help="Run every emblem-eligible region pair.")
    parser.add_argument("--min-units", type=int, default=5, help="Smallest team size.")
    parser.add_argument("--max-units", type=int, default=8, help="Largest team size.")
    parser.add_argument("--board-size", type=int, default=9, help="Board size cap.")
    parser.add_argument("--warmup", type=int, default=1, help="Warmup runs.")
    parser.add_argument("--runs", type=int, default=3, help="Measured runs.")
    parser.add_argument("--out-json", type=str, default="", help="Optional output path for JSON summary.")
    args = parser.parse_args()

    catalog_path = Path(args.catalog) if args.catalog else _default_catalog_path()
    if catalog_path is None or not catalog_path.exists():
        print("Catalog not found. Use --catalog <path-to-json>.")
        return 2

    try:
        catalog = Catalog.load(catalog_path)
    except (OSError, ValueError) as exc:
        print(f"Catalog could not be read: {catalog_path} ({exc})")
        return 2
    pairs = _emblem_pairs(catalog, str(args.emblem1), str(args.emblem2), bool(args.all_pairs))
    pairs = [(a, b) for a, b in pairs if catalog.region(a) and catalog.region(b)]
    if not pairs:
        print("No valid emblem pair. Use --emblem1/--emblem2 or --all-pairs.")
        return 3

    config = SolverConfig(
        max_board_size=int(args.board_size),
        min_units=int(args.min_units),
        max_units=int(args.max_units),
    ).normalized()
    print(
        f"Benchmark units={len(catalog.units)} regions={len(catalog.regions)} pairs={len(pairs)} "
        f"sizes={config.min_units}-{config.max_units} board={config.max_board_size}"
    )

    for i in range(max(0, int(args.warmup))):
        _ = _run_once(catalog, pairs, config)
        print(f"Warmup {i + 1}/{int(args.warmup)} done")

    runs: List[Dict[str, Any]] = []
    for i in range(max(1, int(args.runs))):
        row = _run_once(catalog, pairs, config)
        runs.append(row)
        print(
            f"Run {i + 1}/{int(args.runs)}: "
            f"{row['elapsed_ms']} ms | results={row['results']} | checked={row['checked']} | capped={row['capped_pairs']}"
        )

    elapsed = [float(r["elapsed_ms"]) for r in runs]
    summary = {
        "catalog": str(catalog_path),
        "pairs": len(pairs),
        "min_units": int(config.min_units),
        "max_units": int(config.max_units),
        "board_size": int(config.max_board_size),
        "runs": runs,
        "stats": {
            "elapsed_ms_mean": round(statistics.fmean(elapsed), 2),
            "elapsed_ms_median": round(statistics.median(elapsed), 2),
            "elapsed_ms_min": round(min(elapsed), 2),
            "elapsed_ms_max": round(max(elapsed), 2),
        },
    }

    print("Summary:")
    print(
        f"  elapsed mean/median/min/max: "
        f"{summary['stats']['elapsed_ms_mean']} / {summary['stats']['elapsed_ms_median']} / "
        f"{summary['stats']['elapsed_ms_min']} / {summary['stats']['elapsed_ms_max']} ms"
    )

    if args.out_json:
        out_path = Path(args.out_json)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(summary, indent=2, ensure_ascii=False), encoding="utf-8")
        print(f"Wrote summary JSON: {out_path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
