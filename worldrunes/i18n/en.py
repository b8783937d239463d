"""English translations (default language)."""

STRINGS: dict[str, str] = {
    # -- Emblems -------------------------------------------------
    "emblem.unknown": "Unknown emblem region: {region}",

    # -- Results -------------------------------------------------
    "results.empty": "No valid combinations found.",
    "results.empty_hint": "Try adjusting your configuration or selecting different emblems.",
    "results.filtered_empty": "No results match the current filters.",
    "results.unlock_notice": "Lowest team size with current unlocks: {current}. Unlock to reach {target}:",
    "results.summary": "{count} teams for {emblem_1} + {emblem_2} ({shown} shown)",
    "results.row": "#{rank} [{units} units, {cost} gold] {team} | {regions}",
    "results.truncated": "Search budget reached, results may be incomplete.",

    # -- CLI -----------------------------------------------------
    "cli.catalog_missing": "Catalog not found: {path}",
    "cli.catalog_empty": "Catalog has no units: {path}",
    "cli.catalog_invalid": "Catalog could not be read: {path} ({error})",
    "cli.wrote_json": "Wrote results JSON: {path}",
}
