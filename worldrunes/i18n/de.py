"""German translations."""

STRINGS: dict[str, str] = {
    # ── Embleme ─────────────────────────────────────────────────
    "emblem.unknown": "Unbekannte Emblem-Region: {region}",

    # ── Ergebnisse ──────────────────────────────────────────────
    "results.empty": "Keine gültigen Kombinationen gefunden.",
    "results.empty_hint": "Einstellungen anpassen oder andere Embleme wählen.",
    "results.filtered_empty": "Keine Ergebnisse für die aktuellen Filter.",
    "results.unlock_notice": "Kleinste Teamgröße mit aktuellen Freischaltungen: {current}. Freischalten für {target}:",
    "results.summary": "{count} Teams für {emblem_1} + {emblem_2} ({shown} angezeigt)",
    "results.row": "#{rank} [{units} Einheiten, {cost} Gold] {team} | {regions}",
    "results.truncated": "Suchbudget erreicht, Ergebnisse evtl. unvollständig.",

    # ── CLI ─────────────────────────────────────────────────────
    "cli.catalog_missing": "Katalog nicht gefunden: {path}",
    "cli.catalog_empty": "Katalog enthält keine Einheiten: {path}",
    "cli.catalog_invalid": "Katalog nicht lesbar: {path} ({error})",
    "cli.wrote_json": "Ergebnis-JSON geschrieben: {path}",
}
