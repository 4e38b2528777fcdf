"""
scripts/health/specs.py — App.Program list parsing.

Every category option takes a comma-separated list of `App.Program` tokens.
Malformed tokens fail the whole run (CRITICAL) before any request is made.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from scripts.health import Category, CheckError, ProgramSpec, Severity

if TYPE_CHECKING:
    from config.settings import Settings

USAGE_HINT = (
    "No programs to check. Supply at least one of "
    + ", ".join(c.flag for c in Category)
    + " (or the matching CHECK_CDAP_* variable)"
)


def _parse_token(token: str, category: Category) -> ProgramSpec:
    parts = token.split(".")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        raise CheckError(
            Severity.CRITICAL,
            f"Invalid {category.path} spec '{token}', expected <App>.<Program>",
        )
    application, program = (p.strip() for p in parts)
    return ProgramSpec(application, program, category)


def parse_specs(raw: str | None, category: Category) -> list[ProgramSpec]:
    """Split a comma-separated `App.Program` list, preserving order.

    Blank input yields an empty list. Any malformed token (including an empty
    one from a doubled or trailing comma) raises CheckError(CRITICAL).
    """
    if raw is None or not raw.strip():
        return []
    return [_parse_token(token.strip(), category) for token in raw.split(",")]


def collect_specs(cfg: Settings) -> list[ProgramSpec]:
    """Parse all six categories in check order (flows first, workers last)."""
    specs: list[ProgramSpec] = []
    for category in Category:
        specs.extend(parse_specs(getattr(cfg, category.setting), category))
    if not specs:
        raise CheckError(Severity.UNKNOWN, USAGE_HINT)
    return specs
