"""
scripts/health/report.py — Fold CheckResults into one Nagios status line.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable
from dataclasses import dataclass, replace
from functools import reduce
from typing import TextIO

from scripts.health import CheckResult, Severity

PREFIXES = {
    Severity.OK: "OK:",
    Severity.WARNING: "WARN:",
    Severity.CRITICAL: "CRITICAL:",
}


@dataclass(frozen=True)
class AggregateReport:
    severity: Severity = Severity.OK
    message: str = ""


def accumulate(report: AggregateReport, result: CheckResult) -> AggregateReport:
    entry = str(result)
    message = f"{report.message},{entry}" if report.message else entry
    severity = report.severity
    if not result.healthy:
        severity = max(severity, Severity.CRITICAL)
    return replace(report, severity=severity, message=message)


def aggregate(results: Iterable[CheckResult]) -> AggregateReport:
    return reduce(accumulate, results, AggregateReport())


def severity_prefix(severity: int) -> str:
    return PREFIXES.get(severity, "UNKNOWN:")


def format_report(report: AggregateReport) -> str:
    return f"{severity_prefix(report.severity)} {report.message}"


def emit(report: AggregateReport, stream: TextIO | None = None) -> int:
    """Write the status line and return the exit code for it."""
    print(format_report(report), file=stream if stream is not None else sys.stdout)
    return int(report.severity)
