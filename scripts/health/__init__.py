"""
scripts/health — CDAP program status checks.

Shared types for the probe pipeline. Each stage is its own module:
    specs   App.Program lists -> ProgramSpec
    cdap    ProgramSpec -> CheckResult (one HTTP GET)
    report  CheckResult stream -> AggregateReport -> output line + exit code

Usage:
    from scripts.health import CheckError, Severity
    from scripts.health.specs import collect_specs
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

RUNNING = "RUNNING"


class Severity(IntEnum):
    """Nagios plugin states. The value is the process exit code."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


class Category(Enum):
    FLOW = ("flows", "FLOWS", "-f")
    MAPREDUCE = ("mapreduce", "MAPREDUCES", "-m")
    SERVICE = ("services", "SERVICES", "-s")
    SPARK = ("spark", "SPARKS", "-S")
    WORKFLOW = ("workflows", "WORKFLOWS", "-w")
    WORKER = ("workers", "WORKERS", "-W")

    def __init__(self, path: str, setting: str, flag: str) -> None:
        self.path = path
        self.setting = setting
        self.flag = flag


class CheckError(RuntimeError):
    """Fatal probe condition. Ends the run with a single diagnostic line."""

    def __init__(self, severity: Severity, message: str) -> None:
        self.severity = severity
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class ProgramSpec:
    application: str
    program: str
    category: Category

    @property
    def label(self) -> str:
        return f"{self.application}.{self.program}"


@dataclass(frozen=True)
class CheckResult:
    spec: ProgramSpec
    status: str

    @property
    def healthy(self) -> bool:
        # Substring match: "NOT_RUNNING" also counts as healthy.
        return RUNNING in self.status

    def __str__(self) -> str:
        return f"{self.spec.label}={self.status}"
