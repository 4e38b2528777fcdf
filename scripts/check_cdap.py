#!/usr/bin/env python3
"""
scripts/check_cdap.py — Nagios probe for CDAP program status.

Queries the CDAP status endpoint for every listed program and prints one
line, exiting with the Nagios state:

    OK: MyApp.MyFlow=RUNNING                                    exit 0
    CRITICAL: MyApp.Svc1=RUNNING,MyApp.Svc2=STOPPED             exit 2
    UNKNOWN: CDAP Router not responding: http://...             exit 3

Programs are checked one at a time (flows, mapreduce, services, spark,
workflows, workers). The first fatal condition (bad spec, transport failure,
401/404/503/unexpected response) ends the run without checking the rest.

Usage:
    python3 scripts/check_cdap.py -u http://cdap:11015 -f MyApp.MyFlow
    CHECK_CDAP_SERVICES=MyApp.Svc1,MyApp.Svc2 check_cdap -T "$TOKEN"
"""

from __future__ import annotations

import argparse
import pathlib
import sys
from typing import NoReturn

# Add project root to path so health modules and config are importable
_ROOT = pathlib.Path(__file__).parent.parent
sys.path.insert(0, str(_ROOT))

try:
    from pydantic import ValidationError

    from config.settings import ENV_PREFIX, Settings, load_settings
except ImportError:
    print(
        "UNKNOWN: pydantic-settings not installed.\n"
        "Run: pip install -e ."
    )
    sys.exit(3)

from scripts.health import CheckError, Severity  # noqa: E402
from scripts.health.cdap import CdapStatusClient, check_all, mask_token  # noqa: E402
from scripts.health.report import AggregateReport, aggregate, emit  # noqa: E402
from scripts.health.specs import collect_specs  # noqa: E402


SPEC_LIST = "APP.PROGRAM[,...]"


class ProbeArgumentParser(argparse.ArgumentParser):
    """argparse exits 2 on bad usage, which Nagios reads as CRITICAL."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        raise CheckError(Severity.UNKNOWN, f"Usage error: {message}")


def build_parser() -> argparse.ArgumentParser:
    parser = ProbeArgumentParser(
        prog="check_cdap",
        description="Check CDAP program status (Nagios plugin). "
        f"Every option falls back to a {ENV_PREFIX}* environment variable.",
    )
    parser.add_argument("-u", dest="URI", metavar="URI",
                        help="CDAP router base URI (default: http://localhost:11015)")
    parser.add_argument("-n", dest="NAMESPACE", metavar="NAMESPACE",
                        help="CDAP namespace (default: default)")
    parser.add_argument("-f", dest="FLOWS", metavar=SPEC_LIST, help="flows")
    parser.add_argument("-m", dest="MAPREDUCES", metavar=SPEC_LIST, help="mapreduce programs")
    parser.add_argument("-s", dest="SERVICES", metavar=SPEC_LIST, help="services")
    parser.add_argument("-S", dest="SPARKS", metavar=SPEC_LIST, help="spark programs")
    parser.add_argument("-w", dest="WORKFLOWS", metavar=SPEC_LIST, help="workflows")
    parser.add_argument("-W", dest="WORKERS", metavar=SPEC_LIST, help="workers")
    parser.add_argument("-t", dest="TIMEOUT", metavar="SECONDS",
                        help="request timeout in seconds (default: 30)")
    parser.add_argument("-T", dest="TOKEN", metavar="TOKEN", help="CDAP access token")
    parser.add_argument("-k", dest="INSECURE", action="store_true", default=None,
                        help="skip TLS certificate verification")
    parser.add_argument("-v", dest="VERBOSE", action="store_true", default=None,
                        help="print request debug output to stderr")
    parser.add_argument("--env-file", dest="env_file", metavar="PATH",
                        help=f"read {ENV_PREFIX}* variables from this file first")
    return parser


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err["loc"])
        problems.append(f"{ENV_PREFIX}{field}: {err['msg']}")
    return "; ".join(problems)


def load_config(args: argparse.Namespace) -> Settings:
    overrides = {k: v for k, v in vars(args).items() if k != "env_file"}
    try:
        return load_settings(args.env_file, overrides)
    except OSError as exc:
        raise CheckError(Severity.UNKNOWN, f"Cannot read env file: {exc}") from exc
    except ValidationError as exc:
        raise CheckError(
            Severity.UNKNOWN, f"Invalid configuration: {_format_validation_error(exc)}"
        ) from exc


def _print_debug_config(cfg: Settings) -> None:
    shown = cfg.model_dump()
    shown["TOKEN"] = mask_token(cfg.TOKEN)
    for key, value in shown.items():
        print(f"  [DEBUG] {ENV_PREFIX}{key}={value}", file=sys.stderr)


def run_probe(cfg: Settings) -> AggregateReport:
    """Check every configured program. Raises CheckError on the first fatal condition."""
    specs = collect_specs(cfg)
    if cfg.VERBOSE:
        _print_debug_config(cfg)
    client = CdapStatusClient.from_settings(cfg)
    return aggregate(check_all(specs, client))


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        report = run_probe(load_config(args))
    except CheckError as exc:
        report = AggregateReport(exc.severity, exc.message)
    return emit(report)


if __name__ == "__main__":
    sys.exit(main())
