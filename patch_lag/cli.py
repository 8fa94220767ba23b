"""Command-line interface and orchestration for patch-lag.

stdout carries exactly one JSON object on success; progress lines and
diagnostics go to stderr.
"""

from __future__ import annotations

import argparse
import functools
import json
import sys
from pathlib import Path

from . import __version__
from .errors import PatchLagError


# ── argument parsing ──────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patch-lag",
        description=(
            "Report how many days the installed Windows cumulative update "
            "trails the latest one published for the same feature release."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python -m patch_lag\n"
            "  python -m patch_lag --verbose --output lag.json\n"
            "  python -m patch_lag --product \"Windows 11 Pro\" --version-label 23H2 --build 22631.4317\n"
            "  python -m patch_lag --list-catalog\n"
        ),
    )
    parser.add_argument(
        "--config", "-c",
        metavar="PATH",
        help="Agent config YAML (default: PATCH_LAG_CONFIG or the local agent.yaml)",
    )
    parser.add_argument(
        "--product",
        metavar="CAPTION",
        help="OS caption to use instead of querying this machine",
    )
    parser.add_argument(
        "--version-label",
        metavar="LABEL",
        help="Feature release label (e.g. 22H2) to use instead of querying this machine",
    )
    parser.add_argument(
        "--build",
        metavar="MAJOR.UBR",
        help="OS build to use instead of querying this machine",
    )
    parser.add_argument(
        "--output", "-o",
        metavar="PATH",
        help="Also write the JSON result to this file",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        default=None,
        help="Write indented JSON",
    )
    parser.add_argument(
        "--list-catalog",
        action="store_true",
        default=False,
        help="Print the effective release catalog as JSON and exit",
    )
    noise = parser.add_mutually_exclusive_group()
    noise.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Print the identity, history page and selected updates to stderr",
    )
    noise.add_argument(
        "--quiet", "-q",
        action="store_true",
        default=False,
        help="Suppress progress output on stderr",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"patch-lag {__version__}",
    )
    return parser


def parse_args(argv=None) -> argparse.Namespace:
    parser = _build_parser()
    args = parser.parse_args(argv)
    overrides = (args.product, args.version_label, args.build)
    if any(v is not None for v in overrides) and not all(overrides):
        parser.error("--product, --version-label and --build must be given together")
    return args


# ── diagnostics ───────────────────────────────────────────────────────────────

def _stderr(*parts, end: str = "\n") -> None:
    print(*parts, end=end, file=sys.stderr, flush=True)


def _quiet(*parts, end: str = "\n") -> None:
    pass


def _traced(label: str, fn, say):
    """Wrap a pipeline collaborator so each call prints a progress line."""
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        say(f"  - {label}...", end=" ")
        try:
            value = fn(*args, **kwargs)
        except Exception:
            say("FAILED")
            raise
        say("done")
        return value
    return wrapper


# ── pipeline wiring ───────────────────────────────────────────────────────────

def _identity_source(args: argparse.Namespace):
    from .models.schema import OSIdentity

    if args.product:
        identity = OSIdentity(
            product_name=args.product,
            version_label=args.version_label,
            build=args.build,
        )
        return lambda: identity

    from .collectors.windows.os_identity import OsIdentityCollector
    return OsIdentityCollector().collect


def _describe(resolution, say) -> None:
    from .models.schema import UpdateRecord

    identity, entry = resolution.identity, resolution.entry
    say(f"  [identity] {identity.product_name} {identity.version_label} build {identity.build}")
    say(f"  [catalog]  {entry.product_name} {entry.version_label} -> {entry.history_uri}")
    installed = resolution.installed
    if isinstance(installed, UpdateRecord):
        say(f"  [installed] {installed.name}")
    else:
        say(f"  [installed] release baseline of {installed.release_date.isoformat()}")
    if resolution.latest is not None:
        say(f"  [latest]    {resolution.latest.name}")
    else:
        say("  [latest]    no regular update listed for this build; reporting 0")


# ── main entry point ──────────────────────────────────────────────────────────

def run(argv=None) -> int:
    """Run the pipeline and return the process exit code."""
    args = parse_args(argv)
    say = _quiet if args.quiet else _stderr

    from .catalog.releases import extend_catalog
    from .config.agent_config import load_config

    try:
        config = load_config(args.config)
        catalog = extend_catalog(config["catalog"])
    except (FileNotFoundError, ValueError) as exc:
        _stderr(f"[error] {exc}")
        return 1

    if args.list_catalog:
        rows = [entry.model_dump(mode="json") for entry in catalog]
        print(json.dumps(rows, indent=2))
        return 0

    from .analyzers.day_delta import compute_lag
    from .analyzers.update_history import UpdateHistoryResolver
    from .fetch.update_page import fetch_update_links
    from .report.json_reporter import write_json

    fetch_cfg = config["fetch"]
    fetcher = functools.partial(
        fetch_update_links,
        timeout=fetch_cfg["timeout_seconds"],
        user_agent=fetch_cfg["user_agent"],
    )
    resolver = UpdateHistoryResolver(
        identity_source=_traced("OS identity", _identity_source(args), say),
        fetcher=_traced("Update history page", fetcher, say),
        catalog=catalog,
        origin=fetch_cfg["origin"],
    )

    say("[patch-lag] Checking cumulative update age...")
    try:
        resolution = resolver.resolve()
        result = compute_lag(resolution)
    except PatchLagError as exc:
        _stderr(f"[error] {type(exc).__name__}: {exc}")
        return 1

    if args.verbose:
        _describe(resolution, say)

    pretty = args.pretty if args.pretty is not None else bool(config["output"].get("pretty"))
    output_path = Path(args.output) if args.output else None
    try:
        write_json(result, output_path, pretty=pretty)
    except OSError as exc:
        _stderr(f"[error] Could not write JSON to '{output_path}': {exc}")
        return 1

    say(f"[patch-lag] Done. {result.number_of_days_behind_lcu} day(s) behind the latest cumulative update.")
    return 0


def main(argv=None) -> None:
    sys.exit(run(argv))
