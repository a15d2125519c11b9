import argparse
import logging
import os
import sys
from typing import List, Optional

from .config import Settings, load_settings
from .logging_config import configure_logging
from .models import ErrorKind, ShareLevel, ShareResult, TrafficType
from .traffic_shares import get_traffic_shares, set_traffic_share, validate_share_request
from .vsphere_client import VSphereClient

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def create_client(settings: Settings) -> VSphereClient:
    return VSphereClient.from_settings(settings)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dvs-nioc",
        description="Configure Network I/O Control traffic shares on a vSphere distributed switch.",
    )
    parser.add_argument("--config", help="YAML config file (overrides APP_CONFIG_FILE)")
    parser.add_argument("--log-level", help="Log level (default: from config, else INFO)")

    sub = parser.add_subparsers(dest="command", required=True)

    set_p = sub.add_parser("set", help="Set the share level of one infrastructure traffic type")
    set_p.add_argument("switch", help="Distributed switch name")
    set_p.add_argument(
        "--traffic-type",
        "-t",
        required=True,
        help="One of: " + ", ".join(t.value for t in TrafficType),
    )
    set_p.add_argument(
        "--share-level",
        "-s",
        required=True,
        help="One of: " + ", ".join(level.value for level in ShareLevel),
    )
    set_p.add_argument(
        "--custom-shares",
        type=int,
        default=None,
        help="Share weight, used only with --share-level custom",
    )
    gate = set_p.add_mutually_exclusive_group()
    gate.add_argument(
        "--dry-run",
        "--whatif",
        dest="dry_run",
        action="store_true",
        help="Describe the change without applying it",
    )
    gate.add_argument("--yes", "-y", action="store_true", help="Apply without asking for confirmation")

    show_p = sub.add_parser("show", help="Show current traffic shares of a distributed switch")
    show_p.add_argument("switch", help="Distributed switch name")

    return parser


def prompt_confirmation(description: str) -> bool:
    try:
        answer = input(f"Confirm: {description}? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _report_error(result: ShareResult) -> int:
    err = result.error
    logger.error("%s", err.message)
    print(err.message, file=sys.stderr)
    return EXIT_USAGE if err.kind == ErrorKind.USAGE else EXIT_FAILED


def _print_shares(switch_name: str, result: ShareResult) -> None:
    print(f"=== NIOC traffic shares for switch {switch_name} ===")
    print(f"{'TRAFFIC':<16} {'LEVEL':<8} {'SHARES':>7} {'LIMIT':>8} {'RESERVATION':>12}")
    for s in result.shares:
        limit = "unlimited" if s.limit is None or s.limit < 0 else str(s.limit)
        print(
            f"{s.key:<16} {s.level or '-':<8} {s.shares if s.shares is not None else '-':>7} "
            f"{limit:>8} {s.reservation if s.reservation is not None else '-':>12}"
        )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Configure logging early so load_settings() warnings/errors are visible.
    try:
        configure_logging(args.log_level or os.getenv("LOG_LEVEL", "INFO"))
    except RuntimeError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_USAGE if args.log_level else EXIT_FAILED

    if args.command == "set":
        invalid = validate_share_request(args.switch, args.traffic_type, args.share_level, args.custom_shares)
        if invalid is not None:
            return _report_error(ShareResult(error=invalid))

    try:
        settings = load_settings(args.config)
    except RuntimeError as exc:
        logger.error("%s", exc)
        print(str(exc), file=sys.stderr)
        return EXIT_FAILED

    try:
        configure_logging(args.log_level or settings.log_level, settings.log_dir)
    except RuntimeError as exc:
        logger.error("%s", exc)
        print(str(exc), file=sys.stderr)
        return EXIT_FAILED

    try:
        with create_client(settings) as client:
            if args.command == "set":
                result = set_traffic_share(
                    client,
                    args.switch,
                    args.traffic_type,
                    args.share_level,
                    args.custom_shares,
                    dry_run=args.dry_run,
                    confirm=None if args.yes else prompt_confirmation,
                    yes=args.yes,
                )
            else:
                result = get_traffic_shares(client, args.switch)
    except Exception as exc:  # noqa: BLE001
        logger.error("vCenter session to %s failed: %s", settings.vcenter_host, exc)
        print(f"vCenter session to {settings.vcenter_host} failed: {exc}", file=sys.stderr)
        return EXIT_FAILED

    if not result.ok:
        return _report_error(result)

    if args.command == "show":
        _print_shares(args.switch, result)
    elif result.applied:
        print(f"Done: {result.description}")
    elif args.dry_run:
        print(f"What if: {result.description}")
    else:
        print(f"Skipped (not confirmed): {result.description}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
