import argparse
import logging
import signal
import sys
import threading
from importlib.metadata import PackageNotFoundError, version

from .scanner import scan_repo
from .renderer import render_markdown, render_text
from .utils import write_json, find_repo_root
from .config import load_config
from .errors import RiskRegError
from .patterns import RULES
from .signals import Severity

logger = logging.getLogger("riskreg_cli")

EXIT_FINDINGS = 1
EXIT_ERROR = 2
EXIT_CANCELLED = 130


def _version() -> str:
    try:
        return version("riskreg")
    except PackageNotFoundError:
        return "dev"


def cmd_scan(args) -> int:
    repo_root = find_repo_root(args.path)
    cfg = load_config(repo_root)

    cancel = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda *_: cancel.set())
    try:
        result = scan_repo(repo_root, cfg, cancel=cancel, workers=args.workers)
    finally:
        signal.signal(signal.SIGINT, previous)

    print(render_text(result))

    if args.json:
        write_json(result, repo_root)

    if args.markdown:
        render_markdown(result, repo_root)

    if not result.complete:
        return EXIT_CANCELLED
    if args.fail_on:
        threshold = Severity(args.fail_on.capitalize()).rank
        if any(f.severity.rank >= threshold for f in result.findings):
            return EXIT_FINDINGS
    return 0


def cmd_rules(args) -> int:
    for rule in RULES.values():
        print(f"{rule.rule_id}  {rule.severity.value:<6} {rule.confidence.value:<6} {rule.title}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="riskreg", description="Technical risk register scanner")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    sub = parser.add_subparsers(dest="cmd", required=True)

    scan = sub.add_parser("scan", help="Scan a workspace for technical risks")
    scan.add_argument("path", nargs="?", default=".", help="Path to repo (or any child path)")
    scan.add_argument("--markdown", action="store_true", help="Emit RISK_REGISTER.md")
    scan.add_argument("--json", action="store_true", help="Emit risk-register.json")
    scan.add_argument("--workers", type=int, default=None, help="Files scanned in parallel (default from config)")
    scan.add_argument("--fail-on", choices=["high", "medium", "low"], default=None,
                      help="Exit 1 when a finding at or above this severity is reported")
    scan.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    scan.set_defaults(func=cmd_scan)

    rules = sub.add_parser("rules", help="List the rule catalog")
    rules.set_defaults(func=cmd_rules)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except RiskRegError as e:
        logger.error("%s", e)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
