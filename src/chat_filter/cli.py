"""CLI interface for chat-filter — diagnostics for server admins.

Usage:
    # Show how a message fares under every tier (stdout: JSON)
    python -m chat_filter.cli --config filter.yml test "what the h3ck"

    # Word list statistics
    python -m chat_filter.cli --config filter.yml stats

    # Show both normalized forms of a message
    python -m chat_filter.cli normalize "H3...LL...0"

The config path can also come from the CHAT_FILTER_CONFIG env variable.
"""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys

from .config import create_service, load_from_yaml
from .normalizer import normalize, normalize_for_display
from .service import FilterService
from .types import TIERS


DEFAULT_CONFIG = os.environ.get("CHAT_FILTER_CONFIG", "")


def _build_service(args: argparse.Namespace) -> FilterService:
    if not args.config:
        return create_service({})
    return create_service(load_from_yaml(args.config))


def cmd_test(args: argparse.Namespace) -> None:
    """Analyze a message under every tier."""
    service = _build_service(args)
    message = " ".join(args.message)

    tiers = []
    for tier in TIERS.values():
        result = service.analyze_message(message, tier)
        tiers.append({
            "tier": tier.name,
            "blocked": result.is_blocked,
            "filtered": service.filter_message(message, tier),
            "matches": [
                {
                    "text": v.text,
                    "matched": v.matched_text,
                    "category": v.category.name,
                    "start": v.start,
                    "end": v.end,
                }
                for v in result.violations
            ],
        })

    output = {
        "message": message,
        "tiers": tiers,
        "contains_slurs": service.contains_slurs(message),
        "contains_advertising": service.contains_advertising(message),
    }
    json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_stats(args: argparse.Namespace) -> None:
    """Print word list statistics."""
    service = _build_service(args)
    json.dump(service.stats(), sys.stdout, indent=2)
    sys.stdout.write("\n")


def cmd_normalize(args: argparse.Namespace) -> None:
    """Print the matching and display forms of a message."""
    message = " ".join(args.message)
    output = {
        "normalized": normalize(message).text,
        "display": normalize_for_display(message),
    }
    json.dump(output, sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="chat-filter",
        description="Chat filter diagnostics",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="YAML config path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    p_test = sub.add_parser("test", help="Test a message against every tier")
    p_test.add_argument("message", nargs="+")
    sub.add_parser("stats", help="Show word list statistics")
    p_norm = sub.add_parser("normalize", help="Show normalized forms of a message")
    p_norm.add_argument("message", nargs="+")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cmds = {
        "test": cmd_test,
        "stats": cmd_stats,
        "normalize": cmd_normalize,
    }
    cmds[args.command](args)


if __name__ == "__main__":
    main()
