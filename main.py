#!/usr/bin/env python3
"""Prism: search-result scoring and categorization engine.

This CLI scores search results for a query (relevance, accuracy,
credibility, recency) and groups them into at most six thematic category
buckets, printing the result as JSON.

Commands:
    categorize  Score and categorize results (JSON list from a file or stdin)
    context     Show how a query is classified and which weights apply
    categories  List the category registry
    status      Show configuration

Examples:
    python main.py categorize -i results.json -q "AI investment trends 2025"
    cat results.json | python main.py categorize -q "bitcoin price" --presentable
    python main.py categorize --text answer.md --sources sources.json -q "..."
    python main.py context "quarterly revenue guidance"
    python main.py categories

Environment:
    See config.py for all configuration options
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from config import Config
from observability.logging import setup_logging
from observability.tracing import setup_tracing

logger = logging.getLogger(__name__)


def _read_json(path: str | None) -> Any:
    """Read JSON from a path, or stdin when path is None or '-'."""
    if path is None or path == "-":
        return json.load(sys.stdin)
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _options(args: argparse.Namespace) -> dict[str, Any]:
    options: dict[str, Any] = {
        "now": args.now,
        "business_context": args.business,
        "include_all_results": True if args.all_results else None,
    }
    if args.related:
        options["related_items"] = _read_json(args.related)
    return options


def cmd_categorize(args: argparse.Namespace, config: Config) -> int:
    """Score and categorize results, printing the buckets as JSON.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success)
    """
    from pipeline import Pipeline, filter_presentable

    pipeline = Pipeline(config)
    options = _options(args)

    if args.text:
        text = Path(args.text).read_text(encoding="utf-8")
        sources = _read_json(args.sources) if args.sources else []
        results = pipeline.categorize_text(text, args.query, sources, options)
    else:
        items = _read_json(args.input)
        results = pipeline.categorize(items, args.query, options)

    if args.presentable:
        results = filter_presentable(results, config.display_threshold)

    output: dict[str, Any] = {"categories": [r.to_dict() for r in results]}
    if args.stats:
        output["stats"] = pipeline.last_stats.to_dict()

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


def cmd_context(args: argparse.Namespace, config: Config) -> int:
    """Classify a query and show the active weight profile.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success)
    """
    from scoring.context import build_context

    context = build_context(args.query, args.business)
    print(json.dumps({
        "query": context.query,
        "labels": list(context.labels),
        "counts": context.counts,
        "is_business": context.is_business,
        "weights": context.weights.model_dump(),
        "first_pass_threshold": config.adaptive_threshold(
            config.first_pass_threshold, False, context.is_business
        ),
    }, indent=2))
    return 0


def cmd_categories(args: argparse.Namespace, config: Config) -> int:
    """List the categories of the active registry."""
    from categories.registry import default_registry, load_registry

    registry = load_registry(config.registry_path) if config.registry_path else default_registry()
    listing = [
        {
            "id": c.id,
            "name": c.name,
            "priority": c.priority,
            "business": c.business,
            "role": "fallback" if c.fallback else "catch_all" if c.catch_all else "thematic",
        }
        for c in registry
    ]
    print(json.dumps(listing, indent=2))
    return 0


def cmd_status(args: argparse.Namespace, config: Config) -> int:
    """Display configuration.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success)
    """
    status = {
        "thresholds": {
            "first_pass": config.first_pass_threshold,
            "second_pass": config.second_pass_threshold,
            "verified": config.verified_threshold,
            "fallback_score": config.fallback_score,
            "max_categories": config.max_categories,
        },
        "boosts": {
            "business": config.business_boost,
            "verified": config.verified_boost,
            "recency": config.recency_boost,
            "cap": config.boost_cap,
        },
        "scoring": {
            "max_text_length": config.max_text_length,
            "display_threshold": config.display_threshold,
            "accuracy_floor": config.accuracy_floor,
            "registry": config.registry_path or "built-in",
            "include_all_results": config.include_all_results,
        },
        "max_workers": config.max_workers,
        "enable_logfire": config.enable_logfire,
    }
    print(json.dumps(status, indent=2))
    return 0


def main() -> int:
    """Main entry point.

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        description="Prism: search-result scoring and categorization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # categorize command
    cat_parser = subparsers.add_parser("categorize", help="Score and categorize results")
    cat_parser.add_argument(
        "-q", "--query",
        required=True,
        help="Search query the results answer",
    )
    cat_parser.add_argument(
        "-i", "--input",
        help="JSON list of results (default: stdin)",
    )
    cat_parser.add_argument(
        "--text",
        help="Synthesized answer text to split into sections instead of --input",
    )
    cat_parser.add_argument(
        "--sources",
        help="JSON list of sources for --text",
    )
    cat_parser.add_argument(
        "--related",
        help="JSON list of related results for cross-referencing",
    )
    cat_parser.add_argument(
        "--now",
        help="Reference time (ISO 8601) for recency scoring",
    )
    cat_parser.add_argument(
        "--business",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Force business mode on or off (default: detect from query)",
    )
    cat_parser.add_argument(
        "--all-results",
        action="store_true",
        help="Populate the 'All Results' bucket",
    )
    cat_parser.add_argument(
        "--presentable",
        action="store_true",
        help="Keep only items passing the display threshold",
    )
    cat_parser.add_argument(
        "--stats",
        action="store_true",
        help="Include run statistics in the output",
    )

    # context command
    ctx_parser = subparsers.add_parser("context", help="Classify a query")
    ctx_parser.add_argument("query", help="Query to classify")
    ctx_parser.add_argument(
        "--business",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Force business mode on or off",
    )

    subparsers.add_parser("categories", help="List the category registry")
    subparsers.add_parser("status", help="Show configuration")

    args = parser.parse_args()

    # Load configuration
    config = Config.load()

    # Setup logging
    setup_logging(config, verbose=args.verbose)

    # Validate configuration for commands that need it
    if args.command in ("categorize", "categories"):
        error = config.validate()
        if error:
            print(f"Configuration error: {error}", file=sys.stderr)
            return 1

    setup_tracing(config.enable_logfire, token=config.logfire_token)

    commands = {
        "categorize": cmd_categorize,
        "context": cmd_context,
        "categories": cmd_categories,
        "status": cmd_status,
    }

    if args.command in commands:
        try:
            return commands[args.command](args, config)
        except Exception as e:
            logger.error("Command failed | cmd=%s error=%s", args.command, e, exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
