"""
Formula Builder command line.

This module handles:
1. Parsing formula text into a JSON tree document
2. Generating formula text from a tree document
3. Describing a tree document the way it is stored for a saved formula
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from formula_builder.converters.tree_codec import dump_tree, load_tree_json
from formula_builder.core.errors import FormulaBuilderError
from formula_builder.core.formula_engine import FormulaEngine
from formula_builder.core.reference_registry import ReferenceRegistry
from formula_builder.core.settings import load_settings

logger = logging.getLogger(__name__)


def _read_document(source: str) -> str:
    """Read a tree document from a file path, or stdin for ``-``."""
    if source == "-":
        return sys.stdin.read()
    with open(source, "r", encoding="utf-8") as f:
        return f.read()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formula-builder",
        description="Translate between spreadsheet formulas and formula trees",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  formula-builder parse "=IF(A1>10,\\"High\\",\\"Low\\")"
  formula-builder generate tree.json
  cat tree.json | formula-builder describe - --name bonus
        """,
    )
    parser.add_argument("--config", type=str, help="Compiler settings YAML file")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Parse formula text to a JSON tree")
    parse_cmd.add_argument("formula", type=str, help="Formula text, with or without '='")
    parse_cmd.add_argument(
        "--known",
        action="append",
        default=[],
        metavar="NAME",
        help="Extra reference name to treat as a cell reference (repeatable)",
    )

    generate_cmd = subparsers.add_parser(
        "generate", help="Generate formula text from a JSON tree"
    )
    generate_cmd.add_argument("tree", type=str, help="Tree document path, or '-' for stdin")

    describe_cmd = subparsers.add_parser(
        "describe", help="Print the stored record for a JSON tree"
    )
    describe_cmd.add_argument("tree", type=str, help="Tree document path, or '-' for stdin")
    describe_cmd.add_argument("--name", type=str, default="unnamed_formula")
    describe_cmd.add_argument("--description", type=str, default="")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the formula-builder CLI command."""
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        settings = load_settings(args.config)
        registry = ReferenceRegistry(settings.known_references)
        engine = FormulaEngine(settings, registry)

        if args.command == "parse":
            for name in args.known:
                registry.add(name)
            node = engine.parse(args.formula)
            print(json.dumps(dump_tree(node), indent=2))

        elif args.command == "generate":
            node = load_tree_json(
                _read_document(args.tree), max_depth=settings.max_nesting_depth
            )
            print(engine.generate(node))

        elif args.command == "describe":
            node = load_tree_json(
                _read_document(args.tree), max_depth=settings.max_nesting_depth
            )
            record = engine.build_record(args.name, node, args.description)
            print(record.model_dump_json(indent=2))

    except (FormulaBuilderError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
