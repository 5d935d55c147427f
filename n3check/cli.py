# =====================================================================================
# CLI entry point
# =====================================================================================
#
#   n3check proof.n3            check, print the verified formula as N3
#   n3check --strict proof.n3   also require the declared conclusion
#
# Exit status: 0 valid, 1 invalid proof, 2 unreadable or unparsable input.

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .builtins import BuiltinRegistry, standard_builtins
from .checker import Checker
from .entail import DEFAULT_ENTAILMENT_BUDGET
from .errors import InvalidProof, N3SyntaxError
from .parser import load_proof
from .policy import AllPremises
from .writer import formula_to_n3

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="n3check",
        description="Check an N3 proof document (SWAP reason: vocabulary).",
    )
    parser.add_argument("proof", help="proof document (.n3)")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="require the result to entail the root step's declared conclusion",
    )
    parser.add_argument(
        "--budget",
        type=int,
        default=DEFAULT_ENTAILMENT_BUDGET,
        help="candidate matches one entailment test may try (default: %(default)s)",
    )
    parser.add_argument(
        "--no-builtins",
        action="store_true",
        help="do not accept math:/string:/list:/log: facts",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="log progress (-v) or every step (-vv) to stderr",
    )
    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = create_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        prefixes, graph = load_proof(args.proof)
    except OSError as e:
        print(f"Error reading file {args.proof!r}: {e}", file=sys.stderr)
        return 2
    except N3SyntaxError as e:
        print(f"Error parsing {args.proof!r}: {e}", file=sys.stderr)
        return 2
    logger.info("Loaded %d statements from %s", len(graph), args.proof)

    builtins = BuiltinRegistry() if args.no_builtins else standard_builtins(args.budget)
    checker = Checker(graph, builtins=builtins, budget=args.budget)
    policy = AllPremises()

    try:
        if args.strict:
            result = checker.verify(policy)
        else:
            result = checker.check(policy)
    except InvalidProof as e:
        print(f"{e.kind}: {e}", file=sys.stderr)
        return 1

    logger.info("Proof OK: %d statements, %d steps checked", len(result), len(checker.checked))
    sys.stdout.write(formula_to_n3(result, prefixes))
    return 0


if __name__ == "__main__":
    sys.exit(main())
