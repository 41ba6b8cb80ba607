#!/usr/bin/env python3
"""
cli.py – brute-force SAT for NAND formulas

    $ nandsat "nand(x, x)"
    $ nandsat "(a ↑ b) ↑ c" --all --table
    $ python -m nandsat "nand(x,x) && x" --json

Each formula is solved independently; a malformed formula stops the run
with exit status 1.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .formula import Term, format_term
from .parse import FormulaSyntaxError, parse
from .solver import Assignment, models, solve, truth_table
from .timeme import timeme


def _format_assignment(assignment: Assignment) -> str:
    if not assignment:
        return "(no variables)"
    return ", ".join(f"{name}={'true' if value else 'false'}" for name, value in assignment.items())


def _print_table(term: Term) -> None:
    variables, table = truth_table(term)
    header = variables + ["value"]
    widths = [max(len(h), 5) for h in header]
    print("  ".join(h.ljust(w) for h, w in zip(header, widths)))
    for row in table:
        print("  ".join(("true" if v else "false").ljust(w) for v, w in zip(row, widths)))


def _report(formula: str, args: argparse.Namespace) -> None:
    term = parse(formula)

    if args.nand:
        print(f"nand form: {format_term(term.to_nands(), syntax=args.nand)}")

    if args.time:
        with timeme(f"solving {formula!r}"):
            result = solve(term)
    else:
        result = solve(term)

    if args.json:
        print(json.dumps({"formula": formula, **result.to_dict()}, ensure_ascii=False))
    elif result.satisfiable:
        print(f"✓  satisfiable: {_format_assignment(result.assignment)}")
    else:
        print("✗  unsatisfiable")

    if args.all:
        for model in models(term):
            print(f"   model: {_format_assignment(model)}")

    if args.table:
        _print_table(term)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="nandsat",
        description="Decide satisfiability of NAND formulas by trying every assignment",
    )
    ap.add_argument("formulas", nargs="+", metavar="FORMULA",
                    help="nand(a, b), a ↑ b or a && !b style formula")
    ap.add_argument("--all", action="store_true", help="List every satisfying assignment")
    ap.add_argument("--table", action="store_true", help="Print the truth table")
    ap.add_argument("--nand", choices=("call", "infix"), help="Print the NAND-only rewrite")
    ap.add_argument("--time", action="store_true", help="Report solve time")
    ap.add_argument("--json", action="store_true", help="Print the verdict as JSON")
    ap.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return ap


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    for formula in args.formulas:
        try:
            _report(formula, args)
        except FormulaSyntaxError as exc:
            print(f"✗  {formula!r}: {exc.msg}", file=sys.stderr)
            sys.exit(1)


if __name__ == "__main__":
    main()
