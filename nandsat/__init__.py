"""Parse NAND formulas and decide satisfiability by exhaustive enumeration."""

from .formula import (
    Term, Nand, And, Or, Not, Var, Const, nand,
    EvaluationError, UnknownVariable,
    evaluate, free_variables, format_term,
)
from .parse import FormulaSyntaxError, parse
from .solver import Result, assignments, classify, models, sat, solve, truth_table

__all__ = [
    "And",
    "Const",
    "EvaluationError",
    "FormulaSyntaxError",
    "Nand",
    "Not",
    "Or",
    "Result",
    "Term",
    "UnknownVariable",
    "Var",
    "assignments",
    "classify",
    "evaluate",
    "format_term",
    "free_variables",
    "models",
    "nand",
    "parse",
    "sat",
    "solve",
    "truth_table",
]
