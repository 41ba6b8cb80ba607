# solver.py
"""
Brute-force satisfiability over every assignment of a formula's variables.

Enumeration is depth-first with the first variable fixed to True before
False, i.e. the order of itertools.product((True, False), repeat=n). The
first satisfying assignment in that order is the reported witness.
"""
from dataclasses import dataclass
import inspect
import itertools
import logging
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from .formula import Term, Var, UnknownVariable, evaluate, free_variables
from .parse import parse

logger = logging.getLogger(__name__)

Assignment = Dict[str, bool]


@dataclass
class Result:
    """Verdict of a solve: a witness when satisfiable, None otherwise."""
    satisfiable: bool
    assignment: Optional[Assignment] = None

    def __bool__(self) -> bool:
        return self.satisfiable

    def to_dict(self) -> dict:
        assignment = dict(self.assignment) if self.assignment is not None else None
        return {"satisfiable": self.satisfiable, "assignment": assignment}


def _as_term(formula: Union[str, Term]) -> Term:
    return parse(formula) if isinstance(formula, str) else formula


def assignments(variables: Sequence[str]) -> Iterator[Assignment]:
    """Yield all 2**n assignments, each a fresh dict."""
    for values in itertools.product((True, False), repeat=len(variables)):
        yield dict(zip(variables, values))


def _satisfies(term: Term, assignment: Assignment) -> bool:
    # a missing variable counts as "not satisfied" and never stops the sweep
    try:
        return evaluate(term, assignment)
    except UnknownVariable as e:
        logger.debug("Evaluation failed under %s: %s", assignment, e.msg)
        return False


def models(formula: Union[str, Term]) -> Iterator[Assignment]:
    """Yield every satisfying assignment, in enumeration order."""
    term = _as_term(formula)
    for assignment in assignments(free_variables(term)):
        if _satisfies(term, assignment):
            yield assignment


def solve(formula: Union[str, Term]) -> Result:
    """
    Decide satisfiability by exhaustive enumeration.

    Parameters:
        formula: formula text or an already-built Term

    Returns:
        Result with the first satisfying assignment, or an unsatisfiable Result

    Raises:
        FormulaSyntaxError: if the text cannot be parsed
    """
    term = _as_term(formula)
    variables = free_variables(term)
    logger.debug("Enumerating %d assignment(s) over %s", 2 ** len(variables), variables)

    witness = next(models(term), None)
    if witness is None:
        return Result(False)
    return Result(True, witness)


def truth_table(formula: Union[str, Term]) -> Tuple[List[str], np.ndarray]:
    """
    Evaluate the formula under every assignment.

    Returns (variables, table): table has one row per assignment in
    enumeration order, one column per variable and a final column holding
    the formula's value.
    """
    term = _as_term(formula)
    variables = free_variables(term)
    table = np.zeros((2 ** len(variables), len(variables) + 1), dtype=bool)
    for row, assignment in enumerate(assignments(variables)):
        table[row, :-1] = [assignment[v] for v in variables]
        table[row, -1] = _satisfies(term, assignment)
    return variables, table


def classify(formula: Union[str, Term]) -> str:
    """Return "tautology", "contradiction" or "contingency"."""
    _, table = truth_table(formula)
    values = table[:, -1]
    if values.all():
        return "tautology"
    if not values.any():
        return "contradiction"
    return "contingency"


# DSL entry point
def sat(f: Callable) -> Optional[Assignment]:
    """
    Evaluate a Python lambda / function as a propositional formula
    and return a satisfying assignment (or None if UNSAT).
    """
    # 1. Create Var objects for each formal parameter
    param_names = list(inspect.signature(f).parameters)
    vars_ = [Var(name) for name in param_names]

    # 2. Build the term by calling the user function with those Vars
    term = f(*vars_)

    # 3. Solve and return
    return solve(term).assignment
