# parse.py

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
import sys
import threading

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

from .formula import Term, Nand, And, Or, Not, Var, Const


GRAMMAR_PATH = Path(__file__).with_name("grammar.peg")
GRAMMAR = Grammar(GRAMMAR_PATH.read_text(encoding="utf-8"))


# ----------------------------------------------------------------
# Custom syntax error
# ----------------------------------------------------------------
@dataclass
class FormulaSyntaxError(Exception):
    """Raised when formula text cannot be parsed."""
    msg: str
    text: str = ""
    pos: int = -1

    def __init__(self, _msg: str, text: str = "", pos: int = -1):
        super().__init__(_msg)
        self.msg = _msg
        self.text = text
        self.pos = pos

    def __str__(self) -> str:
        return self.msg


def _location(text: str, pos: int) -> str:
    line = text.count("\n", 0, pos) + 1
    column = pos - (text.rfind("\n", 0, pos) + 1) + 1
    return f"line {line}, column {column}"


def _check_parentheses(text: str) -> int:
    """Report the first unmatched parenthesis, tracking depth left to right.

    Returns the deepest nesting level reached.
    """
    open_positions = []
    deepest = 0
    for i, ch in enumerate(text):
        if ch == "(":
            open_positions.append(i)
            deepest = max(deepest, len(open_positions))
        elif ch == ")":
            if not open_positions:
                raise FormulaSyntaxError(f"Unmatched ')' at {_location(text, i)}", text, i)
            open_positions.pop()
    if open_positions:
        i = open_positions[-1]
        raise FormulaSyntaxError(f"Unmatched '(' at {_location(text, i)}", text, i)
    return deepest


_headroom_lock = threading.Lock()
_headroom_users = 0
_saved_limit = 0


@contextmanager
def _recursion_headroom(nesting: int):
    # the packrat parser and the visitor both recurse once per grammar rule,
    # several rules per nesting level; concurrent parses share one raised
    # limit and the last one out restores the original
    global _headroom_users, _saved_limit
    needed = 500 + 40 * nesting
    with _headroom_lock:
        if _headroom_users == 0:
            _saved_limit = sys.getrecursionlimit()
        _headroom_users += 1
        if needed > sys.getrecursionlimit():
            sys.setrecursionlimit(needed)
    try:
        yield
    finally:
        with _headroom_lock:
            _headroom_users -= 1
            if _headroom_users == 0:
                sys.setrecursionlimit(_saved_limit)


# ────────────────────────────────────────────────────────────────────────────
# Helpers for folding repeated groups
# ────────────────────────────────────────────────────────────────────────────
def _groups(visited):
    """A `*` or `?` that matched nothing visits to a bare Node; normalise to a list."""
    return visited if isinstance(visited, list) else []


def _fold(first: Term, groups, cls) -> Term:
    """Fold `first (ws op ws operand)*` left-associatively."""
    left = first
    for group in _groups(groups):
        left = cls(left, group[3])
    return left


# ────────────────────────────────────────────────────────────────────────────
# Main Visitor Class
# ────────────────────────────────────────────────────────────────────────────
class FormulaVisitor(NodeVisitor):
    """Turns a parse tree for grammar.peg into a Term.

    Each visit method corresponds to a grammar rule.
    """

    unwrapped_exceptions = (FormulaSyntaxError,)

    def __init__(self, text: str = ""):
        self.text = text

    def generic_visit(self, node, visited_children):
        return visited_children or node

    # formula = ws expr ws
    def visit_formula(self, node, visited_children):
        return visited_children[1]

    # expr = disjunction (ws nand_op ws expr)?
    def visit_expr(self, node, visited_children):
        left, rest = visited_children
        rest = _groups(rest)
        if rest:
            return Nand(left, rest[0][3])
        return left

    # disjunction = conjunction (ws "||" ws conjunction)*
    def visit_disjunction(self, node, visited_children):
        first, rest = visited_children
        return _fold(first, rest, Or)

    # conjunction = negation (ws "&&" ws negation)*
    def visit_conjunction(self, node, visited_children):
        first, rest = visited_children
        return _fold(first, rest, And)

    def visit_negation(self, node, visited_children):
        return visited_children[0]

    # not_expr = "!" ws negation
    def visit_not_expr(self, node, visited_children):
        return Not(visited_children[2])

    def visit_primary(self, node, visited_children):
        return visited_children[0]

    # nand_call = "nand" ws "(" ws arguments? ws ")"
    def visit_nand_call(self, node, visited_children):
        # Indices: nand[0] ws[1] ([2] ws[3] arguments?[4] ws[5] )[6]
        optional = _groups(visited_children[4])
        args = optional[0] if optional else []
        if len(args) != 2:
            raise FormulaSyntaxError(
                f"nand expects exactly 2 arguments, got {len(args)} "
                f"at {_location(self.text, node.start)}",
                self.text,
                node.start,
            )
        return Nand(*args)

    # arguments = expr (ws "," ws expr)*
    def visit_arguments(self, node, visited_children):
        first, rest = visited_children
        return [first] + [group[3] for group in _groups(rest)]

    # group = "(" ws expr ws ")"
    def visit_group(self, node, visited_children):
        return visited_children[2]

    def visit_literal(self, node, visited_children):
        return Const(node.text == "true")

    def visit_variable(self, node, visited_children):
        return Var(node.text)


# ----------------------------------------------------------------
# parse() function
# ----------------------------------------------------------------
def parse(text: str) -> Term:
    """Parse formula text (call, infix or boolean-operator syntax) into a Term."""
    if not text or not text.strip():
        raise FormulaSyntaxError("Empty formula", text or "", 0)
    nesting = _check_parentheses(text) + text.count("↑") + text.count("!")

    with _recursion_headroom(nesting):
        try:
            tree = GRAMMAR.parse(text)
        except ParseError as parse_error:
            pos = max(parse_error.pos, 0)
            found = repr(text[pos:pos + 10]) if text[pos:].strip() else "end of formula"
            raise FormulaSyntaxError(
                f"Unexpected {found} at {_location(text, pos)}", text, pos
            ) from parse_error

        return FormulaVisitor(text).visit(tree)
