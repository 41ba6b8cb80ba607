# formula.py
from dataclasses import dataclass
from typing import Self, Dict, List, Mapping


# Evaluation errors
@dataclass
class EvaluationError(Exception):
    """Raised when a term cannot be evaluated under an assignment."""
    msg: str

    def __init__(self, _msg: str):
        super().__init__(_msg)
        self.msg = _msg


class UnknownVariable(EvaluationError):
    """A variable was referenced that the assignment does not bind."""

    def __init__(self, name: str):
        super().__init__(f"Unknown variable: {name}")
        self.name = name


# Core AST node
class Term:
    children: tuple

    def __init__(self, *children: Self):
        self.children = tuple(children)
        # children already carry their hash, so this stays O(arity)
        self._hash = hash((self.__class__.__name__, self.children))

    # textual representation for debugging / doctest
    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({', '.join(repr(c) for c in self.children)})"

    # structural equality, so parsed terms can be compared in tests;
    # walks an explicit stack so deep terms do not hit the recursion limit
    def __eq__(self, other) -> bool:
        pairs = [(self, other)]
        while pairs:
            a, b = pairs.pop()
            if a is b:
                continue
            if type(a) is not type(b) or hash(a) != hash(b):
                return False
            if isinstance(a, (Var, Const)):
                if a != b:
                    return False
            elif len(a.children) != len(b.children):
                return False
            else:
                pairs.extend(zip(a.children, b.children))
        return True

    def __hash__(self) -> int:
        return self._hash

    # 1. Re‑express the term using only NANDs
    def to_nands(self) -> Self:
        """Rewrite this term using only NANDs.

        Identical sub‑terms are converted once and shared between parents;
        terms are never mutated, so sharing is safe.
        """
        cache: Dict["Term", "Term"] = {}
        stack = [(self, False)]

        while stack:
            t, expanded = stack.pop()
            if t in cache:
                continue

            # Leaves stay as‑is
            if isinstance(t, (Var, Const)):
                cache[t] = t
                continue

            if type(t) not in (Nand, And, Or, Not):
                raise TypeError(f"Unhandled Term subtype: {type(t)}")

            # convert the children first, then come back to this node
            if not expanded:
                stack.append((t, True))
                stack.extend((c, False) for c in t.children)
                continue

            converted = [cache[c] for c in t.children]

            if isinstance(t, Nand):
                a, b = converted
                new_node = Nand(a, b)

            # Map each derived connective to its NAND‑only expression
            elif isinstance(t, Not):
                a, = converted
                # ¬a  ≡  NAND(a, a)
                new_node = Nand(a, a)

            elif isinstance(t, And):
                a, b = converted
                # (a ∧ b) ≡ NAND(NAND(a, b), NAND(a, b))
                nab = Nand(a, b)
                new_node = Nand(nab, nab)

            else:
                a, b = converted
                # (a ∨ b) ≡ NAND(NAND(a, a), NAND(b, b))
                na = Nand(a, a)
                nb = Nand(b, b)
                new_node = Nand(na, nb)

            cache[t] = new_node

        return cache[self]

    # 2. Operator overloading so users can write x & ~y | z
    # '&'  → And
    def __and__(self, other: "Term") -> "Term":
        return And(self, other)

    # '|'  → Or
    def __or__(self, other: "Term") -> "Term":
        return Or(self, other)

    # '~'  → Not
    def __invert__(self) -> "Term":
        return Not(self)


# Concrete AST subclasses (evaluation lives in evaluate() below)
class Nand(Term):
    def __init__(self, left: Term, right: Term):
        super().__init__(left, right)

    @property
    def left(self) -> Term:
        return self.children[0]

    @property
    def right(self) -> Term:
        return self.children[1]


class And(Term):
    def __init__(self, left: Term, right: Term):
        super().__init__(left, right)


class Or(Term):
    def __init__(self, left: Term, right: Term):
        super().__init__(left, right)


class Not(Term):
    def __init__(self, operand: Term):
        super().__init__(operand)


class Var(Term):
    """Leaf node representing a formula variable."""

    def __init__(self, name: str):
        super().__init__()
        self.name = name

    def __repr__(self) -> str:
        return f"Var({self.name!r})"

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and self.name == other.name

    def __hash__(self) -> int:
        return hash(("Var", self.name))


class Const(Term):
    """Leaf node for the `true` / `false` keywords."""

    def __init__(self, value: bool):
        super().__init__()
        self.value = bool(value)

    def __repr__(self) -> str:
        return f"Const({self.value!r})"

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and self.value == other.value

    def __hash__(self) -> int:
        return hash(("Const", self.value))


def nand(left: Term, right: Term) -> Nand:
    """Build NAND(left, right); mirrors the `nand(a, b)` call syntax."""
    return Nand(left, right)


# Evaluation
_CONNECTIVES = {
    Nand: lambda a, b: not (a and b),
    And: lambda a, b: a and b,
    Or: lambda a, b: a or b,
    Not: lambda a: not a,
}


def evaluate(term: Term, assignment: Mapping[str, bool]) -> bool:
    """
    Evaluate a term under an assignment of variable names to booleans.

    Works bottom-up over an explicit stack, so nesting depth is unbounded.

    Raises:
        UnknownVariable: if a Var is not bound by the assignment.
        TypeError: if the term contains a node type with no meaning here.
    """
    values: List[bool] = []
    stack = [(term, False)]

    while stack:
        t, expanded = stack.pop()

        if isinstance(t, Const):
            values.append(t.value)

        elif isinstance(t, Var):
            if t.name not in assignment:
                raise UnknownVariable(t.name)
            values.append(bool(assignment[t.name]))

        elif type(t) not in _CONNECTIVES:
            raise TypeError(f"Unhandled Term subtype: {type(t)}")

        elif not expanded:
            stack.append((t, True))
            # right pushed first so the left operand is evaluated first
            stack.extend((c, False) for c in reversed(t.children))

        else:
            n = len(t.children)
            operands = values[-n:]
            del values[-n:]
            values.append(_CONNECTIVES[type(t)](*operands))

    return values[0]


def free_variables(term: Term) -> List[str]:
    """Distinct variable names, in first-occurrence pre-order (left before right)."""
    seen: Dict[str, None] = {}
    stack = [term]
    while stack:
        t = stack.pop()
        if isinstance(t, Var):
            seen.setdefault(t.name, None)
        else:
            # push right first so the left child is visited first
            stack.extend(reversed(t.children))
    return list(seen)


# Formatting back to text
_INFIX = {Nand: "↑", And: "&&", Or: "||"}


def format_term(term: Term, syntax: str = "call") -> str:
    """
    Render a term as formula text.

    `syntax="call"` writes nand(a, b); `syntax="infix"` writes a ↑ b.
    Derived connectives use &&, || and !. The output parses back to an
    equal term.
    """
    if syntax not in ("call", "infix"):
        raise ValueError(f"Unknown syntax: {syntax!r}")

    pieces: List[str] = []
    stack = [(term, False, False)]

    while stack:
        t, nested, expanded = stack.pop()

        if isinstance(t, Const):
            pieces.append("true" if t.value else "false")
            continue
        if isinstance(t, Var):
            pieces.append(t.name)
            continue
        if type(t) not in _CONNECTIVES:
            raise TypeError(f"Unhandled Term subtype: {type(t)}")

        call = isinstance(t, Nand) and syntax == "call"
        if not expanded:
            stack.append((t, nested, True))
            # operands of nand(...) are delimited by the call itself
            stack.extend((c, not call, False) for c in reversed(t.children))
            continue

        n = len(t.children)
        operands = pieces[-n:]
        del pieces[-n:]

        if call:
            pieces.append(f"nand({operands[0]}, {operands[1]})")
        elif isinstance(t, Not):
            pieces.append(f"!{operands[0]}")
        else:
            s = f"{operands[0]} {_INFIX[type(t)]} {operands[1]}"
            pieces.append(f"({s})" if nested else s)

    return pieces[0]
