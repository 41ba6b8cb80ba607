import numpy as np
import pytest

import nandsat.solver as solver_module
from nandsat import (
    Term, Var, Const, Nand, FormulaSyntaxError, Result,
    assignments, classify, evaluate, models, parse, sat, solve, truth_table,
)


# the small-formula cases the solver has always been checked against
SMALL_FORMULAS = [
    ("nand(a, a)", True),
    ("nand(nand(a, a), nand(a, a))", True),
    ("nand(nand(a, a), a)", True),
    ("nand(nand(nand(a, a), a), nand(nand(a, a), a))", False),
    ("nand(nand(a, a), nand(b, b))", True),
    ("nand(nand(nand(a, b), nand(a, b)), nand(nand(a, b), nand(a, b)))", True),
    ("nand(nand(a, b), nand(a, b))", True),
    ("arg_1 ↑ arg_1", True),
    ("(arg_1 ↑ arg_1) ↑ (arg_1 ↑ arg_1)", True),
    ("(arg_1 ↑ arg_1) ↑ arg_1", True),
    ("((arg_1 ↑ arg_1) ↑ arg_1) ↑ ((arg_1 ↑ arg_1) ↑ arg_1)", False),
    ("(arg_1 ↑ arg_1) ↑ (arg_2 ↑ arg_2)", True),
    ("((arg_1 ↑ arg_2) ↑ (arg_1 ↑ arg_2)) ↑ ((arg_1 ↑ arg_2) ↑ (arg_1 ↑ arg_2))", True),
    ("(A || B) && (!A || !B)", True),
    ("A && !A", False),
    ("!A && A", False),
]


@pytest.mark.parametrize("formula, satisfiable", SMALL_FORMULAS)
def test_small_formulas(formula, satisfiable):
    result = solve(formula)
    assert result.satisfiable is satisfiable
    if satisfiable:
        # a witness must satisfy the formula when substituted back
        assert evaluate(parse(formula), result.assignment) is True
    else:
        assert result.assignment is None


def test_negation_witness():
    assert solve("nand(x, x)") == Result(True, {"x": False})


def test_double_negation_witness():
    assert solve("nand(nand(x,x), nand(x,x))") == Result(True, {"x": True})


def test_tautology():
    formula = "nand(nand(x,x), x)"
    assert list(models(formula)) == [{"x": True}, {"x": False}]
    assert solve(formula).assignment == {"x": True}
    assert classify(formula) == "tautology"


@pytest.mark.parametrize("formula", [
    "nand(x,x) && x",
    "x && !x",
    "nand(nand(nand(x, x), x), nand(nand(x, x), x))",
    "((x ↑ x) ↑ x) ↑ ((x ↑ x) ↑ x)",
    "nand(x, y) && x && y",
    "false",
])
def test_contradictions(formula):
    result = solve(formula)
    assert not result
    assert result.to_dict() == {"satisfiable": False, "assignment": None}
    assert classify(formula) == "contradiction"


@pytest.mark.parametrize("formula", [
    "true",
    "false",
    "true ↑ true",
    "nand(false, true)",
    "!true || false",
    "nand(true, nand(false, false))",
])
def test_closed_formulas_match_direct_evaluation(formula):
    expected = evaluate(parse(formula), {})
    result = solve(formula)
    assert result.satisfiable is expected
    assert result.assignment == ({} if expected else None)


def test_first_witness_follows_enumeration_order():
    # a=T,b=T fails; a=T,b=F is the next assignment tried
    assert solve("a ↑ b").assignment == {"a": True, "b": False}
    assert solve("(arg_1 ↑ arg_1) ↑ (arg_2 ↑ arg_2)").assignment == {"arg_1": True, "arg_2": True}
    assert solve("!a && !b").assignment == {"a": False, "b": False}


def test_assignment_order():
    assert list(assignments(["a", "b"])) == [
        {"a": True, "b": True},
        {"a": True, "b": False},
        {"a": False, "b": True},
        {"a": False, "b": False},
    ]


@pytest.mark.parametrize("n", range(5))
def test_assignments_cover_every_combination_once(n):
    names = [f"v{i}" for i in range(n)]
    seen = [tuple(a[name] for name in names) for a in assignments(names)]
    assert len(seen) == 2 ** n
    assert len(set(seen)) == 2 ** n


def test_models_match_truth_table():
    variables, table = truth_table("nand(a, b)")
    assert variables == ["a", "b"]
    np.testing.assert_array_equal(table, np.array([
        [True, True, False],
        [True, False, True],
        [False, True, True],
        [False, False, True],
    ]))
    expected = [dict(zip(variables, row[:-1].tolist())) for row in table if row[-1]]
    assert list(models("nand(a, b)")) == expected


def test_truth_table_without_variables():
    variables, table = truth_table(Nand(Const(True), Const(False)))
    assert variables == []
    assert table.shape == (1, 1)
    assert table[0, 0]


def test_classify_contingency():
    assert classify("a ↑ b") == "contingency"


def test_wide_conjunction():
    names = [f"x{i}" for i in range(10)]
    assert solve(" && ".join(names)).assignment == {name: True for name in names}
    # only the very last assignment satisfies this one
    assert solve(" && ".join(f"!{name}" for name in names)).assignment == {name: False for name in names}


def test_syntax_errors_are_not_unsat():
    with pytest.raises(FormulaSyntaxError):
        solve("nand(x)")
    with pytest.raises(FormulaSyntaxError):
        solve("nand(x, y")


def test_evaluation_errors_count_as_unsatisfied(monkeypatch):
    # an assignment that misses a variable must not abort the sweep
    monkeypatch.setattr(solver_module, "free_variables", lambda term: [])
    assert solve(Nand(Var("x"), Var("x"))) == Result(False)
    assert solve(Const(True)) == Result(True, {})


def test_sat_lambda():
    assert sat(lambda x: x & ~x) is None
    assert sat(lambda x, y: ~(x & y) & x) == {"x": True, "y": False}
    assert sat(lambda x, y, z: (x | y) & ~z) == {"x": True, "y": True, "z": False}


def test_result_to_dict():
    assert solve("nand(x, x)").to_dict() == {"satisfiable": True, "assignment": {"x": False}}


def test_deeply_nested_call_formula():
    formula = "nand(" * 1500 + "x" + ", y)" * 1500
    result = solve(formula)
    assert result == Result(True, {"x": True, "y": True})
    assert evaluate(parse(formula), result.assignment) is True


def test_long_infix_chain_of_one_variable():
    # x ↑ (x ↑ (... ↑ x)) with an even number of x is false when x is true
    assert solve(" ↑ ".join(["x"] * 1500)).assignment == {"x": False}


def test_long_conjunction_chain():
    chain = " && ".join(["x"] * 3000)
    assert solve(chain).assignment == {"x": True}
    assert not solve(chain + " && !x")


def test_unknown_term_type_is_an_error():
    class Xor(Term):
        def __init__(self, left, right):
            super().__init__(left, right)

    with pytest.raises(TypeError):
        solve(Xor(Var("a"), Var("b")))


def test_to_dict_copies_the_witness():
    result = solve("nand(x, x)")
    data = result.to_dict()
    data["assignment"]["x"] = True
    assert result.assignment == {"x": False}
