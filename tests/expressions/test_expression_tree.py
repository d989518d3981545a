"""Tests for the expression tree and its simplification."""

from __future__ import annotations

import pytest

from tileschema_expressions import (
    FALSE,
    TRUE,
    And,
    MatchAny,
    MatchField,
    MatchType,
    Not,
    Or,
    TaggedElement,
    and_,
    match_any,
    match_field,
    match_type,
    not_,
    or_,
    simplify,
)

A = MatchField("a")
B = MatchField("b")
C = MatchField("c")


# -- structural equality -----------------------------------------------------


def test_match_any_compares_values_as_set():
    assert MatchAny("a", ("x", "y")) == MatchAny("a", ("y", "x"))
    assert hash(MatchAny("a", ("x", "y"))) == hash(MatchAny("a", ("y", "x")))
    assert MatchAny("a", ("x",)) != MatchAny("b", ("x",))


def test_match_any_dedupes_values_keeping_order():
    assert MatchAny("a", ("y", "x", "y")).values == ("y", "x")


def test_and_and_or_are_distinct():
    assert TRUE != FALSE
    assert And((A,)) != Or((A,))


def test_constructors_match_node_types():
    assert and_(A, B) == And((A, B))
    assert or_(A) == Or((A,))
    assert not_(A) == Not(A)
    assert match_any("a", "x", "y") == MatchAny("a", ("x", "y"))
    assert match_field("a") == A
    assert match_type("way") == MatchType("way")


def test_operators_build_composites():
    assert (A & B) == And((A, B))
    assert (A | B) == Or((A, B))
    assert ~A == Not(A)


# -- simplify ----------------------------------------------------------------


def test_single_child_collapses():
    assert simplify(And((Or((A,)),))) == A


def test_same_operator_children_are_flattened():
    assert simplify(And((And((A, B)), C))) == And((A, B, C))
    assert simplify(Or((A, Or((B, Or((C,))))))) == Or((A, B, C))


def test_duplicates_are_dropped_first_occurrence_wins():
    assert simplify(Or((B, A, B))) == Or((B, A))


def test_false_absorbs_and():
    assert simplify(And((A, Or()))) == FALSE


def test_true_absorbs_or():
    assert simplify(Or((A, And()))) == TRUE


def test_true_vanishes_from_and():
    assert simplify(And((A, And(), B))) == And((A, B))


def test_false_vanishes_from_or():
    assert simplify(Or((Or(), A))) == A


def test_empty_composites_stay_constant():
    assert simplify(And()) == TRUE
    assert simplify(Or()) == FALSE


def test_not_rules():
    assert simplify(Not(Not(A))) == A
    assert simplify(Not(Or())) == TRUE
    assert simplify(Not(And())) == FALSE
    assert simplify(And((A, Not(Or())))) == A


def test_not_of_expression_is_kept():
    assert simplify(Not(Or((A,)))) == Not(A)


def test_simplify_method_matches_function():
    expression = And((Or((A,)), And((B,))))
    assert expression.simplify() == simplify(expression) == And((A, B))


@pytest.mark.parametrize(
    "expression",
    [
        And(),
        Or(),
        A,
        And((Or((A, B)), Or((A, B)), Not(Or()))),
        Or((And((A, And((B, Or((C,)))))), Or((Or(), A)))),
        Not(Not(Not(And((A, Or()))))),
        And((Or((MatchAny("x", ("1", "2")), MatchAny("x", ("2", "1")))), MatchType("way"))),
        Or((And(), Not(Or((A,))), Not(Or((A,))))),
    ],
)
def test_simplify_is_idempotent(expression):
    once = simplify(expression)
    assert simplify(once) == once


# -- rendering ---------------------------------------------------------------


def test_to_source():
    expression = and_(
        or_(match_any("highway", "primary", "trunk"), match_field("railway")),
        not_(match_any("access", "private")),
        match_type("way"),
    )
    assert expression.to_source() == (
        'and_(or_(match_any("highway", "primary", "trunk"), match_field("railway")), '
        'not_(match_any("access", "private")), match_type("way"))'
    )
    assert str(expression) == expression.to_source()


def test_to_source_escapes_literals():
    assert match_any("name", 'say "hi"').to_source() == 'match_any("name", "say \\"hi\\"")'


def test_to_dict():
    assert and_(match_field("a"), not_(match_type("way"))).to_dict() == {
        "op": "and",
        "children": [
            {"op": "match_field", "field": "a"},
            {"op": "not", "child": {"op": "match_type", "type": "way"}},
        ],
    }


# -- evaluate ----------------------------------------------------------------


def test_evaluate():
    element = TaggedElement({"highway": "primary", "name": ""}, frozenset({"way"}))

    assert match_any("highway", "primary", "trunk").evaluate(element)
    assert not match_any("highway", "trunk").evaluate(element)
    assert match_field("highway").evaluate(element)
    assert not match_field("name").evaluate(element)
    assert match_type("way").evaluate(element)
    assert not match_type("point").evaluate(element)
    assert TRUE.evaluate(element)
    assert not FALSE.evaluate(element)
    assert and_(match_field("highway"), not_(match_field("railway"))).evaluate(element)
