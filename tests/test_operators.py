"""Test the operator table."""
import math

from pydantic import ValidationError
import pytest

from notation_client_server.common.errors import DivisionByZero, UnknownOperator
from notation_client_server.common.operators import (
    OPERATORS,
    Associativity,
    apply_operator,
    is_operator,
    is_right_associative,
    operator_associativity,
    operator_precedence,
)


@pytest.mark.parametrize("token,expected", [
    ("+", True),
    ("-", True),
    ("*", True),
    ("/", True),
    ("^", True),
    ("**", True),
    ("%", False),
    ("(", False),
    ("2", False),
    ("", False),
])
def test_is_operator(token, expected):
    """Only the six operator symbols are operators."""
    assert is_operator(token) == expected


@pytest.mark.parametrize("token,expected", [
    ("+", 1),
    ("-", 1),
    ("*", 2),
    ("/", 2),
    ("^", 3),
    ("**", 3),
])
def test_operator_precedence(token, expected):
    """Precedence follows the usual arithmetic conventions."""
    assert operator_precedence(token) == expected


@pytest.mark.parametrize("token,expected", [
    ("+", Associativity.LEFT),
    ("-", Associativity.LEFT),
    ("*", Associativity.LEFT),
    ("/", Associativity.LEFT),
    ("^", Associativity.RIGHT),
    ("**", Associativity.RIGHT),
])
def test_operator_associativity(token, expected):
    """Power operators group right to left, the others left to right."""
    assert operator_associativity(token) is expected
    assert is_right_associative(token) == (expected is Associativity.RIGHT)


@pytest.mark.parametrize("token", ["%", "(", "x", ""])
def test_unknown_operator(token):
    """Unknown symbols are errors, never defaulted."""
    with pytest.raises(UnknownOperator):
        operator_precedence(token)
    with pytest.raises(UnknownOperator):
        operator_associativity(token)
    with pytest.raises(UnknownOperator):
        apply_operator(token, 1.0, 2.0)


def test_unknown_operator_is_a_value_error():
    """UnknownOperator can be caught as a ValueError and reports its kind."""
    with pytest.raises(ValueError) as exc_info:
        operator_precedence("%")
    assert exc_info.value.kind == "UnknownOperator"


@pytest.mark.parametrize("token,a,b,expected", [
    ("+", 2.0, 3.0, 5.0),
    ("-", 7.0, 1.0, 6.0),
    ("*", 2.0, 3.0, 6.0),
    ("/", 8.0, 4.0, 2.0),
    ("^", 2.0, 10.0, 1024.0),
    ("**", 9.0, 0.5, 3.0),
])
def test_apply_operator(token, a, b, expected):
    """Operators apply to (left, right) in that order."""
    assert apply_operator(token, a, b) == expected


def test_divide_by_zero():
    """Division by zero is refused before dividing."""
    with pytest.raises(DivisionByZero):
        apply_operator("/", 5.0, 0.0)


def test_power_overflow_is_infinite():
    """A power too large for a float saturates to a signed infinity."""
    assert apply_operator("**", 10.0, 400.0) == math.inf
    assert apply_operator("^", -10.0, 401.0) == -math.inf
    assert apply_operator("^", -10.0, 400.0) == math.inf


@pytest.mark.parametrize("a,b,expected", [
    (0.0, -1.0, math.inf),
    (0.0, -2.0, math.inf),
    (-0.0, -1.0, -math.inf),
    (-0.0, -2.0, math.inf),
    (-0.0, -0.5, math.inf),
])
def test_zero_to_negative_power(a, b, expected):
    """Zero to a negative power is infinite, signed by -0.0 only for odd integer exponents."""
    assert apply_operator("^", a, b) == expected


def test_power_without_real_result_is_nan():
    """A negative base with a fractional exponent gives nan."""
    assert math.isnan(apply_operator("^", -8.0, 0.5))


def test_operator_table_is_read_only():
    """The operator table cannot be modified."""
    with pytest.raises(TypeError):
        OPERATORS["%"] = OPERATORS["+"]
    with pytest.raises(ValidationError):
        OPERATORS["+"].precedence = 5
