"""Operator table: precedence, associativity and implementation of each operator."""
from collections.abc import Mapping
from enum import Enum
import math
import operator
from types import MappingProxyType
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from notation_client_server.common.errors import DivisionByZero, UnknownOperator


# Type alias for operator functions (taking two floats, returning a float)
OperatorFn = Callable[[float, float], float]


class Associativity(str, Enum):
    """Grouping of operators sharing the same precedence."""

    LEFT = "left"
    RIGHT = "right"


def _divide(a: float, b: float) -> float:
    """Divide ``a`` by ``b``, refusing a zero divisor before dividing."""
    if b == 0.0:
        raise DivisionByZero(f"Division by zero: {a} / {b}")
    return a / b


def _is_odd_integer(x: float) -> bool:
    return x % 2 == 1


def _power(a: float, b: float) -> float:
    """
    Raise ``a`` to the power ``b`` with IEEE ``pow`` results where ``math.pow`` raises.

    - overflow gives ``inf``, negated for a negative base with an odd integer exponent
    - zero to a negative power gives ``inf``, keeping the sign of ``-0.0`` for an odd integer exponent
    - a negative base with a fractional exponent gives ``nan``
    """
    try:
        return math.pow(a, b)
    except OverflowError:
        return -math.inf if a < 0 and _is_odd_integer(b) else math.inf
    except ValueError:
        if a == 0:
            return math.copysign(math.inf, a) if _is_odd_integer(b) else math.inf
        return math.nan


class OperatorInfo(BaseModel):
    """Static description of a binary operator."""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., min_length=1, description="Operator symbol as it appears in expressions")
    precedence: int = Field(..., ge=1, description="Binding strength, higher binds tighter")
    associativity: Associativity = Field(default=Associativity.LEFT, description="Grouping of equal precedence")
    function: OperatorFn = Field(..., description="Binary implementation on floats")


def _table(*infos: OperatorInfo) -> Mapping[str, OperatorInfo]:
    return MappingProxyType({info.symbol: info for info in infos})


# Mapping of operator symbols to their description, read-only once built
OPERATORS: Mapping[str, OperatorInfo] = _table(
    OperatorInfo(symbol="+", precedence=1, function=operator.add),
    OperatorInfo(symbol="-", precedence=1, function=operator.sub),
    OperatorInfo(symbol="*", precedence=2, function=operator.mul),
    OperatorInfo(symbol="/", precedence=2, function=_divide),
    OperatorInfo(symbol="^", precedence=3, associativity=Associativity.RIGHT, function=_power),
    OperatorInfo(symbol="**", precedence=3, associativity=Associativity.RIGHT, function=_power),
)


def is_operator(token: str) -> bool:
    """Return True if ``token`` is a known operator symbol."""
    return token in OPERATORS


def _lookup(token: str) -> OperatorInfo:
    try:
        return OPERATORS[token]
    except KeyError:
        raise UnknownOperator(f"Unknown operator: {token!r}") from None


def operator_precedence(token: str) -> int:
    """
    Return the precedence of an operator.

    :param str token: Operator symbol

    :return: Precedence, higher binds tighter
    :rtype: int
    :raises UnknownOperator: If the symbol is not in the operator table
    """
    return _lookup(token).precedence


def operator_associativity(token: str) -> Associativity:
    """
    Return the associativity of an operator.

    :param str token: Operator symbol

    :return: ``Associativity.RIGHT`` for ``^`` and ``**``, ``Associativity.LEFT`` otherwise
    :rtype: Associativity
    :raises UnknownOperator: If the symbol is not in the operator table
    """
    return _lookup(token).associativity


def is_right_associative(token: str) -> bool:
    """Return True if ``token`` groups from the right (``a ^ b ^ c`` is ``a ^ (b ^ c)``)."""
    return operator_associativity(token) is Associativity.RIGHT


def apply_operator(token: str, a: float, b: float) -> float:
    """
    Apply a binary operator to two operands.

    :param str token: Operator symbol
    :param float a: Left operand
    :param float b: Right operand

    :return: Result of ``a <token> b``
    :rtype: float
    :raises UnknownOperator: If the symbol is not in the operator table
    :raises DivisionByZero: If dividing by zero
    """
    return _lookup(token).function(a, b)
