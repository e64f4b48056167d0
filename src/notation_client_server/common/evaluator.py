"""Evaluate arithmetic expressions written in infix, prefix or postfix notation."""
import math
from typing import Iterable, List

from notation_client_server.common.converter import ExpressionConverter
from notation_client_server.common.errors import (
    InsufficientOperands,
    InvalidToken,
    MalformedExpression,
    NumberOutOfRange,
)
from notation_client_server.common.operators import apply_operator, is_operator
from notation_client_server.common.parser import ExpressionParser


class ExpressionEvaluator:
    """
    Evaluate expressions to a float.

    Design constraints:
        - No eval(), no dynamic code execution
        - Division by zero is refused before dividing, never turned into inf or nan

    Postfix and prefix expressions are reduced directly with a stack of floats.
    Infix expressions are first converted to postfix.

    Examples:
        - calc_postfix("3 4 2 * +") -> 11.0
        - calc_prefix("+ 3 * 4 2")  -> 11.0
        - calc_infix("3 + 4 * 2")   -> 11.0
    """

    @staticmethod
    def _to_float(token: str) -> float:
        """
        Convert a number token to a float.

        :param str token: Number token

        :return: Value of the token
        :rtype: float
        :raises NumberOutOfRange: If the value is not a finite float
        """
        try:
            value = float(token)
        except ValueError as exc:
            raise NumberOutOfRange(f"Number cannot be represented as float: {token}") from exc
        if math.isinf(value):
            raise NumberOutOfRange(f"Number out of range for float: {token}")
        return value

    @staticmethod
    def _reduce(tokens: Iterable[str], notation: str, nearest_is_left: bool) -> float:
        """
        Evaluate prefix or postfix tokens with a stack of floats.

        :param Iterable[str] tokens: Tokens in processing order (reversed for prefix)
        :param str notation: Name of the input notation, used in error messages
        :param bool nearest_is_left: Whether the top of the stack is the left operand

        :return: Computed result
        :rtype: float
        """
        stack: List[float] = []
        for token in tokens:
            if ExpressionParser.is_number(token):
                stack.append(ExpressionEvaluator._to_float(token))
            elif is_operator(token):
                # Operator requires two operands
                if len(stack) < 2:
                    raise InsufficientOperands(
                        f"Invalid {notation} expression: insufficient operands for operator {token!r}"
                    )
                nearest: float = stack.pop()
                next_: float = stack.pop()
                a, b = (nearest, next_) if nearest_is_left else (next_, nearest)
                stack.append(apply_operator(token, a, b))
            else:
                raise InvalidToken(f"Invalid token in {notation} expression: {token!r}")

        if len(stack) != 1:
            raise MalformedExpression(
                f"Invalid {notation} expression: expected exactly one result at the end, found {len(stack)}"
            )
        return stack[0]

    @staticmethod
    def calc_postfix(expr: str) -> float:
        """
        Evaluate a postfix expression.

        :param str expr: Postfix expression, e.g. "5 1 2 + 4 * + 3 -"

        :return: Computed result as float
        :rtype: float
        :raises InvalidToken: If the expression holds an unknown token
        :raises InsufficientOperands: If an operator lacks operands
        :raises MalformedExpression: If operands are left over
        :raises DivisionByZero: If dividing by zero
        :raises NumberOutOfRange: If a number does not fit a float
        """
        tokens = ExpressionParser.tokenize(expr)
        return ExpressionEvaluator._reduce(tokens, "postfix", nearest_is_left=False)

    @staticmethod
    def calc_prefix(expr: str) -> float:
        """
        Evaluate a prefix expression.

        Tokens are read from right to left, so the first operand popped is the left one.

        :param str expr: Prefix expression, e.g. "- + 5 * + 1 2 4 3"

        :return: Computed result as float
        :rtype: float
        """
        tokens = reversed(ExpressionParser.tokenize(expr))
        return ExpressionEvaluator._reduce(tokens, "prefix", nearest_is_left=True)

    @staticmethod
    def calc_infix(expr: str) -> float:
        """
        Evaluate an infix expression by converting it to postfix first.

        :param str expr: Infix expression, e.g. "5 + (1 + 2) * 4 - 3"

        :return: Computed result as float
        :rtype: float
        :raises MismatchedParentheses: If parentheses do not pair up
        """
        return ExpressionEvaluator.calc_postfix(ExpressionConverter.infix_to_postfix(expr))
