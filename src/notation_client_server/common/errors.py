"""Errors raised while tokenizing, converting or evaluating expressions."""


class ExpressionError(ValueError):
    """
    Base class of every expression handling failure.

    Subclasses ``ValueError`` so callers that only care about "bad input" can
    catch it the usual way. ``kind`` names the failure for reporting.
    """

    @property
    def kind(self) -> str:
        """Name of the failure, e.g. ``DivisionByZero``."""
        return type(self).__name__


class InvalidToken(ExpressionError):
    """A token is neither a number, a known operator nor an expected parenthesis."""


class MismatchedParentheses(ExpressionError):
    """An opening or closing parenthesis has no counterpart."""


class InsufficientOperands(ExpressionError):
    """An operator was reached with fewer than two values on the stack."""


class MalformedExpression(ExpressionError):
    """The working stack does not hold exactly one item at the end."""


class DivisionByZero(ExpressionError):
    """The divisor of a division is zero."""


class NumberOutOfRange(ExpressionError):
    """A number or a result cannot be represented as a finite float."""


class UnknownOperator(ExpressionError):
    """An operator symbol is missing from the operator table."""
