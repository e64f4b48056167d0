"""Convert arithmetic expressions between infix, prefix and postfix notations."""
from typing import Callable, Iterable, List

from notation_client_server.common.errors import (
    InsufficientOperands,
    InvalidToken,
    MalformedExpression,
    MismatchedParentheses,
)
from notation_client_server.common.operators import is_operator, is_right_associative, operator_precedence
from notation_client_server.common.parser import ExpressionParser


# Combines an operator with its left and right operands into a sub-expression
Combiner = Callable[[str, str, str], str]


class ExpressionConverter:
    """
    Convert expressions between the three notations.

    Every method takes a string and returns a string whose tokens are joined by
    single spaces. Numbers are copied as written.

    Algorithms:
        - infix to postfix: Shunting-yard
        - infix to prefix: Shunting-yard on the reversed expression (parentheses swapped,
          equal precedence rule inverted), output reversed
        - between prefix, postfix and infix: a single pass with a stack of sub-expressions

    Conversions to infix parenthesize every sub-expression, so the result is
    unambiguous whatever the precedence of the operators involved.

    Examples:
        - infix_to_postfix("3 + 4 * 2")  -> "3 4 2 * +"
        - infix_to_prefix("3 + 4 * 2")   -> "+ 3 * 4 2"
        - postfix_to_infix("3 4 2 * +")  -> "( 3 + ( 4 * 2 ) )"
    """

    @staticmethod
    def _shunting_yard(tokens: List[str], reverse: bool = False) -> List[str]:
        """
        Reorder infix tokens into postfix order using the Shunting-yard algorithm.

        With ``reverse`` the tokens are expected to be a reversed infix expression with
        swapped parentheses: an operator of equal precedence on the stack is then popped
        for right associative operators instead of left associative ones.

        :param List[str] tokens: Infix tokens
        :param bool reverse: Whether tokens come from a reversed expression

        :return: Tokens in postfix order
        :rtype: List[str]
        :raises InvalidToken: If a token is neither a number, an operator nor a parenthesis
        :raises MismatchedParentheses: If parentheses do not pair up
        """
        output: List[str] = []
        stack: List[str] = []
        # Parentheses as written in the original expression, for error messages
        opening, closing = (")", "(") if reverse else ("(", ")")

        for token in tokens:
            if ExpressionParser.is_number(token):
                output.append(token)
            elif is_operator(token):
                prec = operator_precedence(token)
                # Equal precedence pops for left associative operators, or right associative ones when reversed
                pops_on_equal = is_right_associative(token) == reverse
                while stack and is_operator(stack[-1]):
                    top_prec = operator_precedence(stack[-1])
                    if top_prec > prec or (top_prec == prec and pops_on_equal):
                        output.append(stack.pop())
                    else:
                        break
                stack.append(token)
            elif token == "(":
                stack.append(token)
            elif token == ")":
                while stack and stack[-1] != "(":
                    output.append(stack.pop())
                if not stack:
                    raise MismatchedParentheses(f"Mismatched parentheses: no matching {opening!r} for {closing!r}")
                stack.pop()
            else:
                raise InvalidToken(f"Invalid token in infix expression: {token!r}")

        # Append remaining operators in reverse order (stack top first)
        while stack:
            token = stack.pop()
            if token == "(":
                raise MismatchedParentheses(f"Mismatched parentheses: unclosed {opening!r}")
            output.append(token)
        return output

    @staticmethod
    def _reduce(tokens: Iterable[str], notation: str, combine: Combiner, nearest_is_left: bool) -> str:
        """
        Rebuild an expression from prefix or postfix tokens with a stack of sub-expressions.

        :param Iterable[str] tokens: Tokens in processing order (reversed for prefix)
        :param str notation: Name of the input notation, used in error messages
        :param Combiner combine: Builds a sub-expression from (operator, left, right)
        :param bool nearest_is_left: Whether the top of the stack is the left operand

        :return: The single remaining sub-expression
        :rtype: str
        :raises InvalidToken: If a token is neither a number nor an operator
        :raises InsufficientOperands: If an operator has fewer than two operands
        :raises MalformedExpression: If the stack does not end with exactly one item
        """
        stack: List[str] = []
        for token in tokens:
            if ExpressionParser.is_number(token):
                stack.append(token)
            elif is_operator(token):
                if len(stack) < 2:
                    raise InsufficientOperands(
                        f"Invalid {notation} expression: insufficient operands for operator {token!r}"
                    )
                nearest = stack.pop()
                next_ = stack.pop()
                left, right = (nearest, next_) if nearest_is_left else (next_, nearest)
                stack.append(combine(token, left, right))
            else:
                raise InvalidToken(f"Invalid token in {notation} expression: {token!r}")

        if len(stack) != 1:
            raise MalformedExpression(
                f"Invalid {notation} expression: expected exactly one item at the end, found {len(stack)}"
            )
        return stack[0]

    @staticmethod
    def _as_prefix(op: str, left: str, right: str) -> str:
        return ExpressionParser.join([op, left, right])

    @staticmethod
    def _as_postfix(op: str, left: str, right: str) -> str:
        return ExpressionParser.join([left, right, op])

    @staticmethod
    def _as_infix(op: str, left: str, right: str) -> str:
        return ExpressionParser.join(["(", left, op, right, ")"])

    @staticmethod
    def infix_to_postfix(expr: str) -> str:
        """
        Convert an infix expression into postfix (Reverse Polish) notation.

        :param str expr: Infix expression, e.g. "(2+3)*4"

        :return: Postfix expression, e.g. "2 3 + 4 *"
        :rtype: str
        :raises InvalidToken: If the expression holds an unknown token
        :raises MismatchedParentheses: If parentheses do not pair up
        """
        tokens = ExpressionParser.tokenize(expr)
        return ExpressionParser.join(ExpressionConverter._shunting_yard(tokens))

    @staticmethod
    def infix_to_prefix(expr: str) -> str:
        """
        Convert an infix expression into prefix (Polish) notation.

        :param str expr: Infix expression, e.g. "2**2+3"

        :return: Prefix expression, e.g. "+ ** 2 2 3"
        :rtype: str
        :raises InvalidToken: If the expression holds an unknown token
        :raises MismatchedParentheses: If parentheses do not pair up
        """
        swap = {"(": ")", ")": "("}
        tokens = [swap.get(token, token) for token in reversed(ExpressionParser.tokenize(expr))]
        output = ExpressionConverter._shunting_yard(tokens, reverse=True)
        return ExpressionParser.join(output[::-1])

    @staticmethod
    def postfix_to_prefix(expr: str) -> str:
        """
        Convert a postfix expression into prefix notation.

        :param str expr: Postfix expression, e.g. "2 3 5 * +"

        :return: Prefix expression, e.g. "+ 2 * 3 5"
        :rtype: str
        """
        tokens = ExpressionParser.tokenize(expr)
        return ExpressionConverter._reduce(tokens, "postfix", ExpressionConverter._as_prefix, nearest_is_left=False)

    @staticmethod
    def prefix_to_postfix(expr: str) -> str:
        """
        Convert a prefix expression into postfix notation.

        :param str expr: Prefix expression, e.g. "+ 2 * 3 5"

        :return: Postfix expression, e.g. "2 3 5 * +"
        :rtype: str
        """
        tokens = reversed(ExpressionParser.tokenize(expr))
        return ExpressionConverter._reduce(tokens, "prefix", ExpressionConverter._as_postfix, nearest_is_left=True)

    @staticmethod
    def postfix_to_infix(expr: str) -> str:
        """
        Convert a postfix expression into fully parenthesized infix notation.

        :param str expr: Postfix expression, e.g. "2 3 + 1 -"

        :return: Infix expression, e.g. "( ( 2 + 3 ) - 1 )"
        :rtype: str
        """
        tokens = ExpressionParser.tokenize(expr)
        return ExpressionConverter._reduce(tokens, "postfix", ExpressionConverter._as_infix, nearest_is_left=False)

    @staticmethod
    def prefix_to_infix(expr: str) -> str:
        """
        Convert a prefix expression into fully parenthesized infix notation.

        :param str expr: Prefix expression, e.g. "- + 2 3 1"

        :return: Infix expression, e.g. "( ( 2 + 3 ) - 1 )"
        :rtype: str
        """
        tokens = reversed(ExpressionParser.tokenize(expr))
        return ExpressionConverter._reduce(tokens, "prefix", ExpressionConverter._as_infix, nearest_is_left=True)
