"""Split arithmetic expressions into tokens."""
from typing import List


def _is_digit(char: str) -> bool:
    # ASCII digits only, str.isdigit() also accepts "²"
    return char in "0123456789"


class ExpressionParser:
    """
    Turn raw expression strings into token sequences.

    Tokens are plain strings:
        - numbers keep their original text ("3.0" stays "3.0")
        - "**" is a single token
        - every other non-space character is a token of its own

    Tokenization never fails. Tokens that make no sense ("." or "x") are left
    for the converter and the evaluator to reject.

    Examples:
        - "2+3*5"    -> ["2", "+", "3", "*", "5"]
        - "2**.5"    -> ["2", "**", ".5"]
        - "1.2.3"    -> ["1.2", ".", "3"]
    """

    @staticmethod
    def _starts_number(expr: str, i: int) -> bool:
        """
        Determine if a number starts at position ``i``.

        A number starts with a digit, or with a "." that is followed by a digit
        and not preceded by a digit or another ".".

        :param str expr: Expression string
        :param int i: Current position

        :return: True if a number token starts at ``i``
        :rtype: bool
        """
        char = expr[i]
        if _is_digit(char):
            return True
        if char != "." or i + 1 >= len(expr) or not _is_digit(expr[i + 1]):
            return False
        return i == 0 or (not _is_digit(expr[i - 1]) and expr[i - 1] != ".")

    @staticmethod
    def tokenize(expr: str) -> List[str]:
        """
        Split an arithmetic expression into tokens.

        Whitespace is optional between tokens ("2+3" and "2 + 3" give the same tokens).

        :param str expr: Arithmetic expression as a string

        :return: List of tokens
        :rtype: List[str]
        """
        tokens: List[str] = []
        i = 0
        while i < len(expr):
            if expr[i].isspace():
                i += 1
            elif ExpressionParser._starts_number(expr, i):
                # Longest run of digits with at most one decimal point
                j = i
                has_decimal = False
                while j < len(expr):
                    if _is_digit(expr[j]):
                        j += 1
                    elif expr[j] == "." and not has_decimal:
                        has_decimal = True
                        j += 1
                    else:
                        break
                tokens.append(expr[i:j])
                i = j
            elif expr.startswith("**", i):
                tokens.append("**")
                i += 2
            else:
                tokens.append(expr[i])
                i += 1
        return tokens

    @staticmethod
    def is_number(token: str) -> bool:
        """
        Determine if a token represents a numeric value.

        Accepts digits with at most one decimal point and at least one digit
        ("12", "4.5", ".5", "3."). Signs and exponents are not part of numbers.

        :param str token: Token string

        :return: True if token is a number, else False
        :rtype: bool
        """
        if not token or token.count(".") > 1:
            return False
        digits = token.replace(".", "")
        return digits != "" and all(_is_digit(char) for char in digits)

    @staticmethod
    def join(tokens: List[str]) -> str:
        """Join tokens (or sub-expressions) with single spaces."""
        return " ".join(tokens)
