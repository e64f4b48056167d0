"""
Functional interface to the notation converter and the evaluator.

Thin wrappers over ``ExpressionParser``, ``ExpressionConverter`` and
``ExpressionEvaluator`` plus the dispatch used by server workers.
"""
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Union

from notation_client_server.common.converter import ExpressionConverter
from notation_client_server.common.evaluator import ExpressionEvaluator
from notation_client_server.common.operations import Operation, OperationRequest, OperationResult
from notation_client_server.common.operators import is_operator, operator_precedence
from notation_client_server.common.parser import ExpressionParser

__all__ = [
    "tokenize",
    "is_operator",
    "operator_precedence",
    "infix_to_postfix",
    "infix_to_prefix",
    "postfix_to_prefix",
    "prefix_to_postfix",
    "postfix_to_infix",
    "prefix_to_infix",
    "calc_postfix",
    "calc_prefix",
    "calc_infix",
    "run_operation",
    "execute",
]


tokenize = ExpressionParser.tokenize

infix_to_postfix = ExpressionConverter.infix_to_postfix
infix_to_prefix = ExpressionConverter.infix_to_prefix
postfix_to_prefix = ExpressionConverter.postfix_to_prefix
prefix_to_postfix = ExpressionConverter.prefix_to_postfix
postfix_to_infix = ExpressionConverter.postfix_to_infix
prefix_to_infix = ExpressionConverter.prefix_to_infix

calc_postfix = ExpressionEvaluator.calc_postfix
calc_prefix = ExpressionEvaluator.calc_prefix
calc_infix = ExpressionEvaluator.calc_infix


OPERATION_HANDLERS: Mapping[Operation, Callable[[str], Union[str, float]]] = MappingProxyType(
    {
        Operation.INFIX_TO_POSTFIX: infix_to_postfix,
        Operation.INFIX_TO_PREFIX: infix_to_prefix,
        Operation.POSTFIX_TO_PREFIX: postfix_to_prefix,
        Operation.PREFIX_TO_POSTFIX: prefix_to_postfix,
        Operation.POSTFIX_TO_INFIX: postfix_to_infix,
        Operation.PREFIX_TO_INFIX: prefix_to_infix,
        Operation.CALC_INFIX: calc_infix,
        Operation.CALC_POSTFIX: calc_postfix,
        Operation.CALC_PREFIX: calc_prefix,
    }
)


def run_operation(operation: Operation, expression: str) -> Union[str, float]:
    """
    Apply one conversion or evaluation to an expression.

    :param Operation operation: Operation to apply
    :param str expression: Expression in the notation the operation expects

    :return: Converted expression (str) or evaluated value (float)
    :rtype: Union[str, float]
    :raises ExpressionError: If the expression cannot be converted or evaluated
    """
    return OPERATION_HANDLERS[Operation(operation)](expression)


def execute(request: OperationRequest) -> OperationResult:
    """Carry out a request and wrap its outcome in an ``OperationResult``."""
    result = run_operation(request.operation, request.expression)
    return OperationResult(operation=request.operation, expression=request.expression, result=result)
