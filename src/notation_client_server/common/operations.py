"""Pydantic models for notation requests and their results."""
from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Kind reported for lines that are not a valid "<operation> <expression>" request
INVALID_REQUEST = "InvalidRequest"


class Operation(str, Enum):
    """Conversion or evaluation applied to an expression."""

    INFIX_TO_POSTFIX = "infix_to_postfix"
    INFIX_TO_PREFIX = "infix_to_prefix"
    POSTFIX_TO_PREFIX = "postfix_to_prefix"
    PREFIX_TO_POSTFIX = "prefix_to_postfix"
    POSTFIX_TO_INFIX = "postfix_to_infix"
    PREFIX_TO_INFIX = "prefix_to_infix"
    CALC_INFIX = "calc_infix"
    CALC_POSTFIX = "calc_postfix"
    CALC_PREFIX = "calc_prefix"


class OperationRequest(BaseModel):
    """Represents a single request sent to the server: one operation on one expression."""

    model_config = ConfigDict(frozen=True)

    operation: Operation = Field(..., description="Operation to apply")
    expression: str = Field(..., description="Expression as a string")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not empty."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v.strip()

    @classmethod
    def from_line(cls, line: str) -> "OperationRequest":
        """
        Parse a request line of the form ``<operation> <expression>``.

        :param str line: Request line, e.g. "infix_to_postfix 2+3*5"

        :return: Parsed request
        :rtype: OperationRequest
        :raises ValueError: If the line is empty, the operation unknown or the expression missing
        """
        parts = line.strip().split(maxsplit=1)
        if not parts:
            raise ValueError("Request line cannot be empty")
        if len(parts) < 2:
            raise ValueError(f"Request line has no expression: {line.strip()!r}")
        try:
            operation = Operation(parts[0])
        except ValueError:
            raise ValueError(f"Unknown operation: {parts[0]!r}") from None
        return cls(operation=operation, expression=parts[1])

    def to_line(self) -> str:
        return f"{self.operation.value} {self.expression}"


class OperationResult(BaseModel):
    """Represents the result of a successful operation."""

    operation: Operation = Field(..., description="Operation applied")
    expression: str = Field(..., description="Original expression")
    result: Union[float, str] = Field(..., description="Converted expression or evaluated value")

    def to_line(self) -> str:
        return f"{self.operation.value} {self.expression} = {self.result}"


class OperationFailure(BaseModel):
    """Represents a request that could not be carried out."""

    line: str = Field(..., description="Request line as received")
    kind: str = Field(..., description="Error kind, e.g. DivisionByZero")
    error: str = Field(..., description="Error message")

    def to_line(self) -> str:
        return f"{self.line} -> ERROR [{self.kind}]: {self.error}"


class OperationReport(BaseModel):
    """Outcome of the request found on a given line of the input."""

    line_number: int = Field(..., ge=1, description="Line number of the request in the input")
    outcome: Union[OperationResult, OperationFailure] = Field(..., description="Result or failure of the request")

    @property
    def failed(self) -> bool:
        return isinstance(self.outcome, OperationFailure)

    def to_line(self) -> str:
        return self.outcome.to_line()
