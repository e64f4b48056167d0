"""Worker process carrying out a single notation request."""
from multiprocessing.connection import Connection
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from notation_client_server.common.errors import ExpressionError
from notation_client_server.common.logger import logger
from notation_client_server.common.notation import execute
from notation_client_server.common.operations import (
    INVALID_REQUEST,
    OperationFailure,
    OperationReport,
    OperationRequest,
    OperationResult,
)


class WorkerProcess(BaseModel):
    """
    Worker process responsible for one request line.

    Lifecycle:
        - Spawned by the parent server process
        - Receives one request line only
        - Sends an ``OperationReport`` through a Pipe
        - Terminates immediately after computation
    """

    # Make the Pydantic instance immutable (read-only) for safety
    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending results back to server")
    line: str = Field(..., description="Request line, '<operation> <expression>'")
    line_number: int = Field(..., ge=1, description="Line number in the input file")

    @field_validator("line")
    def line_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the request line is not empty."""
        if not v.strip():
            raise ValueError("Request line cannot be empty")
        return v.strip()

    def _failure(self, kind: str, exc: Exception) -> OperationFailure:
        logger.error(
            f"👷❌ Worker failed on line {self.line_number} [{kind}]: {exc}\n"
            f"Request could not be carried out: {self.line!r}"
        )
        return OperationFailure(line=self.line, kind=kind, error=str(exc))

    def _execute(self) -> Union[OperationResult, OperationFailure]:
        """
        Parse the request line and apply its operation.

        Unparseable lines are ``InvalidRequest`` failures, expression errors
        are failures of their own kind.
        """
        try:
            request = OperationRequest.from_line(self.line)
        except ValueError as exc:
            return self._failure(INVALID_REQUEST, exc)

        try:
            result = execute(request)
        except ExpressionError as exc:
            return self._failure(exc.kind, exc)

        logger.info(f"👷✅ Worker finished on line {self.line_number}: {result.result}")
        return result

    def run(self) -> None:
        """
        Carry out the request and send an ``OperationReport`` through the pipe.

        Any unexpected exception is reported as a failure named after its type.
        The connection is closed once the report is sent.

        :return: None
        """
        logger.info(f"👷🏁 Worker started on line {self.line_number}: {self.line}")

        try:
            outcome = self._execute()
        except Exception as exc:
            outcome = self._failure(type(exc).__name__, exc)

        try:
            self.conn.send(OperationReport(line_number=self.line_number, outcome=outcome))
        finally:
            self.conn.close()
