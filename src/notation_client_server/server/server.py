"""TCP server that converts and evaluates expressions using worker processes."""
from multiprocessing import Pipe, Process, cpu_count
from multiprocessing.connection import Connection, wait
from pathlib import Path
import socket
from typing import List, NamedTuple, Optional, TextIO

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress

from notation_client_server.common.logger import logger
from notation_client_server.common.operations import OperationFailure, OperationReport
from notation_client_server.server.worker import WorkerProcess

# Kind reported for a request whose worker exited without answering
WORKER_CRASHED = "WorkerCrashed"


class ActiveWorker(NamedTuple):
    """A running worker and the request it was given."""

    line_number: int
    line: str
    process: Process
    conn: Connection


class NotationServer(BaseModel):
    """
    TCP socket server handling notation requests from clients.

    Features:
        - Spawns one worker process per request line.
        - Writes each report to disk as soon as its worker answers.
        - Answers the client with one line per request, in request order.
        - Handles multiple simultaneous workers up to CPU core count (or ``max_workers``).
    """

    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(arbitrary_types_allowed=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=9000, ge=1, le=65535, description="Server TCP port")
    output_file: Path = Field(..., description="Path where reports are written as they arrive")
    max_workers: Optional[int] = Field(default=None, ge=1, description="Maximum concurrent worker processes")

    def _receive_data(self, conn: socket.socket) -> List[str]:
        """
        Receive all data from the client connection and return non-empty lines.

        :param socket.socket conn: Connected client socket

        :return: List of non-empty request lines
        :rtype: List[str]
        """
        chunks: List[bytes] = []
        while True:
            chunk: bytes = conn.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        data: List[str] = b"".join(chunks).decode("utf-8").splitlines()
        return [line.strip() for line in data if line.strip()]

    def _spawn_worker(self, line: str, line_number: int) -> ActiveWorker:
        """
        Spawn a WorkerProcess for the given request line.

        :param str line: Request line
        :param int line_number: Position of the request among the received lines

        :return: The running worker with the parent end of its pipe
        :rtype: ActiveWorker
        """
        parent_conn, child_conn = Pipe(duplex=False)
        worker = WorkerProcess(conn=child_conn, line=line, line_number=line_number)
        process = Process(target=worker.run)
        process.start()
        # Only the worker keeps the sending end, so a dead worker reads as EOF
        child_conn.close()
        return ActiveWorker(line_number, line, process, parent_conn)

    @staticmethod
    def _crash_report(worker: ActiveWorker) -> OperationReport:
        """Report a worker that exited without sending anything."""
        worker.process.join()
        failure = OperationFailure(
            line=worker.line,
            kind=WORKER_CRASHED,
            error=f"Worker exited with code {worker.process.exitcode} before answering",
        )
        logger.error(f"👷❌ Worker on line {worker.line_number} crashed: {failure.error}")
        return OperationReport(line_number=worker.line_number, outcome=failure)

    def _collect_finished_workers(
        self,
        active_workers: List[ActiveWorker],
        f_out: TextIO,
        reports: List[OperationReport],
    ) -> None:
        """
        Wait until at least one worker has answered, then collect every available report.

        Collected workers are joined and removed from ``active_workers``; their
        reports are appended to ``reports`` and written to ``f_out`` at once.

        :param list active_workers: Running workers
        :param TextIO f_out: Open file handle for writing reports
        :param list reports: Reports collected so far
        """
        ready = wait([worker.conn for worker in active_workers])
        for worker in [w for w in active_workers if w.conn in ready]:
            try:
                report: OperationReport = worker.conn.recv()
            except EOFError:
                report = self._crash_report(worker)
            worker.conn.close()
            worker.process.join()
            active_workers.remove(worker)
            reports.append(report)

            f_out.write(f"{report.to_line()}\n")
            f_out.flush()

    def _worker_limit(self, request_count: int) -> int:
        """Number of workers allowed to run at once, at least one."""
        limit = self.max_workers or cpu_count()
        return max(1, min(limit, request_count))

    @staticmethod
    def _render(reports: List[OperationReport]) -> bytes:
        """Render reports as result lines, in request order."""
        ordered = sorted(reports, key=lambda report: report.line_number)
        return "".join(f"{report.to_line()}\n" for report in ordered).encode("utf-8")

    def process_requests(self, lines: List[str], f_out: TextIO) -> List[OperationReport]:
        """
        Run one worker per request line, bounded by the worker limit.

        :param list lines: Request lines
        :param TextIO f_out: Open file handle for writing reports as they arrive

        :return: One report per line, in completion order
        :rtype: List[OperationReport]
        """
        max_workers: int = self._worker_limit(len(lines))
        active_workers: List[ActiveWorker] = []
        reports: List[OperationReport] = []

        for line_number, line in enumerate(lines, start=1):
            # Wait until a worker slot is available
            while len(active_workers) >= max_workers:
                self._collect_finished_workers(active_workers, f_out, reports)
            active_workers.append(self._spawn_worker(line, line_number))

        while active_workers:
            self._collect_finished_workers(active_workers, f_out, reports)

        failed = sum(report.failed for report in reports)
        logger.info(f"📊 {len(reports) - failed} succeeded, {failed} failed")
        return reports

    def start(self) -> None:
        """
        Start the TCP server, accept a client connection, and process its requests.

        Steps:
            1. Bind and listen on the specified host and port.
            2. Accept a single client connection.
            3. Receive all request lines from the client.
            4. Run a worker per line and write each report as it arrives.
            5. Send one result line per request back to the client, in request order.

        :return: None
        """
        logger.info(f"🖥️ Starting server on {self.host}:{self.port}")

        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind((str(self.host), self.port))
            s.listen()
            logger.info("🖥️ Server listening")

            conn, _ = s.accept()
            with conn, self.output_file.open("w", encoding="utf-8") as f_out:
                data: List[str] = self._receive_data(conn)
                logger.info(f"📥 Received {len(data)} requests")

                reports = self.process_requests(data, f_out)

                try:
                    conn.sendall(self._render(reports))
                    logger.info("✉️ Results sent to client")
                except OSError as exc:
                    logger.error(f"🔌❌ Client disconnected before receiving results: {exc}")
