"""TCP client."""
from pathlib import Path
import socket
import tarfile
import tempfile
from typing import Callable, List, Tuple
import zipfile

import py7zr
from pydantic import BaseModel, ConfigDict, Field, FilePath, IPvAnyAddress

from notation_client_server.common.logger import logger
from notation_client_server.common.operations import (
    INVALID_REQUEST,
    OperationFailure,
    OperationReport,
    OperationRequest,
)

# (line number in the input, parsed request)
NumberedRequest = Tuple[int, OperationRequest]


def _first_text_member(names: List[str], archive_kind: str) -> str:
    txt_files = [name for name in names if name.endswith(".txt")]
    if not txt_files:
        raise ValueError(f"📄❌ No .txt file found in {archive_kind} archive")
    return txt_files[0]


def _read_zip(archive_path: Path) -> str:
    with zipfile.ZipFile(archive_path, "r") as zf:
        member = _first_text_member(zf.namelist(), "zip")
        return zf.read(member).decode("utf-8")


def _read_tar_xz(archive_path: Path) -> str:
    with tarfile.open(archive_path, "r:xz") as tf:
        files = {m.name: m for m in tf.getmembers() if m.isfile()}
        member = _first_text_member(list(files), "tar.xz")
        with tf.extractfile(files[member]) as f:
            return f.read().decode("utf-8")


def _read_7z(archive_path: Path) -> str:
    with py7zr.SevenZipFile(archive_path, mode="r") as archive:
        member = _first_text_member(archive.getnames(), "7z")
        # Extract into a temporary directory so nothing lands beside the archive
        with tempfile.TemporaryDirectory() as tmpdir:
            archive.extract(path=tmpdir, targets=[member])
            return (Path(tmpdir) / member).read_text(encoding="utf-8")


def _archive_reader(archive_path: Path) -> Callable[[Path], str]:
    if archive_path.suffix == ".zip":
        return _read_zip
    if archive_path.suffixes[-2:] == [".tar", ".xz"]:
        return _read_tar_xz
    if archive_path.suffix == ".7z":
        return _read_7z
    raise ValueError(f"📄❌ Unsupported archive format: {archive_path.suffix}")


class NotationClient(BaseModel):
    """
    TCP client responsible for sending notation requests to the server and receiving results.

    The TCP client:
    - reads request lines ("<operation> <expression>") from a plain text file or an archive
    - rejects lines that are not valid requests without sending them
    - sends the valid requests to the server over a TCP socket
    - writes one result line per request, in input order, into an output file
    """

    # Make the Pydantic instance immutable (read-only), to prevent errors
    # that could be caused by changes to the network configuration during execution.
    model_config = ConfigDict(frozen=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=9000, ge=1, le=65535, description="Server TCP port")

    @staticmethod
    def read_requests(input_file: FilePath) -> str:
        """
        Return the request text of a ``.txt`` file or of the first ``.txt`` member of an archive.

        Supported archives: ``.zip``, ``.tar.xz``, ``.7z``.

        :param FilePath input_file: Path to the input file or archive

        :return: Content of the request file
        :rtype: str
        :raises ValueError: If the archive format is unsupported or holds no .txt file
        """
        if input_file.suffix == ".txt":
            return input_file.read_text(encoding="utf-8")
        reader = _archive_reader(input_file)
        logger.info(f"📦 Extracting requests from {input_file.name}")
        return reader(input_file)

    @staticmethod
    def parse_requests(content: str) -> Tuple[List[NumberedRequest], List[OperationReport]]:
        """
        Split request text into valid requests and ``InvalidRequest`` reports.

        Blank lines are skipped but still count for line numbers.

        :param str content: Request text

        :return: Numbered valid requests and the reports of rejected lines
        :rtype: Tuple[List[NumberedRequest], List[OperationReport]]
        """
        requests: List[NumberedRequest] = []
        rejected: List[OperationReport] = []
        for line_number, line in enumerate(content.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                requests.append((line_number, OperationRequest.from_line(line)))
            except ValueError as exc:
                logger.warning(f"📄❌ Line {line_number} rejected: {exc}")
                failure = OperationFailure(line=line.strip(), kind=INVALID_REQUEST, error=str(exc))
                rejected.append(OperationReport(line_number=line_number, outcome=failure))
        return requests, rejected

    def _exchange(self, requests: List[OperationRequest]) -> List[str]:
        """
        Send requests to the server and return its answer lines.

        :param list requests: Requests to send, one line each

        :return: One result line per request, in request order
        :rtype: List[str]
        :raises ConnectionError: If the server does not answer every request
        """
        payload = "".join(f"{request.to_line()}\n" for request in requests)

        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.connect((str(self.host), self.port))
            logger.info(f"🔌 Connected to {self.host}:{self.port}, sending {len(requests)} requests")
            s.sendall(payload.encode("utf-8"))
            # Signal that no more data will be sent
            s.shutdown(socket.SHUT_WR)

            chunks: List[bytes] = []
            while True:
                # recv() returns b"" once the server has closed the connection
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)

        answers = b"".join(chunks).decode("utf-8").splitlines()
        if len(answers) != len(requests):
            raise ConnectionError(f"🔌❌ Server answered {len(answers)} of {len(requests)} requests")
        return answers

    def send_file(self,
        input_file: FilePath,
        output_file: Path,
    ) -> None:
        """
        Send the requests of an input file to the server and write the results to an output file.

        Rejected lines are reported in the output file alongside the server's results,
        every line at the position of its request in the input.

        :param FilePath input_file: Path to the input file or archive
        :param Path output_file: Path where results will be written

        :return: None
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        :raises ConnectionError: If the server does not answer every request
        """
        requests, rejected = self.parse_requests(self.read_requests(input_file))
        answers = self._exchange([request for _, request in requests])

        numbered = [(report.line_number, report.to_line()) for report in rejected]
        numbered += [(line_number, answer) for (line_number, _), answer in zip(requests, answers)]

        with output_file.open("w", encoding="utf-8") as f_out:
            for _, line in sorted(numbered):
                f_out.write(f"{line}\n")

        logger.info(f"📄✅ {len(numbered)} results written to {output_file} ({len(rejected)} rejected)")
