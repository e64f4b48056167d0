"""Test class NotationClient."""
import socket
import tarfile
import zipfile

import py7zr
from pydantic import ValidationError
import pytest

from notation_client_server.client.client import NotationClient
from notation_client_server.common.operations import INVALID_REQUEST, Operation


class FakeSocket:
    """Server stand-in answering every request line with a canned result."""

    def __init__(self, answer=None):
        self.answer = answer or (lambda line: f"{line} = ok")
        self.addr = None
        self.sent = b""
        self.replied = False

    def connect(self, addr):
        self.addr = addr

    def sendall(self, data):
        self.sent += data

    def shutdown(self, how):
        pass

    def recv(self, size):
        if self.replied:
            return b""
        self.replied = True
        lines = self.sent.decode().splitlines()
        return "".join(f"{self.answer(line)}\n" for line in lines).encode()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        pass


@pytest.fixture
def fake_socket(monkeypatch) -> FakeSocket:
    fake = FakeSocket()
    monkeypatch.setattr(socket, "socket", lambda *a, **kw: fake)
    return fake


def test_client_invalid_config() -> None:
    """Ensure invalid IP addresses and ports raise a ValidationError."""
    with pytest.raises(ValidationError):
        NotationClient(host="999.999.999.999", port=9000)
    with pytest.raises(ValidationError):
        NotationClient(host="127.0.0.1", port=70000)


def test_parse_requests_numbers_lines() -> None:
    """Valid requests keep the number of the line they were read from, blank lines included."""
    content = "calc_infix 1+1\n\n  infix_to_prefix 2**2+3  \n"
    requests, rejected = NotationClient.parse_requests(content)

    assert rejected == []
    assert [n for n, _ in requests] == [1, 3]
    assert requests[1][1].operation is Operation.INFIX_TO_PREFIX
    assert requests[1][1].expression == "2**2+3"


@pytest.mark.parametrize("line,message", [
    ("3 + 4", "Unknown operation: '3'"),
    ("to_roman 12", "Unknown operation: 'to_roman'"),
    ("calc_postfix", "Request line has no expression: 'calc_postfix'"),
])
def test_parse_requests_rejects_invalid_lines(line: str, message: str) -> None:
    """Lines that are not '<operation> <expression>' become InvalidRequest reports."""
    requests, rejected = NotationClient.parse_requests(f"calc_infix 1+1\n{line}\n")

    assert len(requests) == 1
    assert len(rejected) == 1
    assert rejected[0].line_number == 2
    assert rejected[0].to_line() == f"{line} -> ERROR [{INVALID_REQUEST}]: {message}"


def test_send_file_writes_results_in_input_order(tmp_path, fake_socket) -> None:
    """Rejected lines are not sent and appear in the results at their input position."""
    input_file = tmp_path / "ops.txt"
    output_file = tmp_path / "results.txt"
    input_file.write_text("calc_infix   1+1\nsqrt 4\n\npostfix_to_infix 5 2 -\n")

    NotationClient(host="127.0.0.2", port=9100).send_file(input_file, output_file)

    assert fake_socket.addr == ("127.0.0.2", 9100)
    assert fake_socket.sent == b"calc_infix 1+1\npostfix_to_infix 5 2 -\n"
    assert output_file.read_text().splitlines() == [
        "calc_infix 1+1 = ok",
        f"sqrt 4 -> ERROR [{INVALID_REQUEST}]: Unknown operation: 'sqrt'",
        "postfix_to_infix 5 2 - = ok",
    ]


def test_send_file_missing_answers(tmp_path, monkeypatch) -> None:
    """A server that answers fewer requests than were sent is an error."""
    fake = FakeSocket()
    fake.recv = lambda size: b""
    monkeypatch.setattr(socket, "socket", lambda *a, **kw: fake)
    input_file = tmp_path / "ops.txt"
    input_file.write_text("calc_infix 1+1\n")

    with pytest.raises(ConnectionError):
        NotationClient().send_file(input_file, tmp_path / "results.txt")


def test_read_requests_zip(tmp_path) -> None:
    """The first .txt member of a .zip archive is read."""
    zip_path = tmp_path / "ops.zip"
    with zipfile.ZipFile(zip_path, "w") as zf:
        zf.writestr("notes.md", "not requests")
        zf.writestr("ops.txt", "calc_infix 3+3\n")

    assert NotationClient.read_requests(zip_path) == "calc_infix 3+3\n"


def test_read_requests_tar_xz(tmp_path) -> None:
    """The first .txt member of a .tar.xz archive is read."""
    txt = tmp_path / "ops.txt"
    txt.write_text("calc_prefix * 4 4\n")
    tar_path = tmp_path / "ops.tar.xz"
    with tarfile.open(tar_path, "w:xz") as tf:
        tf.add(txt, arcname="ops.txt")

    assert NotationClient.read_requests(tar_path) == "calc_prefix * 4 4\n"


def test_read_requests_7z(tmp_path) -> None:
    """The first .txt member of a .7z archive is read."""
    txt = tmp_path / "ops.txt"
    txt.write_text("postfix_to_infix 5 2 -\n")
    archive_path = tmp_path / "ops.7z"
    with py7zr.SevenZipFile(archive_path, "w") as archive:
        archive.write(txt, arcname="ops.txt")

    assert NotationClient.read_requests(archive_path) == "postfix_to_infix 5 2 -\n"


def test_send_file_from_archive(tmp_path, fake_socket) -> None:
    """Archived requests go through the same validation as plain text ones."""
    zip_path = tmp_path / "ops.zip"
    with zipfile.ZipFile(zip_path, "w") as zf:
        zf.writestr("ops.txt", "calc_postfix 2 3 +\ncalc_postfix\n")
    output_file = tmp_path / "results.txt"

    NotationClient().send_file(zip_path, output_file)

    assert fake_socket.sent == b"calc_postfix 2 3 +\n"
    assert output_file.read_text().splitlines()[0] == "calc_postfix 2 3 + = ok"
    assert f"[{INVALID_REQUEST}]" in output_file.read_text().splitlines()[1]


def test_read_requests_archive_without_txt(tmp_path) -> None:
    """Verify that reading fails if no .txt file exists in the archive."""
    zip_path = tmp_path / "empty.zip"
    with zipfile.ZipFile(zip_path, "w") as zf:
        zf.writestr("data.bin", b"\x00\x01")

    with pytest.raises(ValueError, match="No .txt file"):
        NotationClient.read_requests(zip_path)


def test_read_requests_unsupported_format(tmp_path) -> None:
    """Ensure unsupported archive formats raise a ValueError."""
    file_path = tmp_path / "ops.rar"
    file_path.write_text("calc_infix 1+1")

    with pytest.raises(ValueError, match="Unsupported archive format"):
        NotationClient.read_requests(file_path)
