"""
Command-line entry point.

This script:
- Starts the server process
- Launches a client against it
- Sends a requests file provided as argument and writes the results beside it

Each line of the requests file is ``<operation> <expression>``, for example::

    infix_to_postfix (2+3)*4
    calc_prefix + 2 * 3 5
"""

import argparse
from multiprocessing import Process
from pathlib import Path
import tempfile
import time
from typing import List, Optional

from pydantic import BaseModel, FilePath, ValidationError

from notation_client_server.client.client import NotationClient
from notation_client_server.common.config import ServerConfig
from notation_client_server.common.logger import logger, set_log_level
from notation_client_server.server.server import NotationServer


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    file_path : FilePath
        Path to the file containing notation requests.
    config : ServerConfig
        Network, worker and logging settings.
    """

    file_path: FilePath
    config: ServerConfig


def run_server(config: ServerConfig, output_file: Path) -> None:
    """
    Start the notation server.

    The server runs in its own process and listens
    for incoming socket connections.
    """
    set_log_level(config.log_level)
    server = NotationServer(
        host=config.host,
        port=config.port,
        max_workers=config.max_workers,
        output_file=output_file,
    )
    server.start()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert and evaluate infix, prefix and postfix expressions through a client/server pair"
    )
    parser.add_argument(
        "file_path",
        help="Path to the file (.txt, .zip, .tar.xz or .7z) containing notation requests",
    )
    parser.add_argument("--host", default=None, help="Server host address (env NOTATION_HOST)")
    parser.add_argument("--port", type=int, default=None, help="Server TCP port (env NOTATION_PORT)")
    parser.add_argument(
        "--max-workers", type=int, default=None, help="Maximum concurrent workers (env NOTATION_MAX_WORKERS)"
    )
    parser.add_argument("--log-level", default=None, help="Logging level (env NOTATION_LOG_LEVEL)")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    Flags take precedence over ``NOTATION_*`` environment variables.

    :param argv: Arguments to parse, ``sys.argv[1:]`` by default
    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ServerConfig.from_env(
            host=args.host,
            port=args.port,
            max_workers=args.max_workers,
            log_level=args.log_level,
        )
        return CliArgs(file_path=args.file_path, config=config)
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Construct a safe output file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/requests.txt
    output: resources/requests_txt_results.txt

    input: resources/requests.tar.xz
    output: resources/requests_tar_xz_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    suffixes = "".join(input_path.suffixes)
    stem = input_path.name[: len(input_path.name) - len(suffixes)] if suffixes else input_path.name
    suffix_safe = suffixes.replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main function: run a server process, send the requests file to it and wait for the results.
    """
    cli_args = parse_args(argv)
    config = cli_args.config
    set_log_level(config.log_level)

    input_path: Path = Path(cli_args.file_path)
    output_path: Path = build_output_path(input_path)

    with tempfile.TemporaryDirectory() as tmpdir:
        # The server spools its results apart from the file the client writes
        server_output = Path(tmpdir) / "results.txt"
        server_process = Process(target=run_server, args=(config, server_output))
        server_process.start()

        # Give the server time to start listening
        time.sleep(1)

        try:
            client = NotationClient(host=config.host, port=config.port)
            client.send_file(input_path, output_path)
            logger.info(f"🏁 Done: {output_path}")
        finally:
            # Ensure the server is always stopped
            server_process.terminate()
            server_process.join()


if __name__ == "__main__":
    main()
