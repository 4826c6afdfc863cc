import argparse
import sys
from pathlib import Path

from loguru import logger

from . import server
from .config import SvnConfig

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | <level>{message}</level>"
)


def set_logger(verbose: bool, silent: bool, log_dir: Path = Path("logs")) -> None:
    """
    Set up the Loguru logger.

    stdout carries the MCP protocol, so console logging goes to stderr.
    """
    logger.remove()
    log_file = log_dir / "svn_mcp.log"

    if silent:
        logger.add(sink=log_file, format=LOG_FORMAT, level="ERROR")
        return

    logger.add(
        sink=sys.stderr,
        format=LOG_FORMAT,
        level="DEBUG" if verbose else "INFO",
    )
    if verbose:
        logger.add(sink=log_file, format=LOG_FORMAT, level="DEBUG")


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"{value} is not an integer") from e
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value} must be greater than 0")
    return number


def existing_directory(value: str) -> str:
    path = Path(value).expanduser()
    if not path.is_dir():
        raise argparse.ArgumentTypeError(f"{path} is not a valid directory")
    return str(path.resolve())


def create_parser() -> argparse.ArgumentParser:
    """Create a parser for the command line arguments."""
    parser = argparse.ArgumentParser(
        prog="svn-mcp",
        description="MCP server exposing Subversion operations over stdio",
    )
    parser.add_argument(
        "--svn-path",
        metavar="PATH",
        help="svn executable. Defaults to SVN_PATH or svn on PATH",
        dest="svn_path",
    )
    parser.add_argument(
        "-w",
        "--working-directory",
        metavar="DIR",
        type=existing_directory,
        help="Working copy to operate on. Defaults to SVN_WORKING_DIRECTORY or the current directory",
        dest="working_directory",
    )
    parser.add_argument(
        "-u",
        "--username",
        help="SVN username. Defaults to SVN_USERNAME",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        metavar="MS",
        type=positive_int,
        help="Command timeout in milliseconds. Defaults to SVN_TIMEOUT or 30000",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    parser.add_argument(
        "-q", "--silent", action="store_true", help="Only log errors, to file"
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = create_parser().parse_args(argv)
    set_logger(args.verbose, args.silent)

    config = SvnConfig.from_env(
        svn_path=args.svn_path,
        working_directory=args.working_directory,
        username=args.username,
        timeout=args.timeout,
    )
    server.main(config)


if __name__ == "__main__":
    exit_code = 0
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.exception(e)
        exit_code = 1
    finally:
        exit(exit_code)
