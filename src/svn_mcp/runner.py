import asyncio
import os
import shlex
import time

from loguru import logger

from .commands import SvnCommand, auth_args
from .config import SvnConfig
from .errors import COMMAND_NOT_FOUND_EXIT_CODE, SvnCommandError, SvnTimeoutError
from .model import ExecutionResult, Invocation

SECRET_FLAGS = frozenset({"--password"})

# svn localizes its messages; the parsers and the classifier expect English.
SVN_ENV = {"LANG": "en_US.UTF-8", "LC_ALL": "en_US.UTF-8"}


def render_command(executable: str, args: list[str]) -> str:
    """Shell-quoted command line for logs and responses, secrets masked."""
    shown: list[str] = [executable]
    mask_next = False
    for arg in args:
        shown.append("***" if mask_next else arg)
        mask_next = arg in SECRET_FLAGS
    return shlex.join(shown)


def _decode(data: bytes | None) -> str:
    # Leading blanks are kept, status output is column aligned.
    return (data or b"").decode("utf-8", errors="replace").rstrip()


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    try:
        process.kill()
    except ProcessLookupError:
        return
    await process.wait()


async def execute(invocation: Invocation) -> ExecutionResult:
    """
    Run one svn process and wait for it.

    The argument list is handed to the OS as-is; no shell is involved, so
    paths and messages cannot inject commands.

    Returns:
        The result of a zero exit code, trailing whitespace trimmed from stdout.

    Raises:
        SvnTimeoutError: the process outlived invocation.timeout_ms and was killed.
        SvnCommandError: the process could not be started or exited non-zero.
    """
    command = render_command(invocation.executable, invocation.args)
    logger.debug(f"Executing: {command} (cwd={invocation.cwd})")
    start = time.monotonic()

    def elapsed() -> int:
        return int((time.monotonic() - start) * 1000)

    try:
        process = await asyncio.create_subprocess_exec(
            invocation.executable,
            *invocation.args,
            cwd=invocation.cwd,
            stdin=asyncio.subprocess.PIPE
            if invocation.stdin is not None
            else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={**os.environ, **SVN_ENV},
        )
    except OSError as e:
        # A missing cwd raises the same FileNotFoundError as a missing svn.
        missing_cwd = not os.path.isdir(invocation.cwd)
        result = ExecutionResult(
            exit_code=None if missing_cwd else COMMAND_NOT_FOUND_EXIT_CODE,
            stderr=str(e),
            elapsed_ms=elapsed(),
            command=command,
            cwd=invocation.cwd,
        )
        raise SvnCommandError(
            f"Failed to execute svn command: {e}", result
        ) from e

    stdin = invocation.stdin.encode() if invocation.stdin is not None else None
    try:
        stdout, stderr = await asyncio.wait_for(
            process.communicate(stdin), timeout=invocation.timeout_ms / 1000
        )
    except TimeoutError:
        await _kill(process)
        result = ExecutionResult(
            exit_code=process.returncode,
            elapsed_ms=elapsed(),
            command=command,
            cwd=invocation.cwd,
        )
        logger.warning(f"Timed out after {invocation.timeout_ms}ms: {command}")
        raise SvnTimeoutError(
            f"Command timeout after {invocation.timeout_ms}ms: {command}",
            result,
        ) from None

    result = ExecutionResult(
        exit_code=process.returncode,
        stdout=_decode(stdout),
        stderr=_decode(stderr),
        elapsed_ms=elapsed(),
        command=command,
        cwd=invocation.cwd,
    )
    logger.debug(f"Exit code {result.exit_code} in {result.elapsed_ms}ms")
    if result.exit_code != 0:
        raise SvnCommandError(
            f"SVN command failed with code {result.exit_code}: {command}",
            result,
        )
    return result


async def run_svn(
    config: SvnConfig, command: SvnCommand, stdin: str | None = None
) -> ExecutionResult:
    """Run an svn subcommand with the configured credentials and timeout."""
    args = command.to_command_list(auth_args(config, command.no_auth_cache))
    return await execute(
        Invocation(
            executable=config.svn_path,
            args=args,
            cwd=config.working_directory,
            timeout_ms=config.timeout,
            stdin=stdin,
        )
    )
