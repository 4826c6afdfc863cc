"""
Exceptions and the classifier that maps svn failures onto ErrorKind.

Classification is substring matching against svn's stderr text and error
codes. svn's wording can change between releases; every pattern lives in
ERROR_RULES.
"""

from dataclasses import dataclass

from .model import ClassifiedError, ErrorKind, ExecutionResult

COMMAND_NOT_FOUND_EXIT_CODE = 127


class SvnError(Exception):
    """Base class for everything the svn layer raises."""

    def __init__(
        self, message: str, classified: ClassifiedError | None = None
    ) -> None:
        super().__init__(message)
        self.classified = classified

    @property
    def suggestion(self) -> str | None:
        return self.classified.suggestion if self.classified else None


class InvalidInputError(SvnError):
    """A path or URL was rejected before svn was started."""

    def __init__(self, message: str) -> None:
        super().__init__(
            message,
            ClassifiedError(kind=ErrorKind.INVALID_INPUT, message=message),
        )


class SvnCommandError(SvnError):
    """svn could not be started or exited with a non-zero code."""

    def __init__(self, message: str, result: ExecutionResult) -> None:
        super().__init__(message)
        self.result = result

    @property
    def exit_code(self) -> int | None:
        return self.result.exit_code

    @property
    def stderr(self) -> str:
        return self.result.stderr

    @property
    def command(self) -> str:
        return self.result.command


class SvnTimeoutError(SvnCommandError):
    """svn did not finish within the configured timeout."""


class ClassifiedSvnError(SvnError):
    """An SvnCommandError after it went through classify_error."""

    def __init__(self, classified: ClassifiedError) -> None:
        super().__init__(classified.message, classified)


@dataclass(frozen=True)
class ErrorRule:
    kind: ErrorKind
    markers: tuple[str, ...]
    message: str
    suggestion: str
    exit_codes: tuple[int, ...] = ()

    def matches(self, exit_code: int | None, text: str) -> bool:
        if exit_code in self.exit_codes:
            return True
        lowered = text.lower()
        return any(marker.lower() in lowered for marker in self.markers)


# Order matters: the first matching rule wins. A spawn failure carries the OS
# error text, which names the executable path and must not reach the svn rules.
# E215004 output also contains "Authentication failed", so the exhausted rule
# has to precede the generic one.
ERROR_RULES: tuple[ErrorRule, ...] = (
    ErrorRule(
        kind=ErrorKind.EXECUTABLE_NOT_FOUND,
        markers=("ENOENT", "command not found"),
        message="svn is not installed or is not on the system PATH",
        suggestion="Install Subversion or set SVN_PATH to the svn executable",
        exit_codes=(COMMAND_NOT_FOUND_EXIT_CODE,),
    ),
    ErrorRule(
        kind=ErrorKind.NOT_A_WORKING_COPY,
        markers=("E155007", "not a working copy"),
        message="'{working_directory}' is not an SVN working copy",
        suggestion=(
            "Check out a repository first with svn_checkout, or point "
            "SVN_WORKING_DIRECTORY at an existing working copy"
        ),
    ),
    ErrorRule(
        kind=ErrorKind.CONNECTION_FAILURE,
        markers=(
            "E175002",
            "E170013",
            "Unable to connect",
            "Connection refused",
            "Network is unreachable",
        ),
        message="Cannot connect to the SVN repository",
        suggestion=(
            "Check your network connection, that the SVN server is "
            "reachable, and your credentials"
        ),
    ),
    ErrorRule(
        kind=ErrorKind.AUTHENTICATION_EXHAUSTED,
        markers=(
            "E215004",
            "No more credentials",
            "we tried too many times",
        ),
        message="Too many failed authentication attempts",
        suggestion=(
            "The stored credentials may be wrong. Clear the SVN credential "
            "cache with svn_clear_credentials and check SVN_USERNAME and "
            "SVN_PASSWORD"
        ),
    ),
    ErrorRule(
        kind=ErrorKind.AUTHENTICATION_FAILURE,
        markers=("E170001", "Authentication failed", "authorization failed"),
        message="Authentication failed",
        suggestion="Verify your SVN credentials (SVN_USERNAME and SVN_PASSWORD)",
    ),
    ErrorRule(
        kind=ErrorKind.WORKING_COPY_LOCKED,
        markers=(
            "E155004",
            "E155036",
            "working copy locked",
            "is already locked",
        ),
        message="The working copy is locked by an interrupted operation",
        suggestion="Run svn_cleanup to release the stale lock",
    ),
    ErrorRule(
        kind=ErrorKind.WORKING_COPY_DATABASE_ERROR,
        markers=("E200030", "sqlite"),
        message="The working copy database is damaged",
        suggestion="Run svn_cleanup to repair the working copy metadata",
    ),
)


def _error_text(error: SvnError) -> str:
    if isinstance(error, SvnCommandError) and error.stderr:
        return error.stderr
    return str(error)


def classify_error(
    error: SvnError, operation: str, working_directory: str
) -> ClassifiedError:
    """
    Sort a failed svn invocation into the error taxonomy.

    Args:
        error: The error raised by the runner or the validator.
        operation: Human readable name of what was attempted, e.g. "get SVN status".
        working_directory: The configured working copy, named in some messages.

    Returns:
        A ClassifiedError with a message and, where known, a remediation hint.
    """
    if error.classified is not None:
        return error.classified

    exit_code = stderr = command = None
    if isinstance(error, SvnCommandError):
        exit_code, stderr, command = error.exit_code, error.stderr, error.command

    def classified(
        kind: ErrorKind, message: str, suggestion: str | None = None
    ) -> ClassifiedError:
        return ClassifiedError(
            kind=kind,
            message=message,
            suggestion=suggestion,
            exit_code=exit_code,
            stderr=stderr,
            command=command,
        )

    if isinstance(error, SvnTimeoutError):
        return classified(
            ErrorKind.TIMEOUT,
            f"Failed to {operation}: {error}",
            "Increase SVN_TIMEOUT or target a smaller path",
        )

    text = _error_text(error)
    for rule in ERROR_RULES:
        if not rule.matches(exit_code, text):
            continue
        message = rule.message.format(working_directory=working_directory)
        return classified(rule.kind, message, rule.suggestion)

    detail = stderr or str(error)
    return classified(ErrorKind.GENERIC, f"Failed to {operation}: {detail}")
