from enum import StrEnum
from typing import Generic, Literal, TypedDict, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

Revision = int | Literal["HEAD", "BASE", "COMMITTED", "PREV"]
Depth = Literal["empty", "files", "immediates", "infinity"]
AcceptConflicts = Literal[
    "postpone",
    "base",
    "mine-conflict",
    "theirs-conflict",
    "mine-full",
    "theirs-full",
]


class StatusKind(StrEnum):
    """The primary status of a working copy item."""

    UNVERSIONED = "unversioned"
    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"
    REPLACED = "replaced"
    MERGED = "merged"
    CONFLICTED = "conflicted"
    IGNORED = "ignored"
    NONE = "none"
    NORMAL = "normal"
    EXTERNAL = "external"
    INCOMPLETE = "incomplete"
    MISSING = "missing"
    OBSTRUCTED = "obstructed"
    UNKNOWN = "unknown"


STATUS_CODES: dict[str, StatusKind] = {
    " ": StatusKind.NONE,
    "A": StatusKind.ADDED,
    "D": StatusKind.DELETED,
    "M": StatusKind.MODIFIED,
    "R": StatusKind.REPLACED,
    "C": StatusKind.CONFLICTED,
    "X": StatusKind.EXTERNAL,
    "I": StatusKind.IGNORED,
    "?": StatusKind.UNVERSIONED,
    "!": StatusKind.MISSING,
    "~": StatusKind.OBSTRUCTED,
}


class ErrorKind(StrEnum):
    """Categories a failed svn invocation is sorted into."""

    NOT_A_WORKING_COPY = "not_a_working_copy"
    CONNECTION_FAILURE = "connection_failure"
    AUTHENTICATION_FAILURE = "authentication_failure"
    AUTHENTICATION_EXHAUSTED = "authentication_exhausted"
    WORKING_COPY_LOCKED = "working_copy_locked"
    WORKING_COPY_DATABASE_ERROR = "working_copy_database_error"
    EXECUTABLE_NOT_FOUND = "executable_not_found"
    TIMEOUT = "timeout"
    INVALID_INPUT = "invalid_input"
    GENERIC = "generic"


class Invocation(BaseModel):
    """A single svn process to spawn."""

    model_config = ConfigDict(frozen=True)

    executable: str
    args: list[str] = Field(default_factory=list)
    cwd: str
    timeout_ms: int = Field(default=30000, gt=0)
    stdin: str | None = None


class ExecutionResult(BaseModel):
    """What came back from a finished (or failed) svn process."""

    exit_code: int | None
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0
    command: str
    cwd: str


class SvnInfo(BaseModel):
    """Fields of an `svn info` block. Anything svn did not print stays None."""

    path: str | None = None
    working_copy_root_path: str | None = None
    url: str | None = None
    relative_url: str | None = None
    repository_root: str | None = None
    repository_uuid: str | None = None
    revision: int | None = None
    node_kind: Literal["file", "directory"] | None = None
    schedule: str | None = None
    last_changed_author: str | None = None
    last_changed_rev: int | None = None
    last_changed_date: str | None = None
    text_last_updated: str | None = None
    checksum: str | None = None


class SvnStatus(BaseModel):
    path: str
    status: StatusKind


class SvnLogEntry(BaseModel):
    revision: int
    author: str
    date: str
    message: str


class ClassifiedError(BaseModel):
    """A failure sorted into the taxonomy, with guidance for the agent."""

    kind: ErrorKind
    message: str
    suggestion: str | None = None
    exit_code: int | None = None
    stderr: str | None = None
    command: str | None = None


class SvnResponse(BaseModel, Generic[T]):
    """Uniform envelope returned by every service operation."""

    success: bool
    data: T | None = None
    error: str | None = None
    suggestion: str | None = None
    command: str
    working_directory: str
    execution_time: int | None = None


class CheckoutOptions(BaseModel):
    revision: int | Literal["HEAD"] | None = None
    depth: Depth | None = None
    force: bool = False
    ignore_externals: bool = False


class UpdateOptions(BaseModel):
    revision: Revision | None = None
    force: bool = False
    ignore_externals: bool = False
    accept_conflicts: AcceptConflicts | None = None


class AddOptions(BaseModel):
    force: bool = False
    no_ignore: bool = False
    parents: bool = False
    auto_props: bool = False
    no_auto_props: bool = False


class CommitOptions(BaseModel):
    message: str | None = None
    file: str | None = None
    force: bool = False
    keep_locks: bool = False
    no_unlock: bool = False
    targets: list[str] = Field(default_factory=list)


class DeleteOptions(BaseModel):
    message: str | None = None
    force: bool = False
    keep_local: bool = False


class HealthReport(BaseModel):
    svn_available: bool
    version: str | None = None
    working_copy_valid: bool = False
    repository_accessible: bool = False


class DiagnosticReport(BaseModel):
    status_local: bool = False
    status_remote: bool = False
    log_basic: bool = False
    working_copy_path: str
    errors: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class MCPToolOutput(TypedDict):
    """The output of the MCP tool."""

    success: bool
    message: str
