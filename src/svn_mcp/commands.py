"""Build svn argument lists. Nothing here touches the filesystem or a process."""

from pydantic import BaseModel, Field

from .config import SvnConfig
from .model import (
    AddOptions,
    CheckoutOptions,
    CommitOptions,
    DeleteOptions,
    UpdateOptions,
)


class SvnCommand(BaseModel):
    """A validated svn subcommand."""

    command: str
    args: list[str] = Field(default_factory=list)
    targets: list[str] = Field(default_factory=list)
    no_auth_cache: bool = False

    def to_command_list(self, auth: list[str] | None = None) -> list[str]:
        """Convert the command to an argv list, positional targets last."""
        return [self.command, *self.args, *(auth or []), *self.targets]


def auth_args(config: SvnConfig, no_auth_cache: bool = False) -> list[str]:
    """Authentication flags appended to every invocation."""
    args: list[str] = []
    if config.username:
        args.extend(["--username", config.username])
    if config.password:
        args.extend(["--password", config.password.get_secret_value()])
    args.append("--non-interactive")
    if no_auth_cache:
        args.append("--no-auth-cache")
    return args


def _flags(*pairs: tuple[bool, str]) -> list[str]:
    return [flag for enabled, flag in pairs if enabled]


def version_command() -> SvnCommand:
    return SvnCommand(command="--version", args=["--quiet"])


def info_command(target: str | None = None) -> SvnCommand:
    return SvnCommand(command="info", targets=[target] if target else [])


def status_command(
    path: str | None = None, show_updates: bool = False
) -> SvnCommand:
    return SvnCommand(
        command="status",
        args=_flags((show_updates, "--show-updates")),
        targets=[path] if path else [],
    )


def log_command(
    path: str | None = None,
    limit: int | None = None,
    revision: str | None = None,
) -> SvnCommand:
    args: list[str] = []
    if limit and limit > 0:
        args.extend(["--limit", str(limit)])
    if revision:
        args.extend(["--revision", revision])
    return SvnCommand(command="log", args=args, targets=[path] if path else [])


def diff_command(
    path: str | None = None,
    old_revision: str | None = None,
    new_revision: str | None = None,
) -> SvnCommand:
    """
    Build `svn diff`.

    With both revisions the two sides are given as peg revisions of the same
    path; with only the old one svn compares it against the working copy.
    """
    if old_revision and new_revision:
        target = path or "."
        return SvnCommand(
            command="diff",
            args=[
                "--old",
                f"{target}@{old_revision}",
                "--new",
                f"{target}@{new_revision}",
            ],
        )
    args = ["--revision", old_revision] if old_revision else []
    return SvnCommand(command="diff", args=args, targets=[path] if path else [])


def checkout_command(
    url: str, path: str | None = None, options: CheckoutOptions | None = None
) -> SvnCommand:
    options = options or CheckoutOptions()
    args: list[str] = []
    if options.revision is not None:
        args.extend(["--revision", str(options.revision)])
    if options.depth:
        args.extend(["--depth", options.depth])
    args += _flags(
        (options.force, "--force"),
        (options.ignore_externals, "--ignore-externals"),
    )
    return SvnCommand(
        command="checkout", args=args, targets=[url, path] if path else [url]
    )


def update_command(
    path: str | None = None, options: UpdateOptions | None = None
) -> SvnCommand:
    options = options or UpdateOptions()
    args: list[str] = []
    if options.revision is not None:
        args.extend(["--revision", str(options.revision)])
    args += _flags(
        (options.force, "--force"),
        (options.ignore_externals, "--ignore-externals"),
    )
    if options.accept_conflicts:
        args.extend(["--accept", options.accept_conflicts])
    return SvnCommand(command="update", args=args, targets=[path] if path else [])


def add_command(
    paths: list[str], options: AddOptions | None = None
) -> SvnCommand:
    options = options or AddOptions()
    args = _flags(
        (options.force, "--force"),
        (options.no_ignore, "--no-ignore"),
        (options.auto_props, "--auto-props"),
        (options.no_auto_props, "--no-auto-props"),
        (options.parents, "--parents"),
    )
    return SvnCommand(command="add", args=args, targets=list(paths))


def commit_command(options: CommitOptions) -> SvnCommand:
    args: list[str] = []
    if options.message:
        args.extend(["--message", options.message])
    if options.file:
        args.extend(["--file", options.file])
    args += _flags(
        (options.force, "--force"),
        (options.keep_locks, "--keep-locks"),
        (options.no_unlock, "--no-unlock"),
    )
    return SvnCommand(command="commit", args=args, targets=list(options.targets))


def delete_command(
    paths: list[str], options: DeleteOptions | None = None
) -> SvnCommand:
    options = options or DeleteOptions()
    args = _flags(
        (options.force, "--force"),
        (options.keep_local, "--keep-local"),
    )
    if options.message:
        args.extend(["--message", options.message])
    return SvnCommand(command="delete", args=args, targets=list(paths))


def revert_command(paths: list[str]) -> SvnCommand:
    return SvnCommand(command="revert", targets=list(paths))


def cleanup_command(path: str | None = None) -> SvnCommand:
    return SvnCommand(command="cleanup", targets=[path] if path else [])


def clear_credentials_command() -> SvnCommand:
    return SvnCommand(
        command="auth", args=["--remove"], targets=["*"], no_auth_cache=True
    )
