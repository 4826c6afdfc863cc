from pathlib import Path
from typing import Any

from loguru import logger

from . import commands
from .commands import SvnCommand
from .config import SvnConfig
from .errors import (
    ClassifiedSvnError,
    InvalidInputError,
    SvnCommandError,
    SvnError,
    classify_error,
)
from .model import (
    AddOptions,
    CheckoutOptions,
    CommitOptions,
    DeleteOptions,
    DiagnosticReport,
    ExecutionResult,
    HealthReport,
    SvnInfo,
    SvnLogEntry,
    SvnResponse,
    SvnStatus,
    UpdateOptions,
)
from .parsers import clean_output, parse_info, parse_log, parse_status
from .runner import run_svn
from .validation import check_path, check_target, check_url


def _as_list(paths: str | list[str]) -> list[str]:
    return [paths] if isinstance(paths, str) else list(paths)


class SvnService:
    """Subversion operations for a single configured working copy."""

    def __init__(self, config: SvnConfig | None = None) -> None:
        self.config = config or SvnConfig.from_env()

    @property
    def working_directory(self) -> str:
        return self.config.working_directory

    async def _run(
        self, command: SvnCommand, operation: str
    ) -> ExecutionResult:
        """Run a command, turning any failure into a ClassifiedSvnError."""
        try:
            return await run_svn(self.config, command)
        except SvnCommandError as e:
            classified = classify_error(e, operation, self.working_directory)
            logger.error(f"{classified.kind}: {classified.message}")
            raise ClassifiedSvnError(classified) from e

    def _response(self, result: ExecutionResult, data: Any) -> SvnResponse:
        return SvnResponse(
            success=True,
            data=data,
            command=result.command,
            working_directory=result.cwd,
            execution_time=result.elapsed_ms,
        )

    def _failure(
        self, command: str, error: str, suggestion: str | None = None, data=None
    ) -> SvnResponse:
        return SvnResponse(
            success=False,
            data=data,
            error=error,
            suggestion=suggestion,
            command=command,
            working_directory=self.working_directory,
        )

    def is_working_copy(self) -> bool:
        """
        Check for svn metadata in the working directory or any parent.

        Since svn 1.7 only the root of a working copy has a .svn directory.
        """
        directory = Path(self.working_directory).resolve()
        return any(
            (candidate / ".svn").is_dir()
            for candidate in (directory, *directory.parents)
        )

    async def health_check(self) -> SvnResponse[HealthReport]:
        """Report whether svn runs, and whether the working copy is usable."""
        try:
            version = await run_svn(self.config, commands.version_command())
        except SvnError as e:
            logger.warning(f"svn is not available: {e}")
            classified = classify_error(
                e, "run svn --version", self.working_directory
            )
            return self._failure(
                "svn --version",
                "SVN is not available in the system PATH",
                classified.suggestion,
                HealthReport(svn_available=False),
            )

        working_copy_valid = self.is_working_copy()
        repository_accessible = False
        if working_copy_valid:
            try:
                await self.get_info()
                repository_accessible = True
            except SvnError as e:
                logger.info(f"Repository not accessible: {e}")

        return SvnResponse(
            success=True,
            data=HealthReport(
                svn_available=True,
                version=version.stdout.strip(),
                working_copy_valid=working_copy_valid,
                repository_accessible=repository_accessible,
            ),
            command="health-check",
            working_directory=self.working_directory,
        )

    async def get_info(self, path: str | None = None) -> SvnResponse[SvnInfo]:
        target = check_target(path) if path else None
        result = await self._run(commands.info_command(target), "get SVN info")
        return self._response(result, parse_info(clean_output(result.stdout)))

    async def get_status(
        self, path: str | None = None, show_all: bool = False
    ) -> SvnResponse[list[SvnStatus]]:
        """
        List changed items in the working copy.

        With show_all the remote repository is asked for out-of-date items
        too. That often fails without network access, in which case the
        local-only status is returned instead.
        """
        target = check_path(path) if path else None
        result = None
        remote = False
        if show_all:
            try:
                result = await run_svn(
                    self.config,
                    commands.status_command(target, show_updates=True),
                )
                remote = True
            except SvnError as e:
                logger.warning(
                    f"--show-updates failed, falling back to local status: {e}"
                )
        if result is None:
            result = await self._run(
                commands.status_command(target), "get SVN status"
            )
        return self._response(
            result, parse_status(clean_output(result.stdout), remote)
        )

    async def get_log(
        self,
        path: str | None = None,
        limit: int | None = None,
        revision: str | None = None,
    ) -> SvnResponse[list[SvnLogEntry]]:
        target = check_target(path) if path else None
        result = await self._run(
            commands.log_command(target, limit, revision), "get SVN log"
        )
        return self._response(result, parse_log(clean_output(result.stdout)))

    async def get_diff(
        self,
        path: str | None = None,
        old_revision: str | None = None,
        new_revision: str | None = None,
    ) -> SvnResponse[str]:
        target = check_target(path) if path else None
        result = await self._run(
            commands.diff_command(target, old_revision, new_revision),
            "get SVN diff",
        )
        return self._response(result, clean_output(result.stdout))

    async def checkout(
        self,
        url: str,
        path: str | None = None,
        options: CheckoutOptions | None = None,
    ) -> SvnResponse[str]:
        url = check_url(url)
        target = check_path(path) if path else None
        result = await self._run(
            commands.checkout_command(url, target, options), "checkout"
        )
        return self._response(result, clean_output(result.stdout))

    async def update(
        self, path: str | None = None, options: UpdateOptions | None = None
    ) -> SvnResponse[str]:
        target = check_path(path) if path else None
        result = await self._run(
            commands.update_command(target, options), "update"
        )
        return self._response(result, clean_output(result.stdout))

    async def add(
        self, paths: str | list[str], options: AddOptions | None = None
    ) -> SvnResponse[str]:
        targets = [check_path(p) for p in _as_list(paths)]
        if not targets:
            raise InvalidInputError("No files specified to add")
        result = await self._run(
            commands.add_command(targets, options), "add files"
        )
        return self._response(result, clean_output(result.stdout))

    async def commit(
        self, options: CommitOptions, paths: list[str] | None = None
    ) -> SvnResponse[str]:
        if not options.message and not options.file:
            raise InvalidInputError("Commit message is required")
        if options.message and options.file:
            raise InvalidInputError(
                "Give either a commit message or a message file, not both"
            )
        targets = [check_path(p) for p in (paths or options.targets)]
        options = options.model_copy(
            update={
                "targets": targets,
                "file": check_path(options.file) if options.file else None,
            }
        )
        result = await self._run(commands.commit_command(options), "commit")
        return self._response(result, clean_output(result.stdout))

    async def delete(
        self, paths: str | list[str], options: DeleteOptions | None = None
    ) -> SvnResponse[str]:
        targets = [check_target(p) for p in _as_list(paths)]
        if not targets:
            raise InvalidInputError("No files specified to delete")
        result = await self._run(
            commands.delete_command(targets, options), "delete files"
        )
        return self._response(result, clean_output(result.stdout))

    async def revert(self, paths: str | list[str]) -> SvnResponse[str]:
        targets = [check_path(p) for p in _as_list(paths)]
        if not targets:
            raise InvalidInputError("No files specified to revert")
        result = await self._run(
            commands.revert_command(targets), "revert files"
        )
        return self._response(result, clean_output(result.stdout))

    async def cleanup(self, path: str | None = None) -> SvnResponse[str]:
        target = check_path(path) if path else None
        result = await self._run(commands.cleanup_command(target), "cleanup")
        return self._response(result, clean_output(result.stdout))

    async def diagnose(self) -> SvnResponse[DiagnosticReport]:
        """Probe local status, remote status and log, and explain failures."""
        report = DiagnosticReport(working_copy_path=self.working_directory)
        probes = {
            "status_local": ("local status", commands.status_command()),
            "status_remote": (
                "remote status",
                commands.status_command(show_updates=True),
            ),
            "log_basic": ("basic log", commands.log_command(limit=1)),
        }
        for field, (label, command) in probes.items():
            try:
                await run_svn(self.config, command)
            except SvnError as e:
                classified = classify_error(e, label, self.working_directory)
                report.errors.append(f"{label} failed: {classified.message}")
                if (
                    classified.suggestion
                    and classified.suggestion not in report.suggestions
                ):
                    report.suggestions.append(classified.suggestion)
            else:
                setattr(report, field, True)

        if report.status_local and not (
            report.status_remote or report.log_basic
        ):
            report.suggestions.append(
                "Remote commands fail while local status works. "
                "Check network connectivity and SVN credentials."
            )
        return SvnResponse(
            success=True,
            data=report,
            command="diagnostic",
            working_directory=self.working_directory,
        )

    async def clear_credentials(self) -> SvnResponse[str]:
        """
        Remove cached svn credentials, e.g. after an E215004 error.

        `svn auth --remove` needs svn 1.9 or newer; on older clients a
        non-caching info call is made instead so the next command prompts
        for fresh credentials.
        """
        try:
            result = await run_svn(
                self.config, commands.clear_credentials_command()
            )
            return self._response(result, clean_output(result.stdout))
        except SvnError as e:
            logger.warning(f"svn auth --remove failed: {e}")

        try:
            await run_svn(
                self.config,
                SvnCommand(command="info", no_auth_cache=True),
            )
        except SvnError as e:
            classified = classify_error(
                e, "clear credential cache", self.working_directory
            )
            return self._failure(
                "clear-credentials",
                f"Could not clear the credential cache: {classified.message}",
                classified.suggestion,
            )
        return SvnResponse(
            success=True,
            data="Credential cache cleared (using fallback method)",
            command="clear-credentials",
            working_directory=self.working_directory,
        )
