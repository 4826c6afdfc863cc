from svn_mcp.commands import SvnCommand
from svn_mcp.config import SvnConfig
from svn_mcp.errors import SvnCommandError
from svn_mcp.model import ExecutionResult


def command_failure(
    stderr: str, exit_code: int | None = 1, command: str = "svn status"
) -> SvnCommandError:
    """An error shaped like the one the runner raises for a failed svn call."""
    result = ExecutionResult(
        exit_code=exit_code, stderr=stderr, command=command, cwd="/wc"
    )
    return SvnCommandError(
        f"SVN command failed with code {exit_code}: {command}", result
    )


class FakeSvn:
    """Stands in for runner.run_svn, replaying scripted outcomes in order."""

    def __init__(self, *outcomes: str | Exception) -> None:
        self.outcomes = list(outcomes)
        self.commands: list[SvnCommand] = []

    async def __call__(
        self, config: SvnConfig, command: SvnCommand, stdin: str | None = None
    ) -> ExecutionResult:
        self.commands.append(command)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return ExecutionResult(
            exit_code=0,
            stdout=outcome,
            elapsed_ms=12,
            command=f"svn {' '.join(command.to_command_list())}",
            cwd=config.working_directory,
        )

    @property
    def argvs(self) -> list[list[str]]:
        return [command.to_command_list() for command in self.commands]
