from typing import Literal

from loguru import logger
from mcp.server.fastmcp import FastMCP

from . import formatting
from .config import SvnConfig
from .errors import SvnError
from .model import (
    AcceptConflicts,
    AddOptions,
    CheckoutOptions,
    CommitOptions,
    DeleteOptions,
    Depth,
    MCPToolOutput,
    Revision,
    UpdateOptions,
)
from .service import SvnService

mcp = FastMCP(name="SVN-MCP")

_service: SvnService | None = None


def configure(config: SvnConfig) -> SvnService:
    """Create the service every tool uses. Called once at startup."""
    global _service
    _service = SvnService(config)
    return _service


def get_service() -> SvnService:
    if _service is None:
        return configure(SvnConfig.from_env())
    return _service


def _paths_label(paths: str | list[str]) -> str:
    return paths if isinstance(paths, str) else ", ".join(paths)


@mcp.tool(
    name="svn_health_check",
    description="Checks that svn is installed and the working copy is usable",
)
async def svn_health_check() -> MCPToolOutput:
    response = await get_service().health_check()
    if not response.success:
        return formatting.from_failed_response(response)
    return formatting.success(formatting.format_health(response))


@mcp.tool(
    name="svn_diagnose",
    description="Runs local and remote svn checks and explains failures",
)
async def svn_diagnose() -> MCPToolOutput:
    response = await get_service().diagnose()
    return formatting.success(formatting.format_diagnosis(response))


@mcp.tool(
    name="svn_info",
    description="Returns information about the working copy, a path or a URL",
)
async def svn_info(path: str | None = None) -> MCPToolOutput:
    """
    Returns `svn info` for the working copy or a specific target.

    Args:
        path: A local path relative to the working directory, or a repository URL.

    Returns:
        A dictionary containing the success status and a message.
    """
    try:
        response = await get_service().get_info(path)
    except SvnError as e:
        return formatting.failure(e)
    return formatting.success(formatting.format_info(response))


@mcp.tool(
    name="svn_status",
    description="Returns the status of files in the working copy",
)
async def svn_status(
    path: str | None = None, show_all: bool = False
) -> MCPToolOutput:
    """
    Returns the status of files in the working copy.

    Args:
        path: Limit the status to this path.
        show_all: Also ask the repository for out-of-date items. Falls back to
            the local status when the repository cannot be reached.

    Returns:
        A dictionary containing the success status and a message.
    """
    try:
        response = await get_service().get_status(path, show_all)
    except SvnError as e:
        return formatting.failure(e)
    return formatting.success(formatting.format_status(response))


@mcp.tool(name="svn_log", description="Returns the commit history")
async def svn_log(
    path: str | None = None, limit: int = 10, revision: str | None = None
) -> MCPToolOutput:
    """
    Returns the commit history.

    Args:
        path: A local path or repository URL.
        limit: The maximum number of entries to return. Defaults to 10.
        revision: A revision or a range such as "100:200".

    Returns:
        A dictionary containing the success status and a message.
    """
    try:
        response = await get_service().get_log(path, limit, revision)
    except SvnError as e:
        return formatting.failure(e)
    return formatting.success(formatting.format_log(response))


@mcp.tool(
    name="svn_diff",
    description="Returns the differences between revisions or local changes",
)
async def svn_diff(
    path: str | None = None,
    old_revision: str | None = None,
    new_revision: str | None = None,
) -> MCPToolOutput:
    try:
        response = await get_service().get_diff(path, old_revision, new_revision)
    except SvnError as e:
        return formatting.failure(e)
    return formatting.success(formatting.format_diff(response))


@mcp.tool(name="svn_checkout", description="Checks out an SVN repository")
async def svn_checkout(
    url: str,
    path: str | None = None,
    revision: int | Literal["HEAD"] | None = None,
    depth: Depth | None = None,
    force: bool = False,
    ignore_externals: bool = False,
) -> MCPToolOutput:
    """
    Checks out a repository URL into the working directory.

    Args:
        url: The repository URL.
        path: Destination directory. Defaults to the current directory.
        revision: A revision number or "HEAD".
        depth: One of empty, files, immediates, infinity.
        force: Allow unversioned obstructions in the destination.
        ignore_externals: Skip svn:externals definitions.

    Returns:
        A dictionary containing the success status and a message.
    """
    options = CheckoutOptions(
        revision=revision,
        depth=depth,
        force=force,
        ignore_externals=ignore_externals,
    )
    try:
        response = await get_service().checkout(url, path, options)
    except SvnError as e:
        return formatting.failure(e)
    details = {"URL": url, "Destination": path or "current directory"}
    return formatting.success(
        formatting.format_operation("Checkout completed", details, response)
    )


@mcp.tool(
    name="svn_update",
    description="Updates the working copy from the repository",
)
async def svn_update(
    path: str | None = None,
    revision: Revision | None = None,
    force: bool = False,
    ignore_externals: bool = False,
    accept_conflicts: AcceptConflicts | None = None,
) -> MCPToolOutput:
    options = UpdateOptions(
        revision=revision,
        force=force,
        ignore_externals=ignore_externals,
        accept_conflicts=accept_conflicts,
    )
    try:
        response = await get_service().update(path, options)
    except SvnError as e:
        return formatting.failure(e)
    details = {"Path": path or "current directory"}
    return formatting.success(
        formatting.format_operation("Update completed", details, response)
    )


@mcp.tool(name="svn_add", description="Puts files under version control")
async def svn_add(
    paths: str | list[str],
    force: bool = False,
    no_ignore: bool = False,
    parents: bool = False,
    auto_props: bool = False,
    no_auto_props: bool = False,
) -> MCPToolOutput:
    options = AddOptions(
        force=force,
        no_ignore=no_ignore,
        parents=parents,
        auto_props=auto_props,
        no_auto_props=no_auto_props,
    )
    try:
        response = await get_service().add(paths, options)
    except SvnError as e:
        return formatting.failure(e)
    details = {"Files": _paths_label(paths)}
    return formatting.success(
        formatting.format_operation("Files added", details, response)
    )


@mcp.tool(
    name="svn_commit",
    description="Commits local changes to the repository",
)
async def svn_commit(
    message: str | None = None,
    paths: list[str] | None = None,
    file: str | None = None,
    force: bool = False,
    keep_locks: bool = False,
    no_unlock: bool = False,
) -> MCPToolOutput:
    """
    Commits local changes to the repository.

    Args:
        message: The commit message. Required unless file is given.
        paths: Only commit these paths. Defaults to every change.
        file: Read the commit message from this file instead of message.
        force: Force the commit.
        keep_locks: Keep locks after committing.
        no_unlock: Do not release locks.

    Returns:
        A dictionary containing the success status and a message.
    """
    options = CommitOptions(
        message=message,
        file=file,
        force=force,
        keep_locks=keep_locks,
        no_unlock=no_unlock,
    )
    try:
        response = await get_service().commit(options, paths)
    except SvnError as e:
        return formatting.failure(e)
    details = {
        "Message": message or f"from {file}",
        "Files": _paths_label(paths) if paths else "all changes",
    }
    return formatting.success(
        formatting.format_operation("Commit completed", details, response)
    )


@mcp.tool(
    name="svn_delete",
    description="Removes files from version control",
)
async def svn_delete(
    paths: str | list[str],
    message: str | None = None,
    force: bool = False,
    keep_local: bool = False,
) -> MCPToolOutput:
    options = DeleteOptions(message=message, force=force, keep_local=keep_local)
    try:
        response = await get_service().delete(paths, options)
    except SvnError as e:
        return formatting.failure(e)
    details = {
        "Files": _paths_label(paths),
        "Keep local copy": "Yes" if keep_local else "No",
    }
    return formatting.success(
        formatting.format_operation("Files deleted", details, response)
    )


@mcp.tool(name="svn_revert", description="Reverts local changes to files")
async def svn_revert(paths: str | list[str]) -> MCPToolOutput:
    try:
        response = await get_service().revert(paths)
    except SvnError as e:
        return formatting.failure(e)
    details = {"Files": _paths_label(paths)}
    return formatting.success(
        formatting.format_operation("Changes reverted", details, response)
    )


@mcp.tool(
    name="svn_cleanup",
    description="Cleans up the working copy after an interrupted operation",
)
async def svn_cleanup(path: str | None = None) -> MCPToolOutput:
    try:
        response = await get_service().cleanup(path)
    except SvnError as e:
        return formatting.failure(e)
    details = {"Path": path or "current directory"}
    return formatting.success(
        formatting.format_operation("Cleanup completed", details, response)
    )


@mcp.tool(
    name="svn_clear_credentials",
    description="Clears the cached SVN credentials",
)
async def svn_clear_credentials() -> MCPToolOutput:
    response = await get_service().clear_credentials()
    if not response.success:
        return formatting.from_failed_response(response)
    return formatting.success(
        f"Credential cache cleared\n\n{response.data or ''}".rstrip()
    )


def main(config: SvnConfig | None = None) -> None:
    service = configure(config or SvnConfig.from_env())
    logger.info(f"Starting SVN MCP server: {service.config.describe()}")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
