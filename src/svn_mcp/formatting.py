"""Render service responses as Markdown for the agent."""

from .errors import SvnError
from .model import (
    DiagnosticReport,
    HealthReport,
    MCPToolOutput,
    StatusKind,
    SvnInfo,
    SvnLogEntry,
    SvnResponse,
    SvnStatus,
)
from .parsers import format_duration

STATUS_ICONS = {
    StatusKind.ADDED: "+",
    StatusKind.DELETED: "-",
    StatusKind.MODIFIED: "M",
    StatusKind.REPLACED: "R",
    StatusKind.MERGED: "G",
    StatusKind.CONFLICTED: "C",
    StatusKind.IGNORED: "I",
    StatusKind.EXTERNAL: "X",
    StatusKind.UNVERSIONED: "?",
    StatusKind.MISSING: "!",
    StatusKind.OBSTRUCTED: "~",
}


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _elapsed(response: SvnResponse) -> str:
    return f"**Execution time:** {format_duration(response.execution_time or 0)}"


def success(message: str) -> MCPToolOutput:
    return {"success": True, "message": message}


def failure(error: SvnError | Exception) -> MCPToolOutput:
    """Render an exception caught at the tool boundary."""
    message = f"Error: {error}"
    if isinstance(error, SvnError) and error.suggestion:
        message += f"\nSuggestion: {error.suggestion}"
    return {"success": False, "message": message}


def from_failed_response(response: SvnResponse) -> MCPToolOutput:
    message = f"Error: {response.error}"
    if response.suggestion:
        message += f"\nSuggestion: {response.suggestion}"
    return {"success": False, "message": message}


def format_health(response: SvnResponse[HealthReport]) -> str:
    report = response.data or HealthReport(svn_available=False)
    return "\n".join(
        [
            "**SVN Health Check**",
            "",
            f"**SVN available:** {_yes_no(report.svn_available)}",
            f"**Version:** {report.version or 'N/A'}",
            f"**Valid working copy:** {_yes_no(report.working_copy_valid)}",
            "**Repository accessible:** "
            f"{_yes_no(report.repository_accessible)}",
            f"**Working directory:** {response.working_directory}",
        ]
    )


def format_diagnosis(response: SvnResponse[DiagnosticReport]) -> str:
    report = response.data or DiagnosticReport(
        working_copy_path=response.working_directory
    )
    works = {True: "works", False: "failed"}
    lines = [
        "**SVN Command Diagnosis**",
        "",
        f"**Working directory:** {report.working_copy_path}",
        "",
        f"**Local status:** {works[report.status_local]}",
        f"**Remote status:** {works[report.status_remote]}",
        f"**Basic log:** {works[report.log_basic]}",
    ]
    if report.errors:
        lines += ["", "**Errors:**"]
        lines += [f"{i}. {error}" for i, error in enumerate(report.errors, 1)]
    if report.suggestions:
        lines += ["", "**Suggestions:**"]
        lines += [f"- {suggestion}" for suggestion in report.suggestions]
    return "\n".join(lines)


def format_info(response: SvnResponse[SvnInfo]) -> str:
    info = response.data or SvnInfo()
    fields = {
        "Path": info.path,
        "URL": info.url,
        "Relative URL": info.relative_url,
        "Repository root": info.repository_root,
        "UUID": info.repository_uuid,
        "Revision": info.revision,
        "Node kind": info.node_kind,
        "Schedule": info.schedule,
        "Last changed author": info.last_changed_author,
        "Last changed revision": info.last_changed_rev,
        "Last changed date": info.last_changed_date,
        "Working copy root": info.working_copy_root_path,
        "Checksum": info.checksum,
    }
    lines = ["**SVN Info**", ""]
    lines += [
        f"**{label}:** {value}"
        for label, value in fields.items()
        if value is not None
    ]
    lines.append(_elapsed(response))
    return "\n".join(lines)


def format_status(response: SvnResponse[list[SvnStatus]]) -> str:
    statuses = response.data or []
    if not statuses:
        return "No changes in the working copy"
    lines = [f"**SVN Status** ({len(statuses)} items)", ""]
    lines += [
        f"`{STATUS_ICONS.get(item.status, ' ')}` **{item.status.upper()}** - "
        f"{item.path}"
        for item in statuses
    ]
    lines += ["", _elapsed(response)]
    return "\n".join(lines)


def format_log(response: SvnResponse[list[SvnLogEntry]]) -> str:
    entries = response.data or []
    if not entries:
        return "No log entries found"
    blocks = [
        f"**{i}. Revision {entry.revision}**\n"
        f"**Author:** {entry.author}\n"
        f"**Date:** {entry.date}\n"
        f"**Message:** {entry.message}\n"
        "---"
        for i, entry in enumerate(entries, 1)
    ]
    return (
        f"**SVN Log** ({len(entries)} entries)\n\n"
        + "\n\n".join(blocks)
        + f"\n{_elapsed(response)}"
    )


def format_diff(response: SvnResponse[str]) -> str:
    if not response.data:
        return "No differences found"
    return (
        "**SVN Diff**\n\n"
        f"**Command:** {response.command}\n"
        f"{_elapsed(response)}\n\n"
        f"```diff\n{response.data}\n```"
    )


def format_operation(
    title: str, details: dict[str, str], response: SvnResponse[str]
) -> str:
    """Render a mutating command (checkout, commit, ...) and its svn output."""
    lines = [f"**{title}**", ""]
    lines += [f"**{label}:** {value}" for label, value in details.items()]
    lines += [f"**Command:** {response.command}", _elapsed(response), ""]
    lines.append(f"**Result:**\n```\n{response.data or ''}\n```")
    return "\n".join(lines)
