"""
Parse the plain-text output of `svn info`, `svn status` and `svn log`.

Every parser is total: unexpected input yields fewer fields or fewer entries,
never an exception.
"""

import re

from loguru import logger

from .model import STATUS_CODES, StatusKind, SvnInfo, SvnLogEntry, SvnStatus

INFO_FIELDS = {
    "Path": "path",
    "Working Copy Root Path": "working_copy_root_path",
    "URL": "url",
    "Relative URL": "relative_url",
    "Repository Root": "repository_root",
    "Repository UUID": "repository_uuid",
    "Revision": "revision",
    "Node Kind": "node_kind",
    "Schedule": "schedule",
    "Last Changed Author": "last_changed_author",
    "Last Changed Rev": "last_changed_rev",
    "Last Changed Date": "last_changed_date",
    "Text Last Updated": "text_last_updated",
    "Checksum": "checksum",
}
INT_FIELDS = {"revision", "last_changed_rev"}
NODE_KINDS = {"file", "directory"}

STATUS_PATH_COLUMN = 8
STATUS_FLAG_COLUMNS = 7
STATUS_SUMMARY_PREFIX = "Status against revision:"
# After the flag columns of `svn status --show-updates`: an optional
# out-of-date marker, the working revision (absent for unversioned items),
# then the path.
REMOTE_STATUS_TAIL = re.compile(r"^\s*\*?\s*(?:(?:\d+|-)\s+)?(.*)$")

LOG_SEPARATOR = re.compile(r"^-{72}$", re.MULTILINE)
LOG_HEADER = re.compile(
    r"^r(\d+)\s*\|\s*([^|]+?)\s*\|\s*([^|]+?)\s*\|\s*(.*)$"
)
EMPTY_LOG_MESSAGE = "(no message)"


def clean_output(output: str) -> str:
    """
    Normalize line endings and drop surrounding blank lines.

    Leading spaces of the first line are kept: status output is column aligned.
    """
    output = output.replace("\r\n", "\n").replace("\r", "\n")
    return output.lstrip("\n").rstrip()


def parse_info(output: str) -> SvnInfo:
    fields: dict[str, str | int] = {}
    for line in output.splitlines():
        key, sep, value = line.partition(": ")
        if not sep or (field := INFO_FIELDS.get(key.strip())) is None:
            continue
        value = value.strip()
        if field in INT_FIELDS:
            try:
                fields[field] = int(value)
            except ValueError:
                logger.debug(f"Ignoring non-numeric {key}: {value!r}")
        elif field == "node_kind":
            if value in NODE_KINDS:
                fields[field] = value
        else:
            fields[field] = value
    return SvnInfo.model_validate(fields)


def _status_path(line: str, show_updates: bool) -> str:
    if not show_updates:
        return line[STATUS_PATH_COLUMN:].strip()
    tail = line[STATUS_FLAG_COLUMNS:]
    match = REMOTE_STATUS_TAIL.match(tail)
    return (match.group(1) if match else tail).strip()


def parse_status(output: str, show_updates: bool = False) -> list[SvnStatus]:
    """
    Parse `svn status` lines into path and primary status.

    With show_updates the lines also carry the out-of-date marker and the
    working revision. Output containing the `Status against revision:`
    summary is always read that way.
    """
    show_updates = show_updates or STATUS_SUMMARY_PREFIX in output
    statuses: list[SvnStatus] = []
    for line in output.splitlines():
        if not line.strip() or len(line) < STATUS_PATH_COLUMN:
            continue
        if line.startswith(STATUS_SUMMARY_PREFIX):
            continue
        statuses.append(
            SvnStatus(
                path=_status_path(line, show_updates),
                status=STATUS_CODES.get(line[0], StatusKind.UNKNOWN),
            )
        )
    return statuses


def parse_log(output: str) -> list[SvnLogEntry]:
    entries: list[SvnLogEntry] = []
    for block in LOG_SEPARATOR.split(output):
        if not block.strip():
            continue
        lines = block.strip().split("\n")
        header = LOG_HEADER.match(lines[0])
        if not header:
            logger.debug(f"Skipping malformed log entry: {lines[0]!r}")
            continue
        revision, author, date, _details = header.groups()
        message = "\n".join(lines[2:]).strip()
        entries.append(
            SvnLogEntry(
                revision=int(revision),
                author=author.strip(),
                date=date.strip(),
                message=message or EMPTY_LOG_MESSAGE,
            )
        )
    return entries


def format_duration(milliseconds: int) -> str:
    if milliseconds < 1000:
        return f"{milliseconds}ms"
    seconds = milliseconds // 1000
    minutes = seconds // 60
    if minutes:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"
