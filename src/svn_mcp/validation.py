"""
Tell remote repository URLs apart from local paths.

svn takes both for most subcommands, but the two have different illegal
character sets: a URL needs the colon of its scheme, a local path may only
carry one as a drive letter. URLs are checked first and are never passed
through local-path normalization.
"""

import re

from .errors import InvalidInputError

SVN_URL_PATTERN = re.compile(r"^(svn|svn\+ssh|https?|file)://.+", re.IGNORECASE)
DRIVE_PREFIX_PATTERN = re.compile(r"^[A-Za-z]:[\\/]")
INVALID_PATH_CHARS = re.compile(r'[<>:"|?*]')


def is_svn_url(value: str) -> bool:
    """Check whether a string is a repository URL svn understands."""
    return bool(SVN_URL_PATTERN.match(value))


def validate_path(value: str) -> bool:
    """Check a local path for characters illegal on any supported platform."""
    if DRIVE_PREFIX_PATTERN.match(value):
        value = value[2:]
    return not INVALID_PATH_CHARS.search(value)


def normalize_path(value: str) -> str:
    """
    Normalize a local path for the command line.

    Relative paths stay relative: svn runs with the configured working
    directory as its cwd, so they resolve against it.
    """
    return value.strip().replace("\\", "/")


def check_path(value: str) -> str:
    """Validate and normalize a local working copy path."""
    if not validate_path(value):
        raise InvalidInputError(f"Invalid path: {value}")
    return normalize_path(value)


def check_target(value: str) -> str:
    """Validate a target that may be either a URL or a local path."""
    if is_svn_url(value):
        return value
    if validate_path(value):
        return normalize_path(value)
    raise InvalidInputError(f"Invalid path or URL: {value}")


def check_url(value: str) -> str:
    if not is_svn_url(value):
        raise InvalidInputError(f"Invalid SVN URL: {value}")
    return value
