"""
Error Handling - Centralized error policies and custom exceptions.

Only a corrupt record is recovered in place (skip and read forward). Every
other failure aborts the run: manifest problems before any processing,
I/O and sink failures from inside the worker pools.
"""

import logging
from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional
from pathlib import Path


logger = logging.getLogger(__name__)


class ErrorAction(Enum):
    """What to do when an error occurs."""
    SKIP = auto()           # Skip this record, keep reading the stream
    ABORT = auto()          # Stop the entire run


class ReadMatchError(Exception):
    """Base exception for read matching errors."""
    pass


class ManifestError(ReadMatchError):
    """Malformed index or query manifest."""
    def __init__(self, manifest: Path | str, line: int, reason: str):
        self.manifest = str(manifest)
        self.line = line
        self.reason = reason
        super().__init__(f"{manifest}, line {line}: {reason}")


class RecordParseError(ReadMatchError):
    """A corrupt read record in the middle of a stream."""
    def __init__(self, path: Path | str, record_num: int, reason: str):
        self.path = str(path)
        self.record_num = record_num
        self.reason = reason
        super().__init__(
            f"record {record_num}, line {self.line}: {reason}"
        )

    @property
    def line(self) -> int:
        """Nominal line of the record, assuming four lines per record."""
        return self.record_num * 4


class SinkLockError(ReadMatchError):
    """Exclusive access to an output sink could not be acquired."""
    def __init__(self, sink: str, path: Path | str):
        self.sink = sink
        self.path = str(path)
        super().__init__(f"Could not write to {sink} file {path}!")


class IndexRangeError(ReadMatchError):
    """A source file index does not fit the membership width."""
    pass


@dataclass
class ErrorPolicy:
    """
    Policy for handling a specific error type.

    Templates may use {file}, {error}, {reason}, {record} and {line};
    the last three come from the exception when it carries them.
    """
    action: ErrorAction
    log_level: int
    message_template: str = "{file}: {error}"


# Error type to policy mapping
ERROR_POLICIES: dict[type, ErrorPolicy] = {
    RecordParseError: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.WARNING,
        message_template="Skipping corrupt record {record} in {file} (line {line}): {reason}"
    ),
    ManifestError: ErrorPolicy(
        action=ErrorAction.ABORT,
        log_level=logging.ERROR,
        message_template="Malformed manifest {file}, line {line}: {reason}"
    ),
    SinkLockError: ErrorPolicy(
        action=ErrorAction.ABORT,
        log_level=logging.ERROR,
        message_template="{error}"
    ),
    IndexRangeError: ErrorPolicy(
        action=ErrorAction.ABORT,
        log_level=logging.ERROR,
        message_template="Too many source files: {error}"
    ),
    FileNotFoundError: ErrorPolicy(
        action=ErrorAction.ABORT,
        log_level=logging.ERROR,
        message_template="File not found: {file}"
    ),
    PermissionError: ErrorPolicy(
        action=ErrorAction.ABORT,
        log_level=logging.ERROR,
        message_template="Permission denied: {file}"
    ),
    OSError: ErrorPolicy(
        action=ErrorAction.ABORT,
        log_level=logging.ERROR,
        message_template="I/O error on {file}: {error}"
    ),
}

_UNEXPECTED = ErrorPolicy(
    action=ErrorAction.ABORT,
    log_level=logging.ERROR,
    message_template="Unexpected error on {file}: {error}"
)


def policy_for(error: Exception) -> ErrorPolicy:
    """First policy whose type matches the error, most specific first."""
    for error_type, policy in ERROR_POLICIES.items():
        if isinstance(error, error_type):
            return policy
    return _UNEXPECTED


def error_file(error: Exception, file_path: Optional[Path | str] = None) -> str:
    """
    The file an error is about.

    An explicit path wins; otherwise the read file, manifest or OS-level
    filename the exception carries.
    """
    if file_path:
        return str(file_path)
    for attr in ("path", "manifest", "filename"):
        value = getattr(error, attr, None)
        if value:
            return str(value)
    return "<unknown>"


def handle_error(
    error: Exception,
    file_path: Optional[Path | str] = None,
    context: str = ""
) -> ErrorAction:
    """
    Log an error with its file, record and line, and decide what to do.

    Args:
        error: The exception that occurred
        file_path: File being read or written; defaults to the one the
            exception names
        context: Prefix for the log line, e.g. the CLI name

    Returns:
        SKIP for a corrupt record, ABORT for everything else
    """
    policy = policy_for(error)
    message = policy.message_template.format(
        file=error_file(error, file_path),
        error=str(error),
        reason=getattr(error, "reason", str(error)),
        record=getattr(error, "record_num", "?"),
        line=getattr(error, "line", "?"),
    )
    if context:
        message = f"[{context}] {message}"

    logger.log(policy.log_level, message)
    return policy.action
