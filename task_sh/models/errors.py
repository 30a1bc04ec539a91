"""
Error types raised by the task-sh pipeline.

A blocked safety verdict is deliberately not part of this hierarchy: it is a
policy outcome carried by ``Outcome.verdict``, not a technical failure.
"""

from enum import Enum
from typing import Optional


class TaskShError(Exception):
    """Base class for all task-sh errors."""


class InvalidInputError(TaskShError):
    """The task description was empty or unusable."""


class BackendErrorReason(str, Enum):
    NETWORK = "network"
    TIMEOUT = "timeout"
    BAD_STATUS = "bad_status"
    MALFORMED_PAYLOAD = "malformed_payload"
    MISSING_CREDENTIAL = "missing_credential"


class BackendError(TaskShError):
    """The generation backend could not produce a reply."""

    def __init__(
        self,
        reason: BackendErrorReason,
        message: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.reason = reason
        self.status_code = status_code


class ParseError(TaskShError):
    """The backend reply did not contain a recognizable command line."""

    def __init__(self, message: str, raw_reply: str = "", reason: str = "no_command_found"):
        super().__init__(message)
        self.reason = reason
        self.raw_reply = raw_reply
