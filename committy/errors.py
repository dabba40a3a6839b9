from __future__ import annotations

from typing import List, Optional


class CommittyError(Exception):
    """Base class for every failure the CLI reports."""


class MissingCredentialError(CommittyError):
    pass


class GitNotFoundError(CommittyError):
    pass


class VcsQueryError(CommittyError):
    """A git query exited non-zero or produced more output than we accept."""

    def __init__(self, message: str, command: Optional[List[str]] = None, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


class CommitError(CommittyError):
    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr


class SummaryRequestError(CommittyError):
    """The text-generation request failed; keeps what the API told us."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    @classmethod
    def from_error(cls, err: "SummaryRequestError") -> "SummaryRequestError":
        return cls(err.message, status_code=err.status_code, code=err.code)


class SizeOrRateError(SummaryRequestError):
    """Rejected because the input was too large or a tokens-per-minute limit was hit."""
