"""
Domain errors raised by the service layer.

Routes translate them to HTTP responses:
- InterviewValidationError, InterviewStateError, DuplicateEmailError,
  InvalidCredentialsError -> 400
- InterviewNotFoundError -> 404
- InterviewConflictError -> 409
- CollaboratorError -> 500
"""


class InterviewError(Exception):
    """Base class for interview platform errors."""


class InterviewValidationError(InterviewError, ValueError):
    """Malformed id, out-of-range index, missing field or bad question list."""


class InterviewStateError(InterviewError):
    """Operation not allowed in the interview's current status."""

    def __init__(self, message: str, status: str):
        super().__init__(message)
        self.status = status


class InterviewNotFoundError(InterviewError, LookupError):
    """Interview missing or not owned by the caller (deliberately the same)."""


class InterviewConflictError(InterviewError):
    """Concurrent writes to the same interview kept winning; the caller may retry."""


class DuplicateEmailError(InterviewError, ValueError):
    """Signup with an email that is already registered."""


class InvalidCredentialsError(InterviewError):
    """Login failed; never says whether the email or the password was wrong."""


class CollaboratorError(InterviewError):
    """
    An external collaborator (LLM, résumé extraction, email) failed.

    The message is safe to show to clients; raw collaborator output stays in logs.
    """
