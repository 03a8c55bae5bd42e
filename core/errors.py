"""
Error taxonomy for the submission pipeline.

ValidationError maps to a 400 response; the other three are surfaced to the
client as a 500 with the message in ``details``.
"""
from typing import Optional


class SubmissionError(Exception):
    status_code = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class ValidationError(SubmissionError):
    status_code = 400


class UploadError(SubmissionError):
    pass


class PersistenceError(SubmissionError):
    pass


class NotificationError(SubmissionError):
    pass
