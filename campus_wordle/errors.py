"""
Domain failures raised inside the service layer.

They never leave a public operation: the @action boundary in results.py
turns them into a failed Outcome with the message below.
"""


class WordleError(Exception):
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(WordleError):
    kind = "validation"


class Unauthorized(WordleError):
    kind = "unauthorized"


class Forbidden(WordleError):
    kind = "forbidden"


class NotFound(WordleError):
    kind = "not_found"


class Conflict(WordleError):
    kind = "conflict"
