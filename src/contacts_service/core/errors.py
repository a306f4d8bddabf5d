"""Custom exception hierarchy for the contacts service."""


class ContactsError(Exception):
    """Base exception for all contacts service errors."""


# --- Configuration ---
class ConfigError(ContactsError):
    """Invalid or missing configuration."""


# --- Caller input ---
class ValidationError(ContactsError):
    """A required input was blank or missing."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PatternError(ContactsError):
    """Malformed name filter expression.

    Returned as a value by ``compile_pattern`` rather than raised: an
    invalid pattern is an expected, input-dependent outcome.
    """

    def __init__(self, pattern: str, detail: str):
        self.pattern = pattern
        self.detail = detail
        super().__init__(f"Invalid regular expression {pattern!r}: {detail}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PatternError):
            return NotImplemented
        return (self.pattern, self.detail) == (other.pattern, other.detail)

    def __hash__(self) -> int:
        return hash((self.pattern, self.detail))


# --- Storage ---
class StorageError(ContactsError):
    """Write, stream-open or fetch failure against the persistence medium."""


class ListTimeoutError(StorageError):
    """A filtered listing did not finish within its time limit."""


# --- Notification ---
class NotifyError(ContactsError):
    """Delivery of a contact event to the messaging endpoint failed."""

    def __init__(self, topic: str, attempts: int, reason: str):
        self.topic = topic
        self.attempts = attempts
        self.reason = reason
        super().__init__(f"Publish to {topic} failed after {attempts} attempt(s): {reason}")
