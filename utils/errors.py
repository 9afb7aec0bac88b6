"""Custom exceptions for PEC Pulse."""


class PecPulseError(Exception):
    """Base exception for PEC Pulse application."""

    pass


class ConfigError(PecPulseError):
    """Configuration-related errors."""

    pass


class ValidationError(PecPulseError):
    """Data validation errors."""

    def __init__(self, errors: list[str] | str, warnings: list[str] | None = None):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        super().__init__("; ".join(self.errors))


class NotFoundError(PecPulseError):
    """A requested record does not exist."""

    pass


class DuplicateMeetingError(ValidationError):
    """A meeting for the same workbody, date and time already exists."""

    def __init__(self, existing_id: str | None = None):
        self.existing_id = existing_id
        super().__init__("A meeting for this workbody at the same date and time already exists")


class PermissionDeniedError(PecPulseError):
    """The caller's role may not perform the requested action."""

    pass


class ToolExecutionError(PecPulseError):
    """Errors while talking to an external service."""

    pass


class SupabaseError(ToolExecutionError):
    """Errors related to Supabase operations."""

    pass


class ExtractionError(ToolExecutionError):
    """Errors while pulling text or members out of a document."""

    pass


class LLMError(PecPulseError):
    """Errors related to LLM API calls."""

    pass
