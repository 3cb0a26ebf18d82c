from enum import Enum


class LogoCliError(Exception):
    """Base class for errors raised by logo-cli."""


class ConfigurationError(LogoCliError):
    """Raised when required configuration (e.g. the API key) is missing."""

    def __init__(self, message: str, hint: str = ""):
        super().__init__(message)
        self.hint = hint


class BatchInputError(LogoCliError):
    """Raised when a batch file cannot be read or parsed."""


class TemplateNotFoundError(LogoCliError):
    def __init__(self, template_id: str):
        super().__init__(f"Template not found: {template_id}")
        self.template_id = template_id


class TemplateRenderError(LogoCliError):
    """Raised when a template slot has no value to fill it with."""


class UpstreamErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    FATAL = "fatal"


class UpstreamError(LogoCliError):
    """Failure reported by the image-generation API, tagged with a retry kind."""

    def __init__(self, message: str, kind: UpstreamErrorKind = UpstreamErrorKind.FATAL):
        super().__init__(message)
        self.kind = kind

    @property
    def retryable(self) -> bool:
        return self.kind is not UpstreamErrorKind.FATAL


class DownloadError(LogoCliError):
    """Raised when a generated image cannot be fetched or written."""


class UserTemplateError(LogoCliError):
    """Raised when a saved user template cannot be read, written or used."""
