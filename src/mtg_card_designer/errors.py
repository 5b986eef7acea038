"""Exception hierarchy for the card designer."""

from typing import Optional


class CardDesignerError(Exception):
    """Base class for all card designer errors."""


class InputValidationError(CardDesignerError, ValueError):
    """User input is missing or invalid at the point of action."""


class TemplateNotResolvedError(CardDesignerError, LookupError):
    """No template exists for the requested template id."""

    def __init__(self, template_id: Optional[str] = None):
        self.template_id = template_id
        if template_id:
            message = f"No template resolved for id '{template_id}'"
        else:
            message = "No template resolved"
        super().__init__(message)


class ReadOnlyTemplateError(CardDesignerError, PermissionError):
    """The template belongs to another user and cannot be edited."""


class AssetInUseError(CardDesignerError):
    """An asset is still referenced by the active card."""


class ServiceError(CardDesignerError):
    """An external service call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SessionInvalidError(ServiceError):
    """The backend rejected the bearer token (401/403)."""


class ProviderNotConfiguredError(ServiceError):
    """An AI provider was requested without a configured credential."""


class ExportError(CardDesignerError):
    """An export run was aborted."""


class RasterizationError(ExportError):
    """A rendered card could not be painted into a bitmap."""
