"""
Exceptions raised by the annotation export engine and its collaborators.

The HTTP layer maps each class to a status code; orphan replies and unknown
annotation types are not errors and never raise.
"""


class AnnotationExportError(Exception):
    """Base class for every error raised by this package."""


class AnnotationValidationError(AnnotationExportError):
    """Request body is missing fields or carries malformed annotations."""


class StorageConfigError(AnnotationExportError):
    """Object storage credentials or bucket are not configured."""


class StorageNotFoundError(AnnotationExportError):
    """The requested object could not be found or downloaded."""


class DocumentLoadError(AnnotationExportError):
    """Source bytes are not a parseable PDF."""


class FontAssetError(AnnotationExportError):
    """The bundled font is missing or unreadable."""


class AIServiceError(AnnotationExportError):
    """The language model API could not produce a completion."""

    def __init__(self, message: str, status_code: int = 503, details=None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details
