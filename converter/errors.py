"""Error taxonomy for the conversion pipeline.

Routes translate any ConversionError into a JSON body of the form
``{"success": false, "error": ...}`` with the error's status code.
"""

from typing import Optional


class ConversionError(Exception):
    """Base class for errors that terminate a conversion request."""

    status_code = 500

    def __init__(self, message: str, result_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.result_id = result_id


class ValidationError(ConversionError):
    """Required input is missing or malformed. Nothing is persisted."""

    status_code = 400


class UpstreamFetchError(ConversionError):
    """The Figma file could not be fetched. Raised before an id is allocated."""

    status_code = 500


class GenerationError(ConversionError):
    """HTML generation failed. The id exists and holds error sentinels."""

    status_code = 500


class PartialGenerationError(ConversionError):
    """Component or field generation failed after HTML succeeded.

    Recorded on the outcome; never raised out of the pipeline.
    """

    status_code = 200


class NotFoundError(ConversionError):
    """Result id is unknown or expired."""

    status_code = 404


class StorageError(Exception):
    """A result store backend failed to read or write a record."""
