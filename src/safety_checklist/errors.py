"""Error taxonomy for checklist operations."""


class ChecklistError(Exception):
    """Base class for errors surfaced to the user by checklist operations."""

    user_message = 'Something went wrong. Please try again.'

    def __init__(self, message=None):
        super().__init__(message or self.user_message)


class AuthRequiredError(ChecklistError):
    """Raised when an operation needs an authenticated owner and none is present."""

    user_message = 'Please log in to continue.'


class MediaEncodingError(ChecklistError):
    """Raised when a local image file cannot be read or encoded."""

    user_message = 'Failed to upload images. Please try again.'


class BlueprintUploadError(ChecklistError):
    """Raised when a blueprint upload or deletion fails. Uploads are all-or-nothing."""

    user_message = 'Failed to upload blueprints. Please try again.'


class AnalysisError(ChecklistError):
    """Raised when an analysis collaborator fails or returns an empty result."""

    user_message = 'Failed to process checklist'


class PersistenceWarning(ChecklistError, UserWarning):
    """Best-effort save failed. Never fatal to the operation that triggered it."""

    user_message = 'Analysis completed! (Database save pending - check connection)'
