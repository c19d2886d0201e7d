"""Custom Exceptions for the PageSync application."""

class PageSyncError(Exception):
    """Base class for exceptions in this module."""
    pass

class ConfigurationError(PageSyncError):
    """Exception raised for errors in configuration loading."""
    pass

class FileSystemError(PageSyncError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass

class AudioExtractionError(PageSyncError):
    """Exception raised for errors during audio extraction or probing."""
    pass

class TranscriptionError(PageSyncError):
    """Exception raised for errors during transcription."""
    pass

class TranscriptFormatError(PageSyncError):
    """Exception raised when an edited transcript or segment cache is malformed."""
    pass

class PageMatchError(PageSyncError):
    """
    Exception raised when page text cannot be matched to transcript segments.

    Carries the numbers behind the failure so callers can present them
    to the user without parsing the message.
    """

    def __init__(
        self,
        message: str,
        page_number: int = 0,
        similarity: float = 0.0,
        threshold: float = 0.0,
        mode: str = "",
        candidate_text: str = "",
        page_text: str = ""
    ):
        super().__init__(message)
        self.page_number = page_number
        self.similarity = similarity
        self.threshold = threshold
        self.mode = mode
        self.candidate_text = candidate_text
        self.page_text = page_text

class TimestampDerivationError(PageSyncError):
    """Exception raised when matched segments cannot produce valid page timestamps."""
    pass

class TimeRangeError(PageSyncError):
    """Exception raised for malformed or out-of-bounds time ranges."""
    pass
