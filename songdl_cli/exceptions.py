"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class SongdlError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(SongdlError):
    """Raised for issues related to configuration loading or validation."""


class DownloaderLaunchError(SongdlError):
    """Raised when the external downloader process cannot be started."""


class LibraryError(SongdlError):
    """Raised when the music library root cannot be read."""
