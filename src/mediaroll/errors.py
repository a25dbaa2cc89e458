"""Error hierarchy surfaced to callers of the media library."""

from __future__ import annotations


class MediaRollError(Exception):
    """Base class for every error a request can terminate with."""

    code = "E_MEDIAROLL"


class InvalidArgumentError(MediaRollError):
    """Raised when request parameters are missing or malformed."""

    code = "E_INVALID_ARGUMENT"


class PermissionDeniedError(MediaRollError):
    """Raised when the platform refuses access to the store or filesystem."""

    code = "E_UNABLE_TO_LOAD_PERMISSION"


class StoreUnavailableError(MediaRollError):
    """Raised when the record store cannot produce a cursor at all."""

    code = "E_UNABLE_TO_LOAD"


class StorageUnavailableError(MediaRollError):
    """Raised when the destination media directory cannot be prepared."""

    code = "E_STORAGE_UNAVAILABLE"


class MediaIOError(MediaRollError):
    """Raised when copying a file into the library fails."""

    code = "E_IO"


class ImportFailedError(MediaRollError):
    """Raised when the rescan of an imported file yields no public URI."""

    code = "E_UNABLE_TO_SAVE"


class UnsupportedOptionError(MediaRollError):
    """Raised for options this platform cannot express, such as groupTypes."""

    code = "E_UNSUPPORTED_OPTION"
