"""Exception hierarchy for level conversion.

Every failure a conversion attempt can raise derives from ``ConversionError``
so that callers can terminate the current attempt without disturbing any
previously produced level.
"""


class ConversionError(Exception):
    """Base exception for conversion errors."""

    pass


class DecodeFailure(ConversionError):
    """Exception raised when source media cannot be decoded."""

    pass


class EmptyTrack(ConversionError):
    """Exception raised when the selected track contains no notes."""

    def __init__(self, track_index: int | None = None, label: str = ""):
        self.track_index = track_index
        self.label = label
        if track_index is None:
            message = "Selected track has no notes."
        else:
            name = f" ({label})" if label else ""
            message = f"Selected track {track_index}{name} has no notes."
        super().__init__(message)


class NoActiveTrack(ConversionError):
    """Exception raised when a music conversion runs without a loaded performance."""

    pass


class NoActiveImage(ConversionError):
    """Exception raised when an image conversion runs without a loaded raster."""

    pass


class InvalidConfiguration(ConversionError):
    """Exception raised when configuration values are rejected."""

    pass


class ConversionCancelled(ConversionError):
    """Exception raised when a raster scan is cancelled between rows."""

    pass


def validation_summary(error) -> str:
    """Flatten a pydantic ValidationError into one "field: message" line."""
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
        for err in error.errors()
    )
