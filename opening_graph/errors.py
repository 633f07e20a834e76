"""Exceptions raised by the opening graph package."""


class OpeningGraphError(Exception):
    """Base class for every error raised by this package."""


class LookupNotLoaded(OpeningGraphError):
    """The opening lookup was used before its table finished loading."""


class UnsupportedFormatVersion(OpeningGraphError):
    """A serialized graph carries a format version this code cannot read."""

    def __init__(self, version, supported=()):
        self.version = version
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported graph format version {version!r} "
            f"(supported: {', '.join(self.supported) or 'none'})"
        )


class CorruptGraphPayload(OpeningGraphError):
    """A serialized graph could not be parsed."""
