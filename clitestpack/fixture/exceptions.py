"""Fixture subsystem exceptions."""


class FixtureError(Exception):
    """Base class for recording fixture errors."""


class FixtureNotFoundError(FixtureError):
    """Playback was requested for a suite that has no recording on disk."""


class FixtureFormatError(FixtureError):
    """Recording file could not be executed or does not define a scopes list."""


class FixtureExhaustedError(FixtureError):
    """More tests ran than the recording has scopes for."""
