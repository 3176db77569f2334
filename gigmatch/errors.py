from __future__ import annotations


class MatchingError(Exception):
    """Base class for errors raised by the matching engine."""


class NotFoundError(MatchingError):
    """A project or profile id does not resolve (or a record has no identity)."""

    def __init__(self, kind: str, identifier: str | None = None) -> None:
        self.kind = kind
        self.identifier = identifier
        if identifier:
            msg = f"{kind.capitalize()} not found: {identifier}"
        else:
            msg = f"{kind.capitalize()} record has no identity"
        super().__init__(msg)


class InvalidPreferencesError(MatchingError):
    """
    Raised by preference validation. The engine catches it, logs a warning and
    falls back to the default for the offending option.
    """


class MatchingCancelled(MatchingError):
    """The run was cancelled, or its timeout elapsed, between candidate batches."""
