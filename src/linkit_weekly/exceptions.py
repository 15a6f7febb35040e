# ABOUTME: Exception hierarchy for LinkIt Weekly.
# ABOUTME: Only caller mistakes and collaborator failures raise; bad articles are filtered.


class LinkitWeeklyError(Exception):
    """Base class for all LinkIt Weekly errors."""


class InvalidInputError(LinkitWeeklyError, TypeError):
    """A top-level argument is not a usable collection of articles or digests."""


class GenerationError(LinkitWeeklyError):
    """The AI model returned no usable newsletter text."""


class SourceError(LinkitWeeklyError, ValueError):
    """An RSS source is invalid or already registered."""
