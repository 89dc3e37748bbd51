"""Exceptions raised by site-grader."""


class SiteGraderError(Exception):
    """Base class for all site-grader errors."""


class InvalidURLError(SiteGraderError, ValueError):
    """The target URL cannot be analyzed."""


class FetchError(SiteGraderError):
    """The page itself could not be fetched."""
