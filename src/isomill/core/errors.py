"""Exception types raised by the pipeline."""


class IsomillError(Exception):
    """Base class for isomill errors."""


class ConfigurationError(IsomillError, ValueError):
    """Invalid configuration, rejected before any processing starts."""


class DegenerateGeometryError(IsomillError, ValueError):
    """A contour collapsed to fewer than three vertices."""
