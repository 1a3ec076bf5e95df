# bearmaps/errors.py


class BearMapsError(Exception):
    """Base class for errors raised by the map core."""


class MalformedInput(BearMapsError, ValueError):
    """An event references an unknown id, or a query has inverted coordinates."""


class NotFound(BearMapsError, LookupError):
    """No vertex (empty graph, unknown id) or no path between two vertices."""
