"""Exceptions raised by the assistant core.

- ClassificationError: the remote classifier could not produce a usable reply
  (unreachable, unauthorized, malformed JSON, wrong shape). Always recovered
  locally by the agent.
- CatalogUnavailableError: the catalog feed could not be fetched. Fatal for
  the call that needed it.
- ConcurrentTurnError: a second turn was started on a conversation while the
  previous one was still in flight.

An empty search result is not an error.
"""


class FinError(Exception):
    """Base class for assistant errors."""
    pass


class ClassificationError(FinError):
    """Raised when the classifier reply cannot be obtained or parsed."""
    pass


class CatalogUnavailableError(FinError):
    """Raised when the backing catalog feed cannot be fetched."""
    pass


class ConcurrentTurnError(FinError):
    """Raised when turns overlap on the same conversation."""
    pass
