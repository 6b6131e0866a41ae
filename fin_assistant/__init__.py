"""Fin: a conversational shopping and support assistant."""

from .agent import FinChatAgent
from .catalog import AbstractCatalog, CatalogState, CuratedCatalog, FeedCatalog, build_catalog
from .classifier import LocalClassifier, OpenAIClassifier
from .errors import CatalogUnavailableError, ClassificationError, ConcurrentTurnError, FinError
from .models import FinResponse, SearchOptions, SessionState
from .recommender import ProductSearchService
from .utils import serialize_response

__all__ = [
    "AbstractCatalog",
    "CatalogState",
    "CatalogUnavailableError",
    "ClassificationError",
    "ConcurrentTurnError",
    "CuratedCatalog",
    "FeedCatalog",
    "FinChatAgent",
    "FinError",
    "FinResponse",
    "LocalClassifier",
    "OpenAIClassifier",
    "ProductSearchService",
    "SearchOptions",
    "SessionState",
    "build_catalog",
    "serialize_response",
]
