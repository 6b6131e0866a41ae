"""Fin chat agent.

One turn:
1. Load the catalog (CatalogUnavailableError is fatal for the turn)
2. Classify with the remote model, or the local heuristic when it is
   unconfigured or fails
3. Assemble the response and fold its session update into the conversation

Entry points: FinChatAgent.chat()
"""

import logging
import time
from typing import Dict, List, Optional

from .assembler import assemble_response
from .catalog import AbstractCatalog, build_catalog
from .classifier import AbstractClassifier, ClassifierReply, LocalClassifier, build_classifier
from .config import MAX_TURNS
from .errors import ClassificationError
from .models import FinResponse, SessionState
from .recommender import ProductSearchService
from .session import ConversationSession, session_context

logger = logging.getLogger("fin.agent")


class FinChatAgent:
    """One conversation with Fin: classifier, catalog search and session state."""

    def __init__(
        self,
        catalog: AbstractCatalog | None = None,
        classifier: AbstractClassifier | None = None,
        max_turns: int = MAX_TURNS,
    ) -> None:
        self.catalog: AbstractCatalog = catalog or build_catalog()
        self.search = ProductSearchService(self.catalog)
        self.local_classifier = LocalClassifier(self.search)
        # None means every turn is classified locally.
        self.classifier: Optional[AbstractClassifier] = classifier or build_classifier(self.catalog)
        self.session = ConversationSession(max_turns=max_turns)

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def history(self) -> List[Dict[str, str]]:
        return self.session.history

    def reset(self) -> None:
        self.session.reset()

    async def _classify(self, message: str) -> tuple[ClassifierReply, str]:
        history = list(self.session.history)
        context = session_context(self.session.state)
        if self.classifier is not None:
            try:
                reply = await self.classifier.classify(message, history, context)
                return reply, self.classifier.source
            except ClassificationError as e:
                logger.warning("Classification failed, falling back to local heuristic: %s", e)
        reply = await self.local_classifier.classify(message, history, context)
        return reply, self.local_classifier.source

    async def chat(self, message: str) -> FinResponse:
        """Handle one turn of conversation and return the structured response."""
        with self.session.turn():
            started_at = time.perf_counter()
            await self.catalog.load()

            reply, source = await self._classify(message)
            classified_at = time.perf_counter()

            response = await assemble_response(
                reply,
                message,
                self.catalog,
                self.search,
                started_at,
                classified_at,
                source=source,
            )
            self.session.commit(
                message,
                response.response_text,
                response.session_state_update,
                response.product_ids,
            )

        logger.debug(
            "turn source=%s intent=%s products=%d total=%.0fms llm=%.0fms search=%.0fms",
            source,
            response.intent.value,
            len(response.products),
            response.latency.total_ms,
            response.latency.classification_ms,
            response.latency.search_ms,
        )
        return response
