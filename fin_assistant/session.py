"""Per-conversation session state.

apply_session_update() is the only way state changes between turns:
mode and contexts are replaced wholesale by the turn's update (if any), and
the ids shown this turn are always appended to the history log.
"""

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Dict, Iterator, List, Optional, Sequence

from .config import MAX_TURNS
from .errors import ConcurrentTurnError
from .models import SessionState, SessionStateUpdate

logger = logging.getLogger("fin.session")


def new_session() -> SessionState:
    return SessionState()


def apply_session_update(
    prev: SessionState,
    update: Optional[SessionStateUpdate],
    shown_product_ids: Sequence[str] = (),
) -> SessionState:
    """Return the next session state; prev is left untouched."""
    shown = prev.products_shown_this_session + tuple(shown_product_ids)
    if update is None:
        return replace(prev, products_shown_this_session=shown)
    return SessionState(
        conversation_mode=update.conversation_mode,
        support_context=update.support_context,
        shopping_context=update.shopping_context,
        products_shown_this_session=shown,
    )


def session_context(state: SessionState) -> Dict[str, object]:
    """Session summary passed to the classifier alongside the history."""
    context: Dict[str, object] = {
        "conversationMode": state.conversation_mode.value,
        "productsShownThisSession": list(state.products_shown_this_session),
    }
    if state.shopping_context:
        context["shoppingContext"] = {
            "subcategory": state.shopping_context.subcategory,
            "query": state.shopping_context.query,
        }
    if state.support_context:
        context["supportContext"] = {
            "issueType": state.support_context.issue_type,
            "resolved": state.support_context.resolved,
        }
    return context


class ConversationSession:
    """State and rolling history of one conversation; turns must not overlap."""

    def __init__(self, max_turns: int = MAX_TURNS) -> None:
        self.max_turns = max_turns
        self.state: SessionState = new_session()
        self.history: List[Dict[str, str]] = []
        self._turn_active = False

    @property
    def turn_active(self) -> bool:
        return self._turn_active

    @contextmanager
    def turn(self) -> Iterator["ConversationSession"]:
        if self._turn_active:
            raise ConcurrentTurnError("A turn is already in progress for this conversation")
        self._turn_active = True
        try:
            yield self
        finally:
            self._turn_active = False

    def commit(
        self,
        user_message: str,
        reply_text: str,
        update: Optional[SessionStateUpdate],
        shown_product_ids: Sequence[str],
    ) -> SessionState:
        """Record a completed turn."""
        self.state = apply_session_update(self.state, update, shown_product_ids)
        self.history.extend(
            [
                {"role": "user", "content": user_message},
                {"role": "assistant", "content": reply_text},
            ]
        )
        # Trim history to the most recent max_turns turns.
        self.history = self.history[-2 * self.max_turns :]
        logger.debug(
            "session mode=%s shown=%d",
            self.state.conversation_mode.value,
            len(self.state.products_shown_this_session),
        )
        return self.state

    def reset(self) -> None:
        if self._turn_active:
            raise ConcurrentTurnError("Cannot reset a conversation while a turn is in progress")
        self.state = new_session()
        self.history = []
