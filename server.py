import logging
import uuid
from collections import OrderedDict
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from fin_assistant import (
    CatalogUnavailableError,
    ConcurrentTurnError,
    FinChatAgent,
    ProductSearchService,
    build_catalog,
    serialize_response,
)
from fin_assistant.config import LOG_LEVEL, MAX_SESSIONS

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("fin.server")

CATALOG_APOLOGY = "Sorry, our catalog is temporarily unavailable. Please try again in a moment."

app = FastAPI(title="Fin Shopping Assistant")

# Enable CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify the exact origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    session_id: Optional[str] = None


# One catalog shared by every conversation; one agent per session id,
# least recently used first.
catalog = build_catalog()
search_service = ProductSearchService(catalog)
sessions: "OrderedDict[str, FinChatAgent]" = OrderedDict()


def new_agent() -> FinChatAgent:
    return FinChatAgent(catalog=catalog)


def _prune_sessions() -> int:
    """Drop the least recently used sessions beyond MAX_SESSIONS."""
    if MAX_SESSIONS <= 0:
        return 0
    evicted = 0
    while len(sessions) > MAX_SESSIONS:
        session_id, _ = sessions.popitem(last=False)
        logger.info("Evicted session %s", session_id)
        evicted += 1
    return evicted


@app.post("/chat")
async def chat_endpoint(request: ChatRequest):
    session_id = request.session_id or uuid.uuid4().hex
    agent = sessions.get(session_id)
    is_new = agent is None
    if is_new:
        agent = new_agent()
    else:
        sessions.move_to_end(session_id)

    try:
        response = await agent.chat(request.message)
    except ConcurrentTurnError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CatalogUnavailableError as e:
        logger.error("Chat turn failed for session %s: %s", session_id, e)
        raise HTTPException(status_code=503, detail=CATALOG_APOLOGY)

    if is_new:
        # Stored only once a first turn has gone through.
        sessions[session_id] = agent
        logger.info("Started session %s", session_id)
        _prune_sessions()

    return {"session_id": session_id, **serialize_response(response)}


@app.post("/sessions/{session_id}/reset")
async def reset_session(session_id: str):
    agent = sessions.get(session_id)
    if agent is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    try:
        agent.reset()
    except ConcurrentTurnError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"session_id": session_id, "status": "reset"}


@app.get("/catalog/subcategories")
async def list_subcategories():
    try:
        return {"subcategories": await search_service.subcategories()}
    except CatalogUnavailableError:
        raise HTTPException(status_code=503, detail=CATALOG_APOLOGY)


@app.get("/catalog/stats")
async def get_catalog_stats():
    try:
        stats = await search_service.catalog_stats()
    except CatalogUnavailableError:
        raise HTTPException(status_code=503, detail=CATALOG_APOLOGY)
    return {
        "totalProducts": stats.total_products,
        "subcategories": stats.subcategories,
        "priceRange": {"min": stats.price_range[0], "max": stats.price_range[1]},
    }


@app.get("/")
async def root():
    return {"status": "Fin API is running", "docs": "/docs"}


@app.get("/health")
async def health_check():
    return {"status": "ok", "catalog": catalog.state.value}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
