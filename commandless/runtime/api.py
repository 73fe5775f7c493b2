"""
FastAPI runtime for Commandless.

Multi-bot catalogs, message routing, health checks and metrics endpoints.

Copyright (c) 2025 Graziano Labs Corp.
"""

import logging
import os
import time
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Path as PathParam
from pydantic import BaseModel, Field

from ..config import get_default_config
from ..errors import CommandlessError
from .catalog import load_definitions
from .engine import CommandEngine, MessageIntake
from .selector import Clarify, Conversational, Execute, Rejected

logger = logging.getLogger(__name__)

app = FastAPI(title="Commandless Runtime", version="0.1")

# Global engine
ENGINE = CommandEngine(config=get_default_config())


class CatalogRequest(BaseModel):
    commands: List[Dict[str, Any]] = Field(
        ..., description="Command definitions as returned by discovery"
    )


class MessageRequest(BaseModel):
    text: str
    author_id: str
    channel_id: str
    mentioned_user_ids: List[str] = Field(default_factory=list)
    mentioned_channel_ids: List[str] = Field(default_factory=list)
    mentioned_role_ids: List[str] = Field(default_factory=list)
    is_reply_to_bot: bool = False
    conversation_context: Optional[str] = None
    message_id: Optional[str] = None
    reference_message_id: Optional[str] = None
    bot_user_id: Optional[str] = None
    author_name: Optional[str] = None


class MatchResponse(BaseModel):
    kind: str
    rendered_command: Optional[str] = None
    command_name: Optional[str] = None
    params: Dict[str, str] = Field(default_factory=dict)
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    question: Optional[str] = None
    response_text: Optional[str] = None
    reason: Optional[str] = None
    latency_ms: float = Field(ge=0.0)


@app.on_event("startup")
async def load_catalogs():
    """Load catalogs specified in COMMANDLESS_CATALOGS env var."""
    catalogs_spec = os.getenv("COMMANDLESS_CATALOGS")
    if not catalogs_spec:
        return
    # Format: "mod-bot:catalogs/mod.json,fun-bot:catalogs/fun.json"
    for pair in catalogs_spec.split(","):
        bot_id, path = pair.split(":", 1)
        ENGINE.rebuild_catalog(bot_id.strip(), load_definitions(path.strip()))


@app.get("/healthz")
async def healthz():
    """
    Health check endpoint with catalog status.

    Returns:
        Status info: healthy status, bot count, loaded bot IDs
    """
    bot_ids = ENGINE.catalog.bot_ids()
    return {
        "status": "healthy",
        "bots_loaded": len(bot_ids),
        "bots": bot_ids,
        "ai_analysis": ENGINE.analyzer is not None,
    }


@app.get("/bots")
async def list_bots():
    """List bots with the size of their catalogs."""
    return {
        "bots": [
            {"id": bot_id, "commands": len(ENGINE.catalog.get(bot_id))}
            for bot_id in ENGINE.catalog.bot_ids()
        ]
    }


@app.put("/bots/{bot_id}/catalog")
async def put_catalog(
    req: CatalogRequest,
    bot_id: str = PathParam(..., description="Bot identifier")
):
    """
    Rebuild the catalog of a bot from discovered command definitions.

    Raises:
        422: If a definition cannot be turned into a catalog entry
    """
    try:
        entries = ENGINE.rebuild_catalog(bot_id, req.commands)
    except CommandlessError as e:
        raise HTTPException(422, {"code": e.code, "message": e.message, "hint": e.hint})

    return {"bot_id": bot_id, "commands": [entry.to_dict() for entry in entries]}


@app.get("/bots/{bot_id}/catalog")
async def get_catalog(bot_id: str = PathParam(..., description="Bot identifier")):
    """
    Get the catalog of a bot.

    Raises:
        404: If bot not found
    """
    if bot_id not in ENGINE.catalog:
        raise HTTPException(404, f"Bot '{bot_id}' not found. Available: {ENGINE.catalog.bot_ids()}")
    return {"bot_id": bot_id, "commands": ENGINE.get_catalog(bot_id)}


@app.post("/bots/{bot_id}/messages", response_model=MatchResponse)
async def post_message(
    req: MessageRequest,
    bot_id: str = PathParam(..., description="Bot identifier")
):
    """
    Route one chat message to a command of the bot.

    Returns:
        Match response tagged with kind execute/clarify/conversational/rejected

    Raises:
        404: If bot not found
    """
    if bot_id not in ENGINE.catalog:
        raise HTTPException(404, f"Bot '{bot_id}' not found. Available: {ENGINE.catalog.bot_ids()}")

    t0 = time.perf_counter()
    result = await ENGINE.process_message(bot_id, MessageIntake(**req.model_dump()))
    latency = round((time.perf_counter() - t0) * 1000, 2)

    response = MatchResponse(kind=result.kind, latency_ms=latency)
    if isinstance(result, Execute):
        response.rendered_command = result.rendered_command
        response.command_name = result.command_name
        response.params = result.params
        response.confidence = result.confidence
    elif isinstance(result, Clarify):
        response.question = result.question
        response.command_name = result.command_name
    elif isinstance(result, Conversational):
        response.response_text = result.response_text
    elif isinstance(result, Rejected):
        response.reason = result.reason
    return response


@app.get("/metrics")
async def metrics():
    """Routing metrics of the engine."""
    return ENGINE.metrics.to_dict()
