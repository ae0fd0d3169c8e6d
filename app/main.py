"""
FastAPI server for the realtime agents service.

This module initializes and configures the FastAPI application. It exposes the two
thin proxy endpoints the browser needs (an ephemeral realtime session and the
Responses API, both called with the server's long-lived key), the scenario listing,
health and index endpoints, and the session socket that runs agent orchestration.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import dotenv
from fastapi import Body, FastAPI, Query, WebSocket
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.config.constants import DEFAULT_REALTIME_MODEL
from app.config.logging_config import configure_logging
from app.errors import TransportError
from app.scenarios.registry import DEFAULT_AGENT_SET_KEY, list_scenarios
from app.services.openai_client import OpenAIClient
from app.websocket_manager import WebSocketManager

# Load environment variables from .env file if it exists
env_path = Path(".") / ".env"
if env_path.exists():
    dotenv.load_dotenv(env_path)

# Configure logging
logger = configure_logging()

# Get configuration from environment variables
PORT = int(os.getenv("PORT", "8000"))
HOST = os.getenv("HOST", "0.0.0.0")

# Create FastAPI application
app = FastAPI(
    title="Realtime Agents",
    description="Orchestration server for multi-agent realtime voice sessions",
    version="1.0.0",
)

openai_client = OpenAIClient(os.getenv("OPENAI_API_KEY"))

# Create WebSocket manager
websocket_manager = WebSocketManager(openai_client)


class ResponsesRequest(BaseModel):
    """Body of a Responses API call; anything beyond model and input is forwarded as-is."""
    model_config = ConfigDict(extra="allow")

    model: str = Field(..., min_length=1)
    input: Any

    def is_structured(self) -> bool:
        text = (self.model_extra or {}).get("text")
        if not isinstance(text, dict):
            return False
        fmt = text.get("format")
        return isinstance(fmt, dict) and fmt.get("type") == "json_schema"


@app.get("/api/session")
async def create_session():
    """Mint an ephemeral realtime session for the browser.

    Returns:
        The upstream JSON, whose client_secret.value is the short-lived key
    """
    try:
        return await openai_client.create_realtime_session(DEFAULT_REALTIME_MODEL)
    except TransportError as e:
        logger.error(f"Error in /api/session: {e}")
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@app.post("/api/responses")
async def create_response(payload: Dict[str, Any] = Body(...)):
    """Forward a Responses API request with the server's key.

    Structured-output requests (text.format.type == json_schema) and plain text
    requests are forwarded the same way; only the log line differs.
    """
    try:
        request = ResponsesRequest.model_validate(payload)
    except ValidationError as e:
        logger.error(f"Invalid /api/responses body: {e}")
        return JSONResponse(
            status_code=400, content={"error": "model and input are required"}
        )

    body = request.model_dump()
    if request.is_structured():
        logger.info(f"Forwarding structured response request for model {request.model}")
    else:
        logger.info(f"Forwarding text response request for model {request.model}")

    try:
        return await openai_client.create_response(body)
    except TransportError as e:
        logger.error(f"Responses proxy error: {e}")
        return JSONResponse(status_code=500, content={"error": "failed"})


@app.get("/api/scenarios")
async def scenarios():
    """Selectable agent sets with their agent names."""
    return {"default": DEFAULT_AGENT_SET_KEY, "scenarios": list_scenarios(openai_client)}


@app.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    agentConfig: Optional[str] = Query(default=None),
    agent: Optional[str] = Query(default=None),
    pushToTalk: bool = Query(default=False),
    voice: Optional[str] = Query(default=None),
):
    """Session socket: relayed realtime events in, realtime commands and transcript snapshots out.

    Query parameters select the scenario (agentConfig), the entry agent (agent),
    the initial turn-taking mode (pushToTalk) and a voice override (voice).
    """
    await websocket_manager.handle_websocket(
        websocket,
        agent_set_key=agentConfig,
        entry_agent=agent,
        push_to_talk=pushToTalk,
        voice=voice,
    )


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring system status.

    Returns:
        dict: Status information including the live session count and agents in use
    """
    registry = websocket_manager.session_registry
    return {
        "status": "healthy",
        "openai_api_key_configured": bool(os.getenv("OPENAI_API_KEY")),
        "active_sessions": len(registry),
        "agents_in_use": registry.agents_in_use(),
    }


@app.get("/")
async def root():
    """Root endpoint to display basic information about the API."""
    return {
        "name": "Realtime Agents",
        "description": "Orchestration server for multi-agent realtime voice sessions",
        "version": "1.0.0",
        "active_sessions": len(websocket_manager.session_registry),
        "endpoints": {
            "/api/session": "Mint an ephemeral realtime session",
            "/api/responses": "Proxy to the Responses API",
            "/api/scenarios": "Available agent sets",
            "/ws": "Realtime session socket",
            "/health": "Health check endpoint",
        },
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on http://{HOST}:{PORT}")
    uvicorn.run(app, host=HOST, port=PORT, http="h11")
