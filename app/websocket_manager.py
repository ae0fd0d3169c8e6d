"""
Session socket manager for browser-relayed realtime sessions.

The browser holds the realtime media connection and relays its events over this
socket; the server runs the orchestration (transcript, tools, handoffs, guardrails)
and sends back the commands the browser must forward upstream, plus transcript
snapshots for rendering.

The WebSocketManager class is the central component: it builds the agent graph for
the selected scenario, creates a RealtimeSession per socket, routes browser control
messages to session commands and everything else to the session's event handling.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from app.agents.guardrails import GuardrailPipeline, ModerationGuardrail
from app.config.constants import (
    CONTROL_DISCONNECT,
    CONTROL_INTERRUPT,
    CONTROL_MUTE,
    CONTROL_PUSH_TO_TALK,
    CONTROL_PUSH_TO_TALK_START,
    CONTROL_PUSH_TO_TALK_STOP,
    CONTROL_USER_TEXT,
    LOGGER_NAME,
)
from app.errors import ConfigurationError
from app.models.conversation import SessionRegistry
from app.models.realtime_schemas import MuteMessage, PushToTalkMessage, UserTextMessage
from app.scenarios.registry import get_agent_set, get_scenario
from app.session.realtime_session import RealtimeSession

logger = logging.getLogger(LOGGER_NAME)

# Policy violation close code, used when the requested scenario cannot be built
CLOSE_INVALID_CONFIG = 1008

ControlHandler = Callable[[Dict[str, Any], RealtimeSession], Awaitable[None]]


class SocketTransport:
    """Sends session commands to the browser as JSON text frames."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    async def send_event(self, event: Dict[str, Any]) -> None:
        await self.websocket.send_text(json.dumps(event))


async def handle_user_text(message: Dict[str, Any], session: RealtimeSession) -> None:
    try:
        typed = UserTextMessage(**message)
    except ValidationError as e:
        logger.error(f"Invalid user_text message: {e}")
        return
    await session.send_user_text(typed.text)


async def handle_push_to_talk(message: Dict[str, Any], session: RealtimeSession) -> None:
    try:
        typed = PushToTalkMessage(**message)
    except ValidationError as e:
        logger.error(f"Invalid push_to_talk message: {e}")
        return
    await session.set_push_to_talk(typed.enabled)


async def handle_push_to_talk_start(message: Dict[str, Any], session: RealtimeSession) -> None:
    await session.push_to_talk_start()


async def handle_push_to_talk_stop(message: Dict[str, Any], session: RealtimeSession) -> None:
    await session.push_to_talk_stop()


async def handle_interrupt(message: Dict[str, Any], session: RealtimeSession) -> None:
    await session.interrupt()


async def handle_mute(message: Dict[str, Any], session: RealtimeSession) -> None:
    try:
        typed = MuteMessage(**message)
    except ValidationError as e:
        logger.error(f"Invalid mute message: {e}")
        return
    session.mute(typed.muted)


class WebSocketManager:
    """Manages session sockets and routes their messages.

    Control messages (user text, push-to-talk, interrupt, mute, disconnect) map to
    session commands. Any other message is a relayed realtime event and goes to
    RealtimeSession.handle_event.
    """

    def __init__(self, client: Any, guardrails_enabled: bool = True):
        """
        Args:
            client: Upstream client used by the supervisor and the moderation guardrail
            guardrails_enabled: Attach the moderation guardrail to new sessions
        """
        self.client = client
        self.guardrails_enabled = guardrails_enabled
        self.session_registry = SessionRegistry()

        self.handlers: Dict[str, ControlHandler] = {
            CONTROL_USER_TEXT: handle_user_text,
            CONTROL_PUSH_TO_TALK: handle_push_to_talk,
            CONTROL_PUSH_TO_TALK_START: handle_push_to_talk_start,
            CONTROL_PUSH_TO_TALK_STOP: handle_push_to_talk_stop,
            CONTROL_INTERRUPT: handle_interrupt,
            CONTROL_MUTE: handle_mute,
        }

    def create_session(
        self,
        websocket: WebSocket,
        agent_set_key: Optional[str] = None,
        entry_agent: Optional[str] = None,
        push_to_talk: bool = False,
        voice: Optional[str] = None,
    ) -> RealtimeSession:
        """
        Build a session for the selected scenario.

        Raises:
            ConfigurationError: If the scenario or the entry agent is unknown
        """
        scenario = get_scenario(agent_set_key)
        graph = get_agent_set(scenario.key, self.client, entry_agent)
        guardrails = None
        if self.guardrails_enabled:
            guardrails = GuardrailPipeline([ModerationGuardrail(self.client, scenario.company_name)])
        return RealtimeSession(
            graph,
            SocketTransport(websocket),
            guardrails=guardrails,
            push_to_talk=push_to_talk,
            voice=voice,
        )

    async def handle_websocket(
        self,
        websocket: WebSocket,
        agent_set_key: Optional[str] = None,
        entry_agent: Optional[str] = None,
        push_to_talk: bool = False,
        voice: Optional[str] = None,
    ):
        """Handle a session socket throughout its lifecycle.

        Args:
            websocket: The FastAPI WebSocket connection object
            agent_set_key: Scenario to run; the default scenario when None
            entry_agent: Agent to start with instead of the scenario's first agent
            push_to_talk: Start with manual turn-taking
            voice: Voice override for the whole session

        The connection stays open until the client disconnects or sends a
        disconnect control message; the session is torn down either way.
        """
        await websocket.accept()

        try:
            session = self.create_session(
                websocket, agent_set_key, entry_agent, push_to_talk, voice
            )
        except ConfigurationError as e:
            logger.error(f"Rejected session: {e}")
            await websocket.send_text(json.dumps({"type": "error", "error": str(e)}))
            await websocket.close(code=CLOSE_INVALID_CONFIG)
            return

        self.session_registry.add_session(session)
        logger.info(f"Session {session.session_id} opened on agent {session.active_agent.name}")

        try:
            await session.connect()
            while True:
                data = await websocket.receive_text()
                try:
                    message_dict = json.loads(data)
                except ValueError:
                    logger.error(f"Discarding malformed frame: {data[:200]}")
                    continue
                if not isinstance(message_dict, dict):
                    logger.error("Discarding frame that is not a JSON object")
                    continue

                message_type = message_dict.get("type")
                if message_type == CONTROL_DISCONNECT:
                    logger.info(f"Client requested disconnect for session {session.session_id}")
                    break

                handler = self.handlers.get(message_type)
                if handler is not None:
                    await handler(message_dict, session)
                else:
                    await session.handle_event(message_dict)

        except WebSocketDisconnect:
            logger.info(f"Client disconnected from session {session.session_id}")
        except Exception as e:
            logger.error(f"Error in session socket: {e}", exc_info=True)
        finally:
            await session.disconnect()
            self.session_registry.remove_session(session.session_id)
            logger.info(f"Session removed during cleanup: {session.session_id}")
            try:
                await websocket.close()
            except RuntimeError as e:
                logger.debug(f"Socket already closed: {e}")
            logger.info("WebSocket connection closed")
