"""
WebSocket client for the realtime agents session socket.

SessionClient is what a relay (a browser bridge, a scripted test harness, the text
chat script) uses to drive a session: it connects with the scenario query
parameters, sends control messages and relayed realtime events, and hands every
frame the server sends back (realtime commands, transcript snapshots) to a callback.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import urlencode

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from app.config.constants import (
    CONTROL_DISCONNECT,
    CONTROL_INTERRUPT,
    CONTROL_MUTE,
    CONTROL_PUSH_TO_TALK,
    CONTROL_PUSH_TO_TALK_START,
    CONTROL_PUSH_TO_TALK_STOP,
    LOGGER_NAME,
    TRANSCRIPT_SNAPSHOT,
)
from app.models.realtime_schemas import UserTextMessage

logger = logging.getLogger(LOGGER_NAME)


def build_session_url(
    base_url: str,
    agent_set_key: Optional[str] = None,
    entry_agent: Optional[str] = None,
    push_to_talk: bool = False,
    voice: Optional[str] = None,
) -> str:
    """Session socket URL with the scenario selection as query parameters."""
    params: Dict[str, str] = {}
    if agent_set_key:
        params["agentConfig"] = agent_set_key
    if entry_agent:
        params["agent"] = entry_agent
    if push_to_talk:
        params["pushToTalk"] = "true"
    if voice:
        params["voice"] = voice
    return f"{base_url}?{urlencode(params)}" if params else base_url


class SessionClient:
    """
    Client side of the session socket.

    Args:
        url: Full session socket URL, e.g. from build_session_url
    """

    def __init__(self, url: str):
        self.url = url
        self.websocket = None
        self.last_snapshot: list = []

    @property
    def connected(self) -> bool:
        return self.websocket is not None

    async def connect(self) -> bool:
        """
        Open the session socket.

        Returns:
            True if the connection was established, False otherwise
        """
        try:
            self.websocket = await websockets.connect(self.url)
            logger.info(f"Connected to session socket at {self.url}")
            return True
        except (OSError, WebSocketException) as e:
            logger.error(f"Failed to connect to session socket: {e}")
            return False

    async def send(self, message: Dict[str, Any]) -> bool:
        if not self.websocket:
            logger.error(f"Cannot send {message.get('type')}: not connected")
            return False
        await self.websocket.send(json.dumps(message))
        logger.debug(f"Sent {message.get('type')}")
        return True

    async def relay_event(self, event: Dict[str, Any]) -> bool:
        """Forward a realtime event received from upstream to the session."""
        return await self.send(event)

    async def send_user_text(self, text: str) -> bool:
        return await self.send(UserTextMessage(text=text).model_dump())

    async def set_push_to_talk(self, enabled: bool) -> bool:
        return await self.send({"type": CONTROL_PUSH_TO_TALK, "enabled": enabled})

    async def push_to_talk_start(self) -> bool:
        return await self.send({"type": CONTROL_PUSH_TO_TALK_START})

    async def push_to_talk_stop(self) -> bool:
        return await self.send({"type": CONTROL_PUSH_TO_TALK_STOP})

    async def interrupt(self) -> bool:
        return await self.send({"type": CONTROL_INTERRUPT})

    async def mute(self, muted: bool) -> bool:
        return await self.send({"type": CONTROL_MUTE, "muted": muted})

    async def receive(self) -> Optional[Dict[str, Any]]:
        """Next frame from the server, or None once the socket is closed."""
        if not self.websocket:
            return None
        try:
            frame = json.loads(await self.websocket.recv())
        except ConnectionClosed:
            logger.info("Session socket closed by server")
            self.websocket = None
            return None
        if frame.get("type") == TRANSCRIPT_SNAPSHOT:
            self.last_snapshot = frame.get("entries", [])
        return frame

    async def listen(self, frame_handler: Callable[[Dict[str, Any]], Awaitable[None]]) -> None:
        """
        Hand every server frame to `frame_handler` until the socket closes.

        Args:
            frame_handler: Coroutine called with each decoded frame
        """
        while self.websocket:
            frame = await self.receive()
            if frame is None:
                break
            await frame_handler(frame)

    async def close(self) -> None:
        """Ask the server to end the session, then close the socket."""
        if self.websocket:
            try:
                await self.websocket.send(json.dumps({"type": CONTROL_DISCONNECT}))
            except ConnectionClosed:
                logger.debug("Socket already closed before disconnect was sent")
            await self.websocket.close()
            logger.info("Closed session socket")
            self.websocket = None
