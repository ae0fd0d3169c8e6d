"""
Scripted session client for smoke-testing a running server.

Plays the part of a browser relay: opens a session socket, relays a short
simulated realtime exchange (a user turn, a streamed assistant reply, a function
call) and prints the transcript snapshots and commands the server sends back.

Usage:
    python client.py [--url ws://localhost:8000/ws] [--agent-config simpleHandoff]
"""

import argparse
import asyncio
import json
import logging
import uuid
from typing import Any, Dict

from app.services.websocket_client import SessionClient, build_session_url

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("session_client")


def simulated_exchange(text: str):
    """Relayed events for one user turn and a streamed assistant reply."""
    user_id = uuid.uuid4().hex[:32]
    assistant_id = uuid.uuid4().hex[:32]
    return [
        {
            "type": "history_added",
            "item": {"itemId": user_id, "type": "message", "role": "user", "status": "in_progress", "content": []},
        },
        {"type": "transcription_completed", "item_id": user_id, "transcript": text},
        {
            "type": "history_added",
            "item": {"itemId": assistant_id, "type": "message", "role": "assistant", "status": "in_progress", "content": []},
        },
        {"type": "transcription_delta", "item_id": assistant_id, "delta": "Sure, "},
        {"type": "transcription_delta", "item_id": assistant_id, "delta": "let me help with that."},
        {"type": "transcription_completed", "item_id": assistant_id, "transcript": "Sure, let me help with that."},
    ]


async def print_frame(frame: Dict[str, Any]) -> None:
    if frame.get("type") == "transcript.snapshot":
        for entry in frame.get("entries", []):
            logger.info(f"  [{entry['timestamp']}] {entry['kind']:<10} {entry.get('role') or '':<9} {entry['text']}")
    else:
        logger.info(f"Command: {frame.get('type')}")
        logger.debug(json.dumps(frame, indent=2))


async def run_session_client(url: str, text: str, handoff: str = None) -> None:
    client = SessionClient(url)
    if not await client.connect():
        return

    listener = asyncio.create_task(client.listen(print_frame))
    try:
        for event in simulated_exchange(text):
            await client.relay_event(event)
            await asyncio.sleep(0.1)

        if handoff:
            logger.info(f"Requesting handoff to {handoff}")
            await client.relay_event({"type": "agent_handoff", "targetAgent": handoff})

        await client.send_user_text(text)
        await asyncio.sleep(1)
    finally:
        await client.close()
        listener.cancel()
        await asyncio.gather(listener, return_exceptions=True)
    logger.info("Session client finished")


def parse_args():
    parser = argparse.ArgumentParser(description="Scripted realtime session client")
    parser.add_argument("--url", default="ws://localhost:8000/ws")
    parser.add_argument("--agent-config", default=None, help="Scenario key")
    parser.add_argument("--agent", default=None, help="Entry agent")
    parser.add_argument("--handoff", default=None, help="Agent to hand off to after the first turn")
    parser.add_argument("--text", default="I need to order some copper pipe.")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    url = build_session_url(args.url, args.agent_config, args.agent)
    logger.info(f"Starting session client against {url}")
    asyncio.run(run_session_client(url, args.text, args.handoff))
