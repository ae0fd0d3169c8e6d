import json

import pytest
from unittest.mock import AsyncMock, patch
from websockets.exceptions import ConnectionClosed

from app.services.websocket_client import SessionClient, build_session_url


class TestBuildSessionUrl:

    def test_without_parameters(self):
        assert build_session_url("ws://localhost:8000/ws") == "ws://localhost:8000/ws"

    def test_with_scenario_selection(self):
        url = build_session_url(
            "ws://localhost:8000/ws", "simpleHandoff", "kojoGreeter", push_to_talk=True, voice="sage"
        )
        assert url == (
            "ws://localhost:8000/ws?agentConfig=simpleHandoff&agent=kojoGreeter&pushToTalk=true&voice=sage"
        )


@pytest.mark.asyncio
class TestSessionClient:

    async def test_connect_success(self):
        with patch("websockets.connect", new_callable=AsyncMock) as mock_connect:
            client = SessionClient("ws://localhost:8000/ws")
            assert await client.connect() is True

        mock_connect.assert_awaited_once_with("ws://localhost:8000/ws")
        assert client.connected

    async def test_connect_failure(self):
        with patch("websockets.connect", new_callable=AsyncMock, side_effect=OSError("refused")):
            client = SessionClient("ws://localhost:8000/ws")
            assert await client.connect() is False

        assert not client.connected

    async def test_send_without_connection(self):
        client = SessionClient("ws://localhost:8000/ws")
        assert await client.send_user_text("hello") is False

    async def test_control_messages(self):
        client = SessionClient("ws://localhost:8000/ws")
        client.websocket = AsyncMock()

        await client.send_user_text("hello")
        await client.set_push_to_talk(True)
        await client.push_to_talk_start()
        await client.push_to_talk_stop()
        await client.interrupt()
        await client.mute(False)

        sent = [json.loads(c.args[0]) for c in client.websocket.send.call_args_list]
        assert sent == [
            {"type": "user_text", "text": "hello"},
            {"type": "push_to_talk", "enabled": True},
            {"type": "push_to_talk_start"},
            {"type": "push_to_talk_stop"},
            {"type": "interrupt"},
            {"type": "mute", "muted": False},
        ]

    async def test_receive_keeps_last_snapshot(self):
        client = SessionClient("ws://localhost:8000/ws")
        client.websocket = AsyncMock()
        entries = [{"item_id": "a1", "text": "Hello"}]
        client.websocket.recv.side_effect = [
            json.dumps({"type": "response.create"}),
            json.dumps({"type": "transcript.snapshot", "entries": entries}),
        ]

        assert (await client.receive())["type"] == "response.create"
        assert client.last_snapshot == []
        await client.receive()
        assert client.last_snapshot == entries

    async def test_listen_stops_when_server_closes(self):
        client = SessionClient("ws://localhost:8000/ws")
        client.websocket = AsyncMock()
        client.websocket.recv.side_effect = [
            json.dumps({"type": "session.update", "session": {}}),
            ConnectionClosed(None, None),
        ]
        handler = AsyncMock()

        await client.listen(handler)

        handler.assert_awaited_once_with({"type": "session.update", "session": {}})
        assert not client.connected

    async def test_close_sends_disconnect(self):
        client = SessionClient("ws://localhost:8000/ws")
        websocket = AsyncMock()
        client.websocket = websocket

        await client.close()

        websocket.send.assert_awaited_once_with(json.dumps({"type": "disconnect"}))
        websocket.close.assert_awaited_once()
        assert not client.connected
