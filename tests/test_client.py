import os
import sys

import pytest
from unittest.mock import AsyncMock, patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from client import print_frame, run_session_client, simulated_exchange


class TestSimulatedExchange:

    def test_one_user_turn_and_a_streamed_reply(self):
        events = simulated_exchange("I need copper pipe")

        assert [e["type"] for e in events] == [
            "history_added",
            "transcription_completed",
            "history_added",
            "transcription_delta",
            "transcription_delta",
            "transcription_completed",
        ]
        assert events[1]["transcript"] == "I need copper pipe"
        assert events[0]["item"]["itemId"] == events[1]["item_id"]
        assert events[2]["item"]["itemId"] == events[5]["item_id"]


@pytest.mark.asyncio
class TestRunSessionClient:

    async def test_gives_up_when_connection_fails(self):
        with patch("client.SessionClient") as mock_client_class:
            mock_client = mock_client_class.return_value
            mock_client.connect = AsyncMock(return_value=False)
            mock_client.relay_event = AsyncMock()

            await run_session_client("ws://localhost:8000/ws", "hello")

        mock_client.relay_event.assert_not_called()

    async def test_relays_exchange_and_handoff(self):
        with patch("client.SessionClient") as mock_client_class, patch("client.asyncio.sleep", new_callable=AsyncMock):
            mock_client = mock_client_class.return_value
            mock_client.connect = AsyncMock(return_value=True)
            mock_client.listen = AsyncMock()
            mock_client.relay_event = AsyncMock()
            mock_client.send_user_text = AsyncMock()
            mock_client.close = AsyncMock()

            await run_session_client("ws://localhost:8000/ws", "hello", handoff="procurementSpecialist")

        relayed = [c.args[0] for c in mock_client.relay_event.call_args_list]
        assert relayed[-1] == {"type": "agent_handoff", "targetAgent": "procurementSpecialist"}
        mock_client.send_user_text.assert_awaited_once_with("hello")
        mock_client.close.assert_awaited_once()

    async def test_print_frame_handles_snapshots(self):
        with patch("client.logger") as mock_logger:
            await print_frame(
                {
                    "type": "transcript.snapshot",
                    "entries": [{"timestamp": "10:00:00.000", "kind": "BREADCRUMB", "role": None, "text": "Agent: a"}],
                }
            )

        assert "Agent: a" in mock_logger.info.call_args.args[0]
