import pytest
import requests
from unittest.mock import MagicMock, patch

from app.errors import TransportError
from app.services.openai_client import OpenAIClient, extract_output_text


def fake_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = "upstream body"
    response.json.return_value = payload if payload is not None else {}
    return response


@pytest.mark.asyncio
class TestOpenAIClient:

    async def test_create_realtime_session(self):
        client = OpenAIClient("sk-test", base_url="https://example.test/v1/")
        payload = {"client_secret": {"value": "ek_1"}}

        with patch("app.services.openai_client.requests.post", return_value=fake_response(payload=payload)) as mock_post:
            result = await client.create_realtime_session("gpt-4o-realtime-preview")

        assert result == payload
        args, kwargs = mock_post.call_args
        assert args[0] == "https://example.test/v1/realtime/sessions"
        assert kwargs["json"] == {"model": "gpt-4o-realtime-preview"}
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"

    async def test_create_response_disables_streaming(self):
        client = OpenAIClient("sk-test")

        with patch("app.services.openai_client.requests.post", return_value=fake_response(payload={"output": []})) as mock_post:
            await client.create_response({"model": "gpt-4.1", "input": "hi", "stream": True})

        assert mock_post.call_args.kwargs["json"]["stream"] is False

    async def test_non_ok_status_raises(self):
        client = OpenAIClient("sk-test")

        with patch("app.services.openai_client.requests.post", return_value=fake_response(status_code=401)):
            with pytest.raises(TransportError) as exc_info:
                await client.create_response({"model": "gpt-4.1", "input": "hi"})

        assert exc_info.value.status_code == 401

    async def test_network_failure_raises(self):
        client = OpenAIClient("sk-test")

        with patch("app.services.openai_client.requests.post", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(TransportError):
                await client.create_realtime_session()

    async def test_missing_key_raises_without_calling_upstream(self):
        client = OpenAIClient(None)

        with patch("app.services.openai_client.requests.post") as mock_post:
            with pytest.raises(TransportError):
                await client.create_realtime_session()

        mock_post.assert_not_called()


class TestExtractOutputText:

    def test_joins_message_text(self):
        output = [
            {"type": "function_call", "name": "x"},
            {"type": "message", "content": [{"type": "output_text", "text": "Hello "}, {"type": "output_text", "text": "there"}]},
            {"type": "message", "content": [{"type": "output_text", "text": "Bye"}]},
        ]
        assert extract_output_text(output) == "Hello there\nBye"

    def test_empty_output(self):
        assert extract_output_text([]) == ""
        assert extract_output_text(None) == ""
