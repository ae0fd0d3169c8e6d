import asyncio
import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from app.agents.supervisor import (
    BREADCRUMB_PREFIX,
    SUPERVISOR_TOOL_NAME,
    SupervisorEscalation,
    build_supervisor_input,
    make_supervisor_tool,
)
from app.agents.tools import ToolContext, ToolExecutor
from app.errors import TransportError


def function_call(name, arguments, call_id="call_1"):
    return {"type": "function_call", "name": name, "arguments": json.dumps(arguments), "call_id": call_id}


def message(text):
    return {"type": "message", "content": [{"type": "output_text", "text": text}]}


HISTORY = [
    {"type": "message", "role": "user", "content": "What is my balance?"},
    {"type": "breadcrumb", "title": "Agent: chatAgent"},
]


def make_escalation(client, handlers=None, **kwargs):
    return SupervisorEscalation(
        client=client,
        instructions="You are the supervisor",
        tool_schemas=[{"type": "function", "name": "getAccount"}],
        handlers=handlers if handlers is not None else {"getAccount": lambda args: {"balance": 42}},
        **kwargs,
    )


@pytest.mark.asyncio
class TestSupervisorEscalation:

    async def test_direct_answer_returns_next_response(self):
        client = MagicMock()
        client.create_response = AsyncMock(return_value={"output": [message("Your balance is $42.")]})

        result = await make_escalation(client).run(HISTORY, "balance")

        assert result == {"nextResponse": "Your balance is $42."}
        body = client.create_response.await_args.args[0]
        assert body["parallel_tool_calls"] is False
        assert body["input"][0] == {"type": "message", "role": "system", "content": "You are the supervisor"}

    async def test_function_call_loop_feeds_results_back(self):
        client = MagicMock()
        client.create_response = AsyncMock(
            side_effect=[
                {"output": [function_call("getAccount", {"id": "KT-1"})]},
                {"output": [message("It is $42.")]},
            ]
        )
        breadcrumbs = MagicMock()

        result = await make_escalation(client).run(HISTORY, "", breadcrumbs)

        assert result == {"nextResponse": "It is $42."}
        assert client.create_response.await_count == 2
        second_body = client.create_response.await_args_list[1].args[0]
        call_item, output_item = second_body["input"][-2:]
        assert call_item["type"] == "function_call"
        assert call_item["name"] == "getAccount"
        assert output_item == {
            "type": "function_call_output",
            "call_id": "call_1",
            "output": json.dumps({"balance": 42}),
        }
        titles = [c.args[0] for c in breadcrumbs.call_args_list]
        assert titles == [
            f"{BREADCRUMB_PREFIX} function call: getAccount",
            f"{BREADCRUMB_PREFIX} function call result: getAccount",
        ]

    async def test_unknown_function_gets_error_payload(self):
        client = MagicMock()
        client.create_response = AsyncMock(
            side_effect=[
                {"output": [function_call("deleteAccount", {})]},
                {"output": [message("I can't do that.")]},
            ]
        )

        result = await make_escalation(client).run(HISTORY, "")

        assert result == {"nextResponse": "I can't do that."}
        second_body = client.create_response.await_args_list[1].args[0]
        assert json.loads(second_body["input"][-1]["output"]) == {"error": "Unknown function: deleteAccount"}

    async def test_handler_rejecting_arguments_gets_error_payload(self):
        def handler(arguments):
            raise ValueError("bad zip")

        client = MagicMock()
        client.create_response = AsyncMock(
            side_effect=[
                {"output": [function_call("getAccount", {"zip": ""})]},
                {"output": [message("Which zip code?")]},
            ]
        )

        result = await make_escalation(client, {"getAccount": handler}).run(HISTORY, "")

        assert result == {"nextResponse": "Which zip code?"}
        second_body = client.create_response.await_args_list[1].args[0]
        assert json.loads(second_body["input"][-1]["output"]) == {"error": "Invalid arguments for getAccount"}

    async def test_loop_is_bounded_by_max_iterations(self):
        client = MagicMock()
        client.create_response = AsyncMock(return_value={"output": [function_call("getAccount", {})]})

        result = await make_escalation(client, max_iterations=3).run(HISTORY, "")

        assert result == {"error": "Something went wrong.", "reason": "max_iterations"}
        assert client.create_response.await_count == 3

    async def test_timeout_returns_error(self):
        async def slow(body):
            await asyncio.sleep(1)
            return {"output": [message("late")]}

        client = MagicMock()
        client.create_response = slow

        result = await make_escalation(client, timeout=0.01).run(HISTORY, "")

        assert result == {"error": "Something went wrong.", "reason": "timeout"}

    async def test_transport_failure_returns_error(self):
        client = MagicMock()
        client.create_response = AsyncMock(side_effect=TransportError("down", status_code=502))

        result = await make_escalation(client).run(HISTORY, "")

        assert result["error"] == "Something went wrong."
        assert result["reason"] == "transport"

    async def test_supervisor_tool_forwards_history_and_context(self):
        client = MagicMock()
        client.create_response = AsyncMock(return_value={"output": [message("Done.")]})
        tool = make_supervisor_tool(make_escalation(client))
        executor = ToolExecutor([tool])

        result = await executor.execute(
            SUPERVISOR_TOOL_NAME,
            {"relevantContextFromLastUserMessage": ""},
            ToolContext(history=HISTORY),
        )

        assert result.ok is True
        assert result.output == {"nextResponse": "Done."}
        body = client.create_response.await_args.args[0]
        assert "What is my balance?" in body["input"][1]["content"]


class TestSupervisorInput:

    def test_only_messages_are_forwarded(self):
        rendered = build_supervisor_input(HISTORY, "wants balance")

        assert "What is my balance?" in rendered
        assert "Agent: chatAgent" not in rendered
        assert rendered.rstrip().endswith("wants balance")

    def test_max_iterations_must_be_positive(self):
        with pytest.raises(ValueError):
            make_escalation(MagicMock(), max_iterations=0)
