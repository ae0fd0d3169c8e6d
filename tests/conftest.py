import logging

import pytest
from unittest.mock import AsyncMock, MagicMock

from app.agents.graph import AgentDefinition, AgentGraph
from app.agents.tools import ToolArguments, ToolDefinition
from app.session.realtime_session import RealtimeSession


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


class LookupArguments(ToolArguments):
    account_id: str


def lookup_account(params, context):
    context.data["looked_up"] = params.account_id
    return {"account": params.account_id, "status": "Active"}


def build_test_graph():
    """Greeter with one tool that can hand off to a specialist, and back."""
    return AgentGraph(
        [
            AgentDefinition(
                name="greeter",
                voice="alloy",
                instructions="Greet the caller",
                tools=[
                    ToolDefinition(
                        name="lookupAccount",
                        description="Look up an account",
                        parameters=LookupArguments,
                        execute=lookup_account,
                    )
                ],
                handoffs=["specialist"],
            ),
            AgentDefinition(
                name="specialist",
                voice="sage",
                instructions="Handle procurement",
                handoffs=["greeter"],
            ),
            AgentDefinition(name="isolated", instructions="Nobody hands off to me"),
        ]
    )


@pytest.fixture
def graph():
    return build_test_graph()


@pytest.fixture
def transport():
    transport = MagicMock()
    transport.send_event = AsyncMock()
    return transport


@pytest.fixture
def session(graph, transport):
    return RealtimeSession(graph, transport, publish_snapshots=False)
