"""
Supervisor escalation: a front agent defers a turn to a stronger reasoning model.

The front agent calls a single tool. That tool sends the supervisor model the fixed
supervisor instructions, the session's message history and a short context string,
plus a menu of function descriptors. Whenever the supervisor answers with function
calls, each call is dispatched to a local handler from a closed table, the call and
its output are appended to the request, and the request is sent again. The first
answer without function calls is returned verbatim to the front agent.

The loop is bounded by a maximum number of requests and by a wall-clock timeout.
SupervisorEscalation.run never raises; it returns {"nextResponse": text} or an
error marker.
"""

import asyncio
import inspect
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from pydantic import Field

from app.agents.tools import ToolArguments, ToolContext, ToolDefinition
from app.config.constants import (
    LOGGER_NAME,
    SUPERVISOR_ERROR_MESSAGE,
    SUPERVISOR_MAX_ITERATIONS,
    SUPERVISOR_MODEL,
    SUPERVISOR_TIMEOUT,
)
from app.errors import EscalationExhausted, TransportError
from app.services.openai_client import extract_output_text

logger = logging.getLogger(LOGGER_NAME)

SUPERVISOR_TOOL_NAME = "getNextResponseFromSupervisor"
BREADCRUMB_PREFIX = "[supervisorAgent]"

LocalHandler = Callable[[Dict[str, Any]], Union[Any, Awaitable[Any]]]


class SupervisorRequestArguments(ToolArguments):
    allow_blank = frozenset({"relevant_context"})

    relevant_context: str = Field(
        ...,
        alias="relevantContextFromLastUserMessage",
        description=(
            "Key information from the user described in their most recent message. "
            "This is critical to provide as the supervisor agent with full context as "
            "the last message might not be available. Okay to omit if the user message "
            "didn't add any new information."
        ),
    )


def build_supervisor_input(history: List[Dict[str, Any]], context_text: str) -> str:
    messages = [item for item in history if item.get("type") == "message"]
    return (
        "==== Conversation History ====\n"
        f"{json.dumps(messages, indent=2)}\n\n"
        "==== Relevant Context From Last User Message ===\n"
        f"{context_text}\n"
    )


class SupervisorEscalation:
    """
    Runs one escalation request/response loop against the supervisor model.

    Args:
        client: Object with an async create_response(body) method
        instructions: Supervisor system prompt
        tool_schemas: Function descriptors offered to the supervisor
        handlers: Local implementation for each descriptor, keyed by name
        model: Supervisor model name
        max_iterations: Maximum number of requests per escalation
        timeout: Wall-clock bound in seconds for the whole escalation
    """

    def __init__(
        self,
        client: Any,
        instructions: str,
        tool_schemas: List[Dict[str, Any]],
        handlers: Dict[str, LocalHandler],
        model: str = SUPERVISOR_MODEL,
        max_iterations: int = SUPERVISOR_MAX_ITERATIONS,
        timeout: float = SUPERVISOR_TIMEOUT,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.client = client
        self.instructions = instructions
        self.tool_schemas = tool_schemas
        self.handlers = dict(handlers)
        self.model = model
        self.max_iterations = max_iterations
        self.timeout = timeout

    def build_request(self, history: List[Dict[str, Any]], context_text: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "input": [
                {"type": "message", "role": "system", "content": self.instructions},
                {
                    "type": "message",
                    "role": "user",
                    "content": build_supervisor_input(history, context_text),
                },
            ],
            "tools": self.tool_schemas,
            "parallel_tool_calls": False,
        }

    async def dispatch(self, name: str, arguments: Dict[str, Any]) -> Any:
        handler = self.handlers.get(name)
        if handler is None:
            logger.warning(f"Supervisor requested unknown function: {name}")
            return {"error": f"Unknown function: {name}"}
        try:
            result = handler(arguments)
            if inspect.isawaitable(result):
                result = await result
        except ValueError as e:
            logger.warning(f"Supervisor function {name} rejected its arguments: {e}")
            return {"error": f"Invalid arguments for {name}"}
        return result

    async def _loop(
        self,
        body: Dict[str, Any],
        add_breadcrumb: Callable[..., Any],
    ) -> str:
        for iteration in range(1, self.max_iterations + 1):
            response = await self.client.create_response(body)
            output = response.get("output") or []
            calls = [item for item in output if item.get("type") == "function_call"]

            if not calls:
                logger.info(f"Supervisor answered after {iteration} request(s)")
                return extract_output_text(output)

            for call in calls:
                name = call.get("name", "")
                try:
                    arguments = json.loads(call.get("arguments") or "{}")
                except ValueError:
                    arguments = {}
                add_breadcrumb(f"{BREADCRUMB_PREFIX} function call: {name}", arguments)

                result = await self.dispatch(name, arguments)
                add_breadcrumb(f"{BREADCRUMB_PREFIX} function call result: {name}", result)

                body["input"].extend(
                    [
                        {
                            "type": "function_call",
                            "call_id": call.get("call_id"),
                            "name": name,
                            "arguments": call.get("arguments") or "{}",
                        },
                        {
                            "type": "function_call_output",
                            "call_id": call.get("call_id"),
                            "output": json.dumps(result),
                        },
                    ]
                )

        raise EscalationExhausted("max_iterations", self.max_iterations)

    async def run(
        self,
        history: List[Dict[str, Any]],
        context_text: str,
        add_breadcrumb: Optional[Callable[..., Any]] = None,
    ) -> Dict[str, Any]:
        """
        Escalate one turn.

        Returns:
            {"nextResponse": text} on success, otherwise
            {"error": "Something went wrong.", "reason": ...}
        """
        add_breadcrumb = add_breadcrumb or (lambda title, data=None: None)
        body = self.build_request(history, context_text)

        try:
            text = await asyncio.wait_for(self._loop(body, add_breadcrumb), self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Supervisor escalation timed out after {self.timeout}s")
            return {"error": SUPERVISOR_ERROR_MESSAGE, "reason": "timeout"}
        except EscalationExhausted as e:
            logger.error(str(e))
            return {"error": SUPERVISOR_ERROR_MESSAGE, "reason": e.reason}
        except TransportError as e:
            logger.error(f"Supervisor request failed: {e}")
            return {"error": SUPERVISOR_ERROR_MESSAGE, "reason": "transport"}
        except Exception as e:
            logger.error(f"Supervisor escalation failed: {e}", exc_info=True)
            return {"error": SUPERVISOR_ERROR_MESSAGE, "reason": "internal"}

        return {"nextResponse": text}


def make_supervisor_tool(escalation: SupervisorEscalation) -> ToolDefinition:
    """Front-agent tool that forwards the turn to the supervisor."""

    async def get_next_response(params: SupervisorRequestArguments, context: ToolContext) -> Dict[str, Any]:
        return await escalation.run(context.history, params.relevant_context, context.add_breadcrumb)

    return ToolDefinition(
        name=SUPERVISOR_TOOL_NAME,
        description=(
            "Determines the next response whenever the agent faces a non-trivial decision, "
            "produced by a highly intelligent supervisor agent. Returns a message describing "
            "what to do next."
        ),
        parameters=SupervisorRequestArguments,
        execute=get_next_response,
    )
