"""
Tool definitions and the executor that validates and runs them.

Each tool declares its parameters as a ToolArguments model. The executor parses the
raw JSON arguments the model produced, validates them against that model and only
then calls the tool. Any failure (unknown tool, malformed JSON, schema violation,
an exception inside the tool) comes back as an error payload for the agent to read,
never as an exception.
"""

import asyncio
import inspect
import json
import logging
from typing import Any, Callable, ClassVar, Dict, FrozenSet, Iterable, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator

from app.config.constants import LOGGER_NAME
from app.errors import ToolValidationError

logger = logging.getLogger(LOGGER_NAME)

# Values a model tends to emit when it has not actually collected a field
PLACEHOLDER_VALUES = frozenset({"", "required", "null", "none", "undefined", "n/a", "placeholder"})


class ToolArguments(BaseModel):
    """
    Base class for tool parameter models.

    Unknown fields are rejected, and so are string fields holding an empty or
    placeholder value, unless the field is listed in allow_blank.
    """
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    allow_blank: ClassVar[FrozenSet[str]] = frozenset()

    @field_validator("*")
    @classmethod
    def reject_placeholders(cls, value: Any, info: ValidationInfo) -> Any:
        if (
            isinstance(value, str)
            and info.field_name not in cls.allow_blank
            and value.strip().lower() in PLACEHOLDER_VALUES
        ):
            raise ValueError("a real value is required, not an empty or placeholder value")
        return value


class ToolContext:
    """
    What a running tool can see of the session.

    Attributes:
        history: Conversation history items, oldest first
        data: Session-scoped key/value state shared by the session's tools
        add_breadcrumb: Callback recording an orchestration breadcrumb
    """

    def __init__(
        self,
        history: Optional[List[Dict[str, Any]]] = None,
        data: Optional[Dict[str, Any]] = None,
        add_breadcrumb: Optional[Callable[..., Any]] = None,
    ):
        self.history = history if history is not None else []
        self.data = data if data is not None else {}
        self.add_breadcrumb = add_breadcrumb or (lambda title, data=None: None)


ToolFunc = Callable[[Any, ToolContext], Any]


class ToolDefinition(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    parameters: Type[ToolArguments]
    execute: ToolFunc

    def to_schema(self) -> Dict[str, Any]:
        """Function descriptor in the shape the realtime and Responses APIs expect."""
        return {
            "type": "function",
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters.model_json_schema(),
        }


class ToolResult(BaseModel):
    name: str
    ok: bool
    output: Any = None


def parse_arguments(arguments: Union[str, Dict[str, Any], None]) -> Dict[str, Any]:
    """Decode tool arguments, accepting an already-decoded dict or an empty value."""
    if arguments is None or arguments == "":
        return {}
    if isinstance(arguments, dict):
        return arguments
    decoded = json.loads(arguments)
    if not isinstance(decoded, dict):
        raise ValueError("tool arguments must be a JSON object")
    return decoded


def _error_details(error: ValidationError) -> List[Dict[str, Any]]:
    return [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in error.errors()
    ]


class ToolExecutor:
    """Runs the tools of one agent by name."""

    def __init__(self, tools: Iterable[ToolDefinition]):
        self._tools: Dict[str, ToolDefinition] = {tool.name: tool for tool in tools}

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    async def execute(
        self,
        name: str,
        arguments: Union[str, Dict[str, Any], None],
        context: ToolContext,
    ) -> ToolResult:
        """
        Validate arguments and run a tool.

        Args:
            name: Tool name as called by the model
            arguments: JSON string or dict of arguments
            context: Session view handed to the tool

        Returns:
            ToolResult whose output is the tool's return value, or an
            {"error": ...} payload when ok is False
        """
        tool = self._tools.get(name)
        if tool is None:
            logger.warning(f"Call to unknown tool: {name}")
            return ToolResult(name=name, ok=False, output={"error": f"Unknown tool: {name}"})

        try:
            raw = parse_arguments(arguments)
        except ValueError as e:
            logger.warning(f"Malformed arguments for tool {name}: {e}")
            return ToolResult(
                name=name, ok=False, output={"error": f"Malformed arguments for {name}: {e}"}
            )

        try:
            params = tool.parameters.model_validate(raw)
        except ValidationError as e:
            error = ToolValidationError(name, _error_details(e))
            logger.warning(f"{error}: {error.details}")
            return ToolResult(name=name, ok=False, output=error.to_payload())

        try:
            result = tool.execute(params, context)
            if inspect.isawaitable(result):
                result = await result
        except asyncio.CancelledError:
            raise
        except ToolValidationError as e:
            logger.warning(f"{e}: {e.details}")
            return ToolResult(name=name, ok=False, output=e.to_payload())
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}", exc_info=True)
            return ToolResult(name=name, ok=False, output={"error": f"Tool {name} failed"})

        return ToolResult(name=name, ok=True, output=result)
