import asyncio
from typing import Optional

import pytest
from pydantic import Field
from unittest.mock import MagicMock

from app.agents.tools import (
    ToolArguments,
    ToolContext,
    ToolDefinition,
    ToolExecutor,
    parse_arguments,
)
from app.errors import ToolValidationError


class LookupArguments(ToolArguments):
    company_name: str = Field(..., description="Company name")
    zip_code: Optional[str] = None


class NoteArguments(ToolArguments):
    allow_blank = frozenset({"note"})

    note: str


def make_executor(execute):
    return ToolExecutor(
        [
            ToolDefinition(
                name="lookup",
                description="Look up an account",
                parameters=LookupArguments,
                execute=execute,
            ),
            ToolDefinition(
                name="note",
                description="Record a note",
                parameters=NoteArguments,
                execute=lambda params, context: {"note": params.note},
            ),
        ]
    )


@pytest.mark.asyncio
class TestToolExecutor:

    async def test_valid_call_runs_tool_with_validated_params(self):
        seen = {}

        def execute(params, context):
            seen["params"] = params
            return {"company": params.company_name}

        result = await make_executor(execute).execute(
            "lookup", '{"company_name": "Smith Electrical"}', ToolContext()
        )

        assert result.ok is True
        assert result.output == {"company": "Smith Electrical"}
        assert isinstance(seen["params"], LookupArguments)

    async def test_async_tool_is_awaited(self):
        async def execute(params, context):
            await asyncio.sleep(0)
            return {"async": True}

        result = await make_executor(execute).execute("lookup", {"company_name": "Acme"}, ToolContext())
        assert result.output == {"async": True}

    @pytest.mark.parametrize("value", ["", "REQUIRED", "null", "N/A", "  none  "])
    async def test_placeholder_values_are_rejected_without_running_the_tool(self, value):
        execute = MagicMock()

        result = await make_executor(execute).execute(
            "lookup", {"company_name": value}, ToolContext()
        )

        assert result.ok is False
        assert result.output["error"] == "Invalid arguments for lookup"
        assert result.output["details"][0]["field"] == "company_name"
        execute.assert_not_called()

    async def test_missing_required_field_is_a_validation_error(self):
        execute = MagicMock()
        result = await make_executor(execute).execute("lookup", "{}", ToolContext())

        assert result.ok is False
        assert "details" in result.output
        execute.assert_not_called()

    async def test_unknown_field_is_rejected(self):
        execute = MagicMock()
        result = await make_executor(execute).execute(
            "lookup", {"company_name": "Acme", "extra": 1}, ToolContext()
        )
        assert result.ok is False
        execute.assert_not_called()

    async def test_allow_blank_field_accepts_empty_string(self):
        result = await make_executor(MagicMock()).execute("note", {"note": ""}, ToolContext())
        assert result.ok is True
        assert result.output == {"note": ""}

    async def test_malformed_json_becomes_error_payload(self):
        result = await make_executor(MagicMock()).execute("lookup", "{not json", ToolContext())
        assert result.ok is False
        assert result.output["error"].startswith("Malformed arguments for lookup")

    async def test_unknown_tool_becomes_error_payload(self):
        result = await make_executor(MagicMock()).execute("nope", "{}", ToolContext())
        assert result.ok is False
        assert result.output == {"error": "Unknown tool: nope"}

    async def test_tool_exception_becomes_error_payload(self):
        def execute(params, context):
            raise RuntimeError("boom")

        result = await make_executor(execute).execute("lookup", {"company_name": "Acme"}, ToolContext())
        assert result.ok is False
        assert result.output == {"error": "Tool lookup failed"}

    async def test_tool_raising_tool_validation_error(self):
        def execute(params, context):
            raise ToolValidationError("lookup", [{"field": "zip_code", "message": "unknown zip"}])

        result = await make_executor(execute).execute("lookup", {"company_name": "Acme"}, ToolContext())
        assert result.output == {
            "error": "Invalid arguments for lookup",
            "details": [{"field": "zip_code", "message": "unknown zip"}],
        }

    async def test_context_exposes_session_data(self):
        def execute(params, context):
            context.data["seen"] = params.company_name
            context.add_breadcrumb("looked up", {"company": params.company_name})
            return len(context.history)

        breadcrumbs = MagicMock()
        context = ToolContext(history=[{"type": "message"}], data={}, add_breadcrumb=breadcrumbs)
        result = await make_executor(execute).execute("lookup", {"company_name": "Acme"}, context)

        assert result.output == 1
        assert context.data["seen"] == "Acme"
        breadcrumbs.assert_called_once_with("looked up", {"company": "Acme"})


class TestToolDefinitions:

    def test_schema_uses_argument_model(self):
        tool = ToolDefinition(
            name="lookup", description="Look up", parameters=LookupArguments, execute=lambda p, c: None
        )
        schema = tool.to_schema()

        assert schema["type"] == "function"
        assert schema["name"] == "lookup"
        assert schema["parameters"]["required"] == ["company_name"]
        assert "zip_code" in schema["parameters"]["properties"]

    def test_parse_arguments(self):
        assert parse_arguments(None) == {}
        assert parse_arguments("") == {}
        assert parse_arguments({"a": 1}) == {"a": 1}
        assert parse_arguments('{"a": 1}') == {"a": 1}
        with pytest.raises(ValueError):
            parse_arguments("[1, 2]")
