import pytest

from app.agents.graph import AgentDefinition, AgentDescriptor, AgentGraph
from app.agents.tools import ToolArguments, ToolDefinition
from app.errors import ConfigurationError


class EmptyArguments(ToolArguments):
    pass


def tool(name):
    return ToolDefinition(
        name=name, description=name, parameters=EmptyArguments, execute=lambda p, c: {"tool": name}
    )


def agent(name, handoffs=None, tools=None, **kwargs):
    return AgentDefinition(
        name=name, instructions=f"You are {name}", handoffs=handoffs or [], tools=tools or [], **kwargs
    )


class TestAgentGraphConstruction:

    def test_valid_graph_with_cycle(self):
        graph = AgentGraph([agent("a", ["b"]), agent("b", ["a"])])

        assert graph.names == ["a", "b"]
        assert graph.root.name == "a"
        assert graph.can_handoff("a", "b")
        assert graph.can_handoff("b", "a")

    def test_empty_agent_set_is_rejected(self):
        with pytest.raises(ConfigurationError):
            AgentGraph([])

    def test_duplicate_agent_names_are_rejected(self):
        with pytest.raises(ConfigurationError, match="Duplicate agent name"):
            AgentGraph([agent("a"), agent("a")])

    def test_unknown_handoff_target_is_rejected(self):
        with pytest.raises(ConfigurationError, match="unknown agent: ghost"):
            AgentGraph([agent("a", ["ghost"])])

    def test_self_handoff_is_rejected(self):
        with pytest.raises(ConfigurationError):
            AgentGraph([agent("a", ["a"])])

    def test_duplicate_tool_names_are_rejected(self):
        with pytest.raises(ConfigurationError, match="tool name twice"):
            AgentGraph([agent("a", tools=[tool("x"), tool("x")])])

    def test_tool_clashing_with_handoff_is_rejected(self):
        with pytest.raises(ConfigurationError, match="clashing"):
            AgentGraph([agent("a", ["b"], tools=[tool("transfer_to_b")]), agent("b")])

    def test_unknown_agent_lookup_raises(self):
        graph = AgentGraph([agent("a")])
        with pytest.raises(ConfigurationError):
            graph["missing"]


class TestHandoffs:

    def setup_method(self):
        self.graph = AgentGraph(
            [
                agent("greeter", ["specialist"], tools=[tool("lookup")]),
                agent("specialist", handoff_description="Knows procurement"),
            ]
        )

    def test_handoff_is_directed(self):
        assert self.graph.can_handoff("greeter", "specialist")
        assert not self.graph.can_handoff("specialist", "greeter")

    def test_resolve_handoff_uses_structured_mapping(self):
        assert self.graph.resolve_handoff("greeter", "transfer_to_specialist") == "specialist"
        assert self.graph.resolve_handoff("greeter", "lookup") is None
        assert self.graph.resolve_handoff("specialist", "transfer_to_specialist") is None

    def test_tool_schemas_include_handoff_tools(self):
        schemas = self.graph.tool_schemas("greeter")
        names = [schema["name"] for schema in schemas]

        assert names == ["lookup", "transfer_to_specialist"]
        assert schemas[1]["description"] == "Knows procurement"

    def test_executor_is_cached_per_agent(self):
        assert self.graph.executor_for("greeter") is self.graph.executor_for("greeter")
        assert "lookup" in self.graph.executor_for("greeter")

    def test_with_entry_point_returns_new_graph(self):
        rerooted = self.graph.with_entry_point("specialist")

        assert rerooted.root.name == "specialist"
        assert self.graph.root.name == "greeter"
        assert self.graph.with_entry_point(None) is self.graph

    def test_snapshot(self):
        snapshot = self.graph["greeter"].snapshot()
        assert snapshot["tools"] == ["lookup"]
        assert snapshot["handoffs"] == ["specialist"]


class TestFromDescriptors:

    def test_descriptors_reference_tools_by_name(self):
        graph = AgentGraph.from_descriptors(
            [
                {"name": "a", "instructions": "A", "tools": ["lookup"], "handoffs": ["b"]},
                AgentDescriptor(name="b", instructions="B", handoffDescription="B agent"),
            ],
            {"lookup": tool("lookup")},
        )

        assert [t.name for t in graph["a"].tools] == ["lookup"]
        assert graph["b"].handoff_description == "B agent"

    def test_unknown_tool_reference_is_rejected(self):
        with pytest.raises(ConfigurationError, match="unknown tools: missing"):
            AgentGraph.from_descriptors([{"name": "a", "instructions": "A", "tools": ["missing"]}], {})

    def test_malformed_descriptor_is_rejected(self):
        with pytest.raises(ConfigurationError, match="Invalid agent descriptor"):
            AgentGraph.from_descriptors([{"name": "a"}], {})
