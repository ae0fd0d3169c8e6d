"""
Agent descriptors and the validated handoff graph built from them.

An agent set is a list of AgentDefinition descriptors. AgentGraph checks the whole
set when it is built (unique names, every handoff target present, unique tool names
per agent) and raises ConfigurationError on the first problem, so a broken scenario
never reaches a live session.

Handoffs are exposed to the model as one function tool per permitted target. The
graph keeps a structured mapping from (source agent, tool name) to the target agent,
so resolving a handoff call is a lookup rather than a parse of the tool's name.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from app.agents.tools import ToolArguments, ToolDefinition, ToolExecutor
from app.config.constants import DEFAULT_VOICE, LOGGER_NAME
from app.errors import ConfigurationError

logger = logging.getLogger(LOGGER_NAME)

HANDOFF_TOOL_PREFIX = "transfer_to_"


class AgentDefinition(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    name: str = Field(..., min_length=1)
    voice: str = DEFAULT_VOICE
    instructions: str
    tools: List[ToolDefinition] = Field(default_factory=list)
    handoffs: List[str] = Field(default_factory=list)
    handoff_description: str = Field(default="", alias="handoffDescription")

    def snapshot(self) -> Dict[str, Any]:
        """Static configuration recorded in the Agent breadcrumb."""
        return {
            "name": self.name,
            "voice": self.voice,
            "instructions": self.instructions,
            "tools": [tool.name for tool in self.tools],
            "handoffs": list(self.handoffs),
            "handoffDescription": self.handoff_description,
        }


class AgentDescriptor(BaseModel):
    """Serializable form of an agent, with tools referenced by name."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    voice: str = DEFAULT_VOICE
    instructions: str
    tools: List[str] = Field(default_factory=list)
    handoffs: List[str] = Field(default_factory=list)
    handoff_description: str = Field(default="", alias="handoffDescription")


class HandoffArguments(ToolArguments):
    model_config = ConfigDict(extra="ignore")


class HandoffTool(BaseModel):
    name: str
    source: str
    target: str
    description: str

    def to_schema(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "name": self.name,
            "description": self.description,
            "parameters": HandoffArguments.model_json_schema(),
        }


class AgentGraph:
    """
    Immutable, validated set of agents for one scenario.

    The first agent is the session's entry point. Cycles are allowed.
    """

    def __init__(self, agents: Sequence[AgentDefinition]):
        if not agents:
            raise ConfigurationError("An agent set needs at least one agent")

        self._agents: Dict[str, AgentDefinition] = {}
        for agent in agents:
            if agent.name in self._agents:
                raise ConfigurationError(f"Duplicate agent name: {agent.name}")
            self._agents[agent.name] = agent

        self._handoff_tools: Dict[str, Dict[str, HandoffTool]] = {}
        for agent in agents:
            tool_names = [tool.name for tool in agent.tools]
            if len(set(tool_names)) != len(tool_names):
                raise ConfigurationError(f"Agent {agent.name} declares a tool name twice")

            routes: Dict[str, HandoffTool] = {}
            for target in agent.handoffs:
                if target not in self._agents:
                    raise ConfigurationError(
                        f"Agent {agent.name} hands off to unknown agent: {target}"
                    )
                if target == agent.name:
                    raise ConfigurationError(f"Agent {agent.name} cannot hand off to itself")
                tool = HandoffTool(
                    name=f"{HANDOFF_TOOL_PREFIX}{target}",
                    source=agent.name,
                    target=target,
                    description=self._agents[target].handoff_description
                    or f"Transfer the conversation to the {target} agent.",
                )
                if tool.name in tool_names or tool.name in routes:
                    raise ConfigurationError(
                        f"Agent {agent.name} has a tool clashing with handoff {tool.name}"
                    )
                routes[tool.name] = tool
            self._handoff_tools[agent.name] = routes

        self._executors: Dict[str, ToolExecutor] = {}

    @classmethod
    def from_descriptors(
        cls,
        descriptors: Iterable[Any],
        tool_registry: Mapping[str, ToolDefinition],
    ) -> "AgentGraph":
        """
        Build a graph from plain descriptors (dicts or AgentDescriptor).

        Raises:
            ConfigurationError: If a descriptor is malformed or names an unknown tool
        """
        agents = []
        for raw in descriptors:
            try:
                descriptor = (
                    raw if isinstance(raw, AgentDescriptor) else AgentDescriptor.model_validate(raw)
                )
            except ValueError as e:
                raise ConfigurationError(f"Invalid agent descriptor: {e}") from e

            missing = [name for name in descriptor.tools if name not in tool_registry]
            if missing:
                raise ConfigurationError(
                    f"Agent {descriptor.name} references unknown tools: {', '.join(missing)}"
                )
            agents.append(
                AgentDefinition(
                    name=descriptor.name,
                    voice=descriptor.voice,
                    instructions=descriptor.instructions,
                    tools=[tool_registry[name] for name in descriptor.tools],
                    handoffs=descriptor.handoffs,
                    handoff_description=descriptor.handoff_description,
                )
            )
        return cls(agents)

    def __contains__(self, name: str) -> bool:
        return name in self._agents

    def __getitem__(self, name: str) -> AgentDefinition:
        try:
            return self._agents[name]
        except KeyError:
            raise ConfigurationError(f"Unknown agent: {name}") from None

    def __len__(self) -> int:
        return len(self._agents)

    @property
    def agents(self) -> List[AgentDefinition]:
        return list(self._agents.values())

    @property
    def names(self) -> List[str]:
        return list(self._agents)

    @property
    def root(self) -> AgentDefinition:
        return next(iter(self._agents.values()))

    def with_entry_point(self, name: Optional[str]) -> "AgentGraph":
        """Return a graph whose root is `name`; this graph is left untouched."""
        if not name or name == self.root.name:
            return self
        selected = self[name]
        ordered = [selected] + [agent for agent in self._agents.values() if agent.name != name]
        return AgentGraph(ordered)

    def can_handoff(self, source: str, target: str) -> bool:
        return any(tool.target == target for tool in self._handoff_tools.get(source, {}).values())

    def handoff_tools(self, agent_name: str) -> List[HandoffTool]:
        return list(self._handoff_tools.get(agent_name, {}).values())

    def resolve_handoff(self, agent_name: str, tool_name: str) -> Optional[str]:
        """Target agent for a handoff tool call, or None if it is not a handoff."""
        tool = self._handoff_tools.get(agent_name, {}).get(tool_name)
        return tool.target if tool else None

    def tool_schemas(self, agent_name: str) -> List[Dict[str, Any]]:
        agent = self[agent_name]
        return [tool.to_schema() for tool in agent.tools] + [
            tool.to_schema() for tool in self.handoff_tools(agent_name)
        ]

    def executor_for(self, agent_name: str) -> ToolExecutor:
        if agent_name not in self._executors:
            self._executors[agent_name] = ToolExecutor(self[agent_name].tools)
        return self._executors[agent_name]
