"""
Registry of selectable agent sets.

Selecting a scenario builds and validates its AgentGraph. Unknown scenario keys and
unknown entry agents raise ConfigurationError instead of falling back to a default.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from app.agents.graph import AgentGraph
from app.config.constants import LOGGER_NAME
from app.errors import ConfigurationError
from app.scenarios import (
    chat_supervisor,
    customer_service_retail,
    intelligent_material_ordering,
    material_ordering,
    simple_handoff,
)

logger = logging.getLogger(LOGGER_NAME)

DEFAULT_AGENT_SET_KEY = "chatSupervisor"


class ScenarioConfig(BaseModel):
    key: str
    title: str
    description: str
    company_name: str


SCENARIOS: Dict[str, ScenarioConfig] = {
    "simpleHandoff": ScenarioConfig(
        key="simpleHandoff",
        title="Simple Handoff",
        description="A greeter that hands contractors to a procurement specialist.",
        company_name=simple_handoff.COMPANY_NAME,
    ),
    "customerServiceRetail": ScenarioConfig(
        key="customerServiceRetail",
        title="Customer Service",
        description="Authentication, returns, sales and a simulated human in a full mesh.",
        company_name=customer_service_retail.COMPANY_NAME,
    ),
    "chatSupervisor": ScenarioConfig(
        key="chatSupervisor",
        title="Chat Supervisor",
        description="A fast front agent that escalates non-trivial turns to a supervisor model.",
        company_name=chat_supervisor.COMPANY_NAME,
    ),
    "materialOrdering": ScenarioConfig(
        key="materialOrdering",
        title="Material Ordering",
        description="Order validation, vendor availability and an emergency procurement desk.",
        company_name=material_ordering.COMPANY_NAME,
    ),
    "intelligentMaterialOrdering": ScenarioConfig(
        key="intelligentMaterialOrdering",
        title="Intelligent Material Ordering",
        description="Catalog-driven specification gathering with a session cart.",
        company_name=intelligent_material_ordering.COMPANY_NAME,
    ),
}

AgentSetBuilder = Callable[[Any], AgentGraph]

ALL_AGENT_SETS: Dict[str, AgentSetBuilder] = {
    "simpleHandoff": lambda client: AgentGraph.from_descriptors(simple_handoff.build_descriptors(), {}),
    "customerServiceRetail": lambda client: AgentGraph(customer_service_retail.build_agents()),
    "chatSupervisor": lambda client: AgentGraph(chat_supervisor.build_agents(client)),
    "materialOrdering": lambda client: AgentGraph(material_ordering.build_agents()),
    "intelligentMaterialOrdering": lambda client: AgentGraph(intelligent_material_ordering.build_agents()),
}


def get_scenario(key: Optional[str]) -> ScenarioConfig:
    key = key or DEFAULT_AGENT_SET_KEY
    if key not in SCENARIOS:
        raise ConfigurationError(f"Unknown agent set: {key}")
    return SCENARIOS[key]


def get_agent_set(key: Optional[str], client: Any, entry_agent: Optional[str] = None) -> AgentGraph:
    """
    Build the agent graph for a scenario.

    Args:
        key: Scenario key; the default scenario when empty
        client: Upstream client handed to agents that call out (the supervisor)
        entry_agent: Agent to start the session with instead of the first one

    Raises:
        ConfigurationError: If the key or the entry agent is unknown
    """
    scenario = get_scenario(key)
    graph = ALL_AGENT_SETS[scenario.key](client)
    if entry_agent and entry_agent not in graph:
        raise ConfigurationError(f"Agent {entry_agent} is not part of agent set {scenario.key}")
    logger.info(f"Selected agent set {scenario.key} with entry agent {entry_agent or graph.root.name}")
    return graph.with_entry_point(entry_agent)


def list_scenarios(client: Any = None) -> List[Dict[str, Any]]:
    listing = []
    for key, scenario in SCENARIOS.items():
        graph = ALL_AGENT_SETS[key](client)
        listing.append({**scenario.model_dump(), "agents": graph.names, "default": key == DEFAULT_AGENT_SET_KEY})
    return listing
