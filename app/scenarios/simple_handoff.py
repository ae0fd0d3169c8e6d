"""
Simple handoff scenario: a greeter that routes to one procurement specialist.

The agents are declared as plain descriptors and built through
AgentGraph.from_descriptors, the same path used for agent sets loaded from files.
"""

from typing import Any, Dict, List

from app.agents.graph import AgentDescriptor

COMPANY_NAME = "Kojo Technologies"

AGENT_DESCRIPTORS: List[Dict[str, Any]] = [
    {
        "name": "kojoGreeter",
        "voice": "alloy",
        "instructions": (
            "You are the first point of contact for Kojo Technologies. Greet contractors warmly "
            "and ask how you can help with their construction procurement needs today. Common "
            "requests include material sourcing, vendor management, order tracking, or platform "
            "support. If they need specialized procurement assistance, hand off to the "
            "'procurementSpecialist' agent."
        ),
        "tools": [],
        "handoffs": ["procurementSpecialist"],
        "handoffDescription": "Agent that greets contractors and routes to appropriate specialists",
    },
    {
        "name": "procurementSpecialist",
        "voice": "sage",
        "instructions": (
            "You are a procurement specialist at Kojo Technologies. Help contractors with material "
            "requests, vendor sourcing, and procurement workflow questions. Ask about their project "
            "type, materials needed, timeline, and budget to provide tailored assistance."
        ),
        "tools": [],
        "handoffs": [],
        "handoffDescription": "Specialist that helps with material procurement and vendor sourcing",
    },
]


def build_descriptors() -> List[AgentDescriptor]:
    return [AgentDescriptor.model_validate(raw) for raw in AGENT_DESCRIPTORS]
