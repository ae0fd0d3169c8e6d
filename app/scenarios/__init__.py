"""
Agent sets selectable per session.

- chat_supervisor: front agent plus supervisor escalation (default)
- simple_handoff: greeter handing off to a specialist, built from descriptors
- customer_service_retail: full mesh of four agents
- material_ordering: order validation and emergency procurement
- intelligent_material_ordering: catalog-driven ordering with a session cart
- registry: scenario lookup and graph construction
"""
