"""
Agent building blocks.

- tools: argument models, tool definitions and the validating executor
- graph: agent descriptors and the validated handoff graph
- supervisor: escalation of a turn to a supervisor model
- guardrails: output moderation of finished assistant messages
"""
