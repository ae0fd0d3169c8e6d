"""
Configuration for the realtime agents service.

- constants: logger name, upstream models and endpoints, escalation and guardrail
  bounds, transcript placeholders and the event/command vocabulary of the session socket.
- logging_config: console plus rotating file logging for the application logger.
"""
