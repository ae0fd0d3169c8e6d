"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the application,
providing a centralized location for configuration values and making it easier to
maintain consistent naming throughout the codebase. Values that operators may need to
change per deployment are read from the environment.
"""

import os

# Logger name used throughout the application
LOGGER_NAME = "realtime_agents"

# Upstream service
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
DEFAULT_REALTIME_MODEL = os.getenv(
    "OPENAI_REALTIME_MODEL", "gpt-4o-realtime-preview-2025-06-03"
)
DEFAULT_TRANSCRIPTION_MODEL = "gpt-4o-mini-transcribe"
DEFAULT_VOICE = "alloy"
UPSTREAM_TIMEOUT = float(os.getenv("UPSTREAM_TIMEOUT", "30"))

# Supervisor escalation
SUPERVISOR_MODEL = os.getenv("SUPERVISOR_MODEL", "gpt-4.1")
SUPERVISOR_MAX_ITERATIONS = int(os.getenv("SUPERVISOR_MAX_ITERATIONS", "8"))
SUPERVISOR_TIMEOUT = float(os.getenv("SUPERVISOR_TIMEOUT", "60"))
SUPERVISOR_ERROR_MESSAGE = "Something went wrong."

# Guardrails
GUARDRAIL_MODEL = os.getenv("GUARDRAIL_MODEL", "gpt-4o-mini")
GUARDRAIL_TIMEOUT = float(os.getenv("GUARDRAIL_TIMEOUT", "15"))
GUARDRAIL_FAIL_OPEN = os.getenv("GUARDRAIL_FAIL_OPEN", "true").lower() in ("1", "true", "yes")
DEFAULT_GUARDRAIL_COMPANY_NAME = "newTelco"

# Transcript placeholders
INAUDIBLE_PLACEHOLDER = "[inaudible]"
TRANSCRIBING_PLACEHOLDER = "[Transcribing...]"
GUARDRAIL_BREADCRUMB_TITLE = "Output Guardrail Active"

# Item statuses after which the transport sends no more text for the item
TERMINAL_ITEM_STATUSES = ("completed", "incomplete", "cancelled")

# Greeting injected when a session connects
SIMULATED_GREETING_TEXT = "hi"

# Automatic (server VAD) turn detection; push-to-talk mode sends None instead
SERVER_VAD_TURN_DETECTION = {
    "type": "server_vad",
    "threshold": 0.9,
    "prefix_padding_ms": 300,
    "silence_duration_ms": 500,
    "create_response": True,
}

# Canonical inbound event types
EVENT_HISTORY_ADDED = "history_added"
EVENT_HISTORY_UPDATED = "history_updated"
EVENT_TRANSCRIPTION_DELTA = "transcription_delta"
EVENT_TRANSCRIPTION_COMPLETED = "transcription_completed"
EVENT_FUNCTION_CALL = "function_call"
EVENT_AGENT_TOOL_START = "agent_tool_start"
EVENT_AGENT_TOOL_END = "agent_tool_end"
EVENT_AGENT_HANDOFF = "agent_handoff"
EVENT_GUARDRAIL_TRIPPED = "guardrail_tripped"

# Raw realtime event names accepted as aliases of the canonical types
EVENT_ALIASES = {
    "conversation.item.created": EVENT_HISTORY_ADDED,
    "response.audio_transcript.delta": EVENT_TRANSCRIPTION_DELTA,
    "conversation.item.input_audio_transcription.completed": EVENT_TRANSCRIPTION_COMPLETED,
    "response.audio_transcript.done": EVENT_TRANSCRIPTION_COMPLETED,
    "response.function_call_arguments.done": EVENT_FUNCTION_CALL,
}

# Control messages sent by the browser over the session socket
CONTROL_USER_TEXT = "user_text"
CONTROL_PUSH_TO_TALK = "push_to_talk"
CONTROL_PUSH_TO_TALK_START = "push_to_talk_start"
CONTROL_PUSH_TO_TALK_STOP = "push_to_talk_stop"
CONTROL_INTERRUPT = "interrupt"
CONTROL_MUTE = "mute"
CONTROL_DISCONNECT = "disconnect"

# Server-to-client frame carrying the visible transcript
TRANSCRIPT_SNAPSHOT = "transcript.snapshot"
