"""
Handlers for relayed realtime events.

Key components:
- history_handlers: apply history, transcription, function call, handoff and
  guardrail events to a RealtimeSession's transcript

Each handler takes the raw event dict and the session. The session records the
event in its event log before dispatching, so handlers only mutate the transcript.
"""
