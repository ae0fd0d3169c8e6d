"""
Models module for session state and wire formats.

Key components:
- transcript: TranscriptStore, the reconciled view of the conversation
- event_log: EventLog, the raw record of protocol traffic
- realtime_schemas: pydantic models for relayed events and outbound commands
- guardrail_schemas: moderation categories, verdicts and annotations
- conversation: SessionRegistry tracking live sessions

Usage examples:
```python
from app.models.transcript import TranscriptStore
from app.models.realtime_schemas import MessageRole

transcript = TranscriptStore()
transcript.insert_message("item_1", MessageRole.USER)
transcript.append_delta("item_1", "I need copper pipe")
transcript.finalize("item_1")
```
"""
