"""
Pydantic models for the realtime event stream relayed over the session socket.

Inbound models validate the events the transport emits (history items, transcription
deltas and completions, function calls, handoffs, guardrail trips). Outbound models
are the commands the session sends back (session.update, conversation.item.create,
response.create and the audio buffer commands).
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    """Role of a conversational message."""
    USER = "user"
    ASSISTANT = "assistant"


class MessageKind(str, Enum):
    """Origin of a message, fixed when the message is created."""
    USER = "USER"
    ASSISTANT = "ASSISTANT"
    SYSTEM_CORRECTIVE = "SYSTEM_CORRECTIVE"


class ItemStatus(str, Enum):
    """Lifecycle status shared by transcript entries and guardrail results."""
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class ContentPart(BaseModel):
    """One part of a history item's content."""
    model_config = ConfigDict(extra="allow")

    type: str
    text: Optional[str] = None
    transcript: Optional[str] = None


class HistoryItem(BaseModel):
    """A conversation history item as reported by the transport."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    item_id: str = Field(
        ...,
        validation_alias=AliasChoices("itemId", "item_id", "id"),
        serialization_alias="itemId",
    )
    type: str = "message"
    role: Optional[MessageRole] = None
    status: Optional[str] = None
    content: List[ContentPart] = Field(default_factory=list)
    name: Optional[str] = None
    message_kind: Optional[MessageKind] = Field(default=None, alias="messageKind")

    def text(self) -> str:
        """Join typed text and audio transcripts, one part per line."""
        parts = []
        for part in self.content:
            if part.type in ("input_text", "text", "output_text") and part.text:
                parts.append(part.text)
            elif part.type in ("audio", "input_audio", "output_audio") and part.transcript:
                parts.append(part.transcript)
        return "\n".join(parts)


class HistoryAddedEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = "history_added"
    item: HistoryItem


class HistoryUpdatedEvent(BaseModel):
    type: Literal["history_updated"] = "history_updated"
    items: List[HistoryItem] = Field(default_factory=list)


class TranscriptionDeltaEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    item_id: str
    delta: str = ""


class TranscriptionCompletedEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    item_id: str
    transcript: Optional[str] = ""


class FunctionCallEvent(BaseModel):
    """A function call emitted by the active agent that this server must execute."""
    model_config = ConfigDict(extra="allow")

    type: str
    call_id: str
    name: str
    arguments: str = "{}"
    item_id: Optional[str] = None


class FunctionCallInfo(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    arguments: Any = None
    call_id: Optional[str] = Field(default=None, alias="callId")


class AgentToolEvent(BaseModel):
    """Brackets a tool execution that ran outside this server."""
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["agent_tool_start", "agent_tool_end"]
    agent: Optional[Any] = None
    function_call: FunctionCallInfo = Field(..., alias="functionCall")
    result: Optional[Any] = None


class AgentHandoffEvent(BaseModel):
    """Typed handoff: the target agent is named explicitly."""
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["agent_handoff"] = "agent_handoff"
    target_agent: str = Field(..., alias="targetAgent", min_length=1)
    source_agent: Optional[str] = Field(default=None, alias="sourceAgent")


class GuardrailTrippedEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["guardrail_tripped"] = "guardrail_tripped"
    details: Dict[str, Any] = Field(default_factory=dict)
    agent: Optional[Any] = None
    guardrail_outcome: Dict[str, Any] = Field(default_factory=dict, alias="guardrailOutcome")
    item_id: Optional[str] = Field(default=None, alias="itemId")


# Control messages from the browser


class UserTextMessage(BaseModel):
    type: Literal["user_text"] = "user_text"
    text: str = Field(..., min_length=1)


class PushToTalkMessage(BaseModel):
    type: Literal["push_to_talk"] = "push_to_talk"
    enabled: bool


class MuteMessage(BaseModel):
    type: Literal["mute"] = "mute"
    muted: bool


# Outbound commands


class SessionUpdateCommand(BaseModel):
    type: Literal["session.update"] = "session.update"
    session: Dict[str, Any]


class ConversationItemCreateCommand(BaseModel):
    type: Literal["conversation.item.create"] = "conversation.item.create"
    item: Dict[str, Any]


class ResponseCreateCommand(BaseModel):
    type: Literal["response.create"] = "response.create"


class ResponseCancelCommand(BaseModel):
    type: Literal["response.cancel"] = "response.cancel"


class InputAudioBufferClearCommand(BaseModel):
    type: Literal["input_audio_buffer.clear"] = "input_audio_buffer.clear"


class InputAudioBufferCommitCommand(BaseModel):
    type: Literal["input_audio_buffer.commit"] = "input_audio_buffer.commit"
