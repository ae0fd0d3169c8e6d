"""
Handlers that reconcile realtime transport events into a session's transcript.

Each handler takes the raw event dict and the RealtimeSession it belongs to. The
session has already recorded the raw event in its event log before a handler runs,
so a handler that drops an event (invalid payload, unknown item id) only logs why.
"""

import json
import logging
from typing import TYPE_CHECKING, Any, Dict

from pydantic import ValidationError

from app.config.constants import GUARDRAIL_BREADCRUMB_TITLE, LOGGER_NAME, TERMINAL_ITEM_STATUSES
from app.errors import OrderingError
from app.models.guardrail_schemas import GuardrailResult
from app.models.realtime_schemas import (
    AgentHandoffEvent,
    AgentToolEvent,
    FunctionCallEvent,
    GuardrailTrippedEvent,
    HistoryAddedEvent,
    HistoryUpdatedEvent,
    ItemStatus,
    MessageKind,
    MessageRole,
    TranscriptionCompletedEvent,
    TranscriptionDeltaEvent,
)

if TYPE_CHECKING:
    from app.session.realtime_session import RealtimeSession

logger = logging.getLogger(LOGGER_NAME)


def _decode(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def _complete_assistant_message(session: "RealtimeSession", item_id: str) -> None:
    entry = session.transcript.get(item_id)
    if entry is None or entry.role != MessageRole.ASSISTANT:
        return
    if entry.status != ItemStatus.DONE:
        session.transcript.finalize(item_id)
    session.submit_guardrail(item_id)


async def handle_history_added(event: Dict[str, Any], session: "RealtimeSession") -> None:
    """
    Insert a new conversation item.

    Corrective messages injected after a guardrail trip become a single
    breadcrumb instead of a transcript message. Assistant messages start with
    a pending guardrail result when guardrails are enabled.
    """
    try:
        item = HistoryAddedEvent(**event).item
    except ValidationError as e:
        logger.error(f"Invalid history_added event: {e}")
        return

    if item.type != "message" or item.role is None:
        return

    kind = item.message_kind or session.message_kind_for(item.item_id)
    if kind == MessageKind.SYSTEM_CORRECTIVE:
        if session.claim_corrective(item.item_id):
            details = session.corrective_details(item.item_id) or {"text": item.text()}
            session.add_breadcrumb(GUARDRAIL_BREADCRUMB_TITLE, {"details": details})
        return

    pending = None
    if item.role == MessageRole.ASSISTANT and session.guardrails_enabled:
        pending = GuardrailResult(status=ItemStatus.IN_PROGRESS)

    session.transcript.insert_message(
        item.item_id,
        item.role,
        item.text(),
        hidden=session.is_hidden_item(item.item_id),
        message_kind=kind,
        guardrail_result=pending,
    )

    if item.status in TERMINAL_ITEM_STATUSES:
        _complete_assistant_message(session, item.item_id)


async def handle_history_updated(event: Dict[str, Any], session: "RealtimeSession") -> None:
    try:
        items = HistoryUpdatedEvent(**event).items
    except ValidationError as e:
        logger.error(f"Invalid history_updated event: {e}")
        return

    for item in items:
        if item.type != "message":
            continue
        kind = item.message_kind or session.message_kind_for(item.item_id)
        if kind == MessageKind.SYSTEM_CORRECTIVE:
            continue

        text = item.text()
        if text:
            try:
                session.transcript.replace_text(item.item_id, text)
            except OrderingError as e:
                logger.warning(f"{e}; update dropped")
                continue

        # An interrupted reply ends as incomplete with no transcript done event
        if item.status in TERMINAL_ITEM_STATUSES:
            _complete_assistant_message(session, item.item_id)


async def handle_transcription_delta(event: Dict[str, Any], session: "RealtimeSession") -> None:
    try:
        delta = TranscriptionDeltaEvent(**event)
    except ValidationError as e:
        logger.error(f"Invalid transcription delta: {e}")
        return

    try:
        session.transcript.append_delta(delta.item_id, delta.delta)
    except OrderingError as e:
        logger.warning(f"{e}; delta dropped")


async def handle_transcription_completed(event: Dict[str, Any], session: "RealtimeSession") -> None:
    try:
        completed = TranscriptionCompletedEvent(**event)
    except ValidationError as e:
        logger.error(f"Invalid transcription completion: {e}")
        return

    try:
        session.transcript.finalize(completed.item_id, completed.transcript or "")
    except OrderingError as e:
        logger.warning(f"{e}; completion dropped")
        return

    _complete_assistant_message(session, completed.item_id)


async def handle_function_call(event: Dict[str, Any], session: "RealtimeSession") -> None:
    try:
        call = FunctionCallEvent(**event)
    except ValidationError as e:
        logger.error(f"Invalid function call event: {e}")
        return
    session.start_function_call(call)


async def handle_agent_tool_start(event: Dict[str, Any], session: "RealtimeSession") -> None:
    try:
        tool_event = AgentToolEvent(**event)
    except ValidationError as e:
        logger.error(f"Invalid agent_tool_start event: {e}")
        return
    call = tool_event.function_call
    session.add_breadcrumb(f"function call: {call.name}", _decode(call.arguments))


async def handle_agent_tool_end(event: Dict[str, Any], session: "RealtimeSession") -> None:
    try:
        tool_event = AgentToolEvent(**event)
    except ValidationError as e:
        logger.error(f"Invalid agent_tool_end event: {e}")
        return
    session.add_breadcrumb(
        f"function call result: {tool_event.function_call.name}", _decode(tool_event.result)
    )


async def handle_agent_handoff(event: Dict[str, Any], session: "RealtimeSession") -> None:
    try:
        handoff = AgentHandoffEvent(**event)
    except ValidationError as e:
        logger.error(f"Invalid agent_handoff event: {e}")
        return
    await session.switch_agent(handoff.target_agent, source=handoff.source_agent)


async def handle_guardrail_tripped(event: Dict[str, Any], session: "RealtimeSession") -> None:
    """Annotate the offending assistant message with a trip reported by the transport."""
    try:
        tripped = GuardrailTrippedEvent(**event)
    except ValidationError as e:
        logger.error(f"Invalid guardrail_tripped event: {e}")
        return
    output_info = tripped.guardrail_outcome or tripped.details
    await session.apply_guardrail_trip(output_info, item_id=tripped.item_id, send_correction=False)
