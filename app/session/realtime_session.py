"""
Per-connection orchestration of a realtime agent session.

A RealtimeSession owns the transcript, the event log, the active agent and the
session-scoped tool state for one client. Inbound transport events are recorded in
the event log exactly once and then dispatched to the history handlers. Function
calls and guardrail classifications run as background tasks so a slow supervisor
escalation never stops the session from accepting further events.

Outbound commands go through a transport object exposing
`async send_event(event: dict)`. After disconnect the session stops accepting
events and sending commands, and any background task that finishes later leaves
the transcript untouched.
"""

import asyncio
import json
import logging
import uuid
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union

from pydantic import BaseModel

from app.agents.graph import AgentDefinition, AgentGraph
from app.agents.guardrails import GuardrailPipeline, extract_moderation
from app.agents.tools import ToolContext, parse_arguments
from app.config.constants import (
    DEFAULT_TRANSCRIPTION_MODEL,
    EVENT_AGENT_HANDOFF,
    EVENT_AGENT_TOOL_END,
    EVENT_AGENT_TOOL_START,
    EVENT_ALIASES,
    EVENT_FUNCTION_CALL,
    EVENT_GUARDRAIL_TRIPPED,
    EVENT_HISTORY_ADDED,
    EVENT_HISTORY_UPDATED,
    EVENT_TRANSCRIPTION_COMPLETED,
    EVENT_TRANSCRIPTION_DELTA,
    GUARDRAIL_BREADCRUMB_TITLE,
    LOGGER_NAME,
    SERVER_VAD_TURN_DETECTION,
    SIMULATED_GREETING_TEXT,
    TRANSCRIPT_SNAPSHOT,
)
from app.errors import OrderingError
from app.handlers import history_handlers
from app.models.event_log import EventLog
from app.models.guardrail_schemas import GuardrailResult, ModerationCategory
from app.models.realtime_schemas import (
    ConversationItemCreateCommand,
    FunctionCallEvent,
    InputAudioBufferClearCommand,
    InputAudioBufferCommitCommand,
    ItemStatus,
    MessageKind,
    MessageRole,
    ResponseCancelCommand,
    ResponseCreateCommand,
    SessionUpdateCommand,
)
from app.models.transcript import TranscriptEntry, TranscriptStore

logger = logging.getLogger(LOGGER_NAME)

EventHandler = Callable[[Dict[str, Any], "RealtimeSession"], Awaitable[None]]

CORRECTIVE_MESSAGE_PREFIX = (
    "Your previous response was flagged by an output guardrail and must not be repeated. "
    "Respond again, following your instructions and the moderation policy."
)


class SessionStatus(str, Enum):
    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"


def new_item_id() -> str:
    return uuid.uuid4().hex[:32]


class RealtimeSession:
    """
    Orchestrates one client's realtime conversation.

    Args:
        graph: Validated agent graph; its root is the initial agent
        transport: Object with `async send_event(dict)` for outbound commands
        guardrails: Output guardrail pipeline, or None to skip moderation
        push_to_talk: Start in manual turn-taking mode
        voice: Voice used for every agent instead of each agent's own
        publish_snapshots: Send a transcript snapshot after each change
        clock: Time source (seconds) for transcript and event timestamps
    """

    def __init__(
        self,
        graph: AgentGraph,
        transport: Any,
        guardrails: Optional[GuardrailPipeline] = None,
        push_to_talk: bool = False,
        voice: Optional[str] = None,
        publish_snapshots: bool = True,
        clock: Optional[Callable[[], float]] = None,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.graph = graph
        self.transport = transport
        self.guardrails = guardrails
        self.push_to_talk = push_to_talk
        self.voice = voice
        self.publish_snapshots = publish_snapshots
        self.muted = False

        self.transcript = TranscriptStore(clock)
        self.event_log = EventLog(clock)
        self.active_agent: AgentDefinition = graph.root
        self.status = SessionStatus.DISCONNECTED
        # Tool state scoped to this session (e.g. the ordering cart)
        self.tool_data: Dict[str, Any] = {}

        self._message_kinds: Dict[str, MessageKind] = {}
        self._corrective_details: Dict[str, Dict[str, Any]] = {}
        self._corrective_rendered: Set[str] = set()
        self._hidden_items: Set[str] = set()
        self._tasks: Set[asyncio.Task] = set()

        self.handlers: Dict[str, EventHandler] = {
            EVENT_HISTORY_ADDED: history_handlers.handle_history_added,
            EVENT_HISTORY_UPDATED: history_handlers.handle_history_updated,
            EVENT_TRANSCRIPTION_DELTA: history_handlers.handle_transcription_delta,
            EVENT_TRANSCRIPTION_COMPLETED: history_handlers.handle_transcription_completed,
            EVENT_FUNCTION_CALL: history_handlers.handle_function_call,
            EVENT_AGENT_TOOL_START: history_handlers.handle_agent_tool_start,
            EVENT_AGENT_TOOL_END: history_handlers.handle_agent_tool_end,
            EVENT_AGENT_HANDOFF: history_handlers.handle_agent_handoff,
            EVENT_GUARDRAIL_TRIPPED: history_handlers.handle_guardrail_tripped,
        }

    # State queries used by the handlers

    @property
    def is_live(self) -> bool:
        return self.status == SessionStatus.CONNECTED

    @property
    def guardrails_enabled(self) -> bool:
        return self.guardrails is not None

    def message_kind_for(self, item_id: str) -> Optional[MessageKind]:
        return self._message_kinds.get(item_id)

    def corrective_details(self, item_id: str) -> Optional[Dict[str, Any]]:
        return self._corrective_details.get(item_id)

    def claim_corrective(self, item_id: str) -> bool:
        """True the first time a corrective item is rendered."""
        if item_id in self._corrective_rendered:
            return False
        self._corrective_rendered.add(item_id)
        return True

    def is_hidden_item(self, item_id: str) -> bool:
        return item_id in self._hidden_items

    def history(self) -> List[Dict[str, Any]]:
        """Conversation messages in the shape tools and the supervisor expect."""
        return [
            {
                "type": "message",
                "itemId": entry.item_id,
                "role": entry.role.value if entry.role else None,
                "content": entry.text,
                "status": "completed" if entry.status == ItemStatus.DONE else "in_progress",
            }
            for entry in self.transcript.messages()
        ]

    def add_breadcrumb(self, title: str, data: Optional[Any] = None) -> Optional[TranscriptEntry]:
        if not self.is_live:
            logger.debug(f"Breadcrumb '{title}' dropped: session {self.session_id} is not live")
            return None
        return self.transcript.insert_breadcrumb(title, data)

    # Lifecycle

    def _set_status(self, status: SessionStatus) -> None:
        self.status = status
        self.event_log.record("client", status.value, {"type": "session.status", "status": status.value})
        logger.info(f"Session {self.session_id} {status.value}")

    async def connect(self) -> None:
        """Go live on the root agent and prime its greeting."""
        self._set_status(SessionStatus.CONNECTING)
        self._set_status(SessionStatus.CONNECTED)
        self.add_breadcrumb(f"Agent: {self.active_agent.name}", self.active_agent.snapshot())
        await self.update_session(should_trigger_response=True)
        await self.publish_transcript()

    async def disconnect(self) -> None:
        if self.status == SessionStatus.DISCONNECTED:
            return
        self._set_status(SessionStatus.DISCONNECTED)
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    def _spawn(self, coro: Awaitable[Any], label: str) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)

        def _done(finished: asyncio.Task) -> None:
            self._tasks.discard(finished)
            if not finished.cancelled() and finished.exception() is not None:
                logger.error(
                    f"Background {label} failed in session {self.session_id}",
                    exc_info=finished.exception(),
                )

        task.add_done_callback(_done)
        return task

    async def wait_for_background(self) -> None:
        """Wait until all in-flight tool calls and classifications have finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # Outbound

    async def send_command(self, command: Union[BaseModel, Dict[str, Any]], suffix: str = "") -> None:
        if not self.is_live:
            logger.debug(f"Command dropped: session {self.session_id} is not live")
            return
        event = command.model_dump() if isinstance(command, BaseModel) else command
        self.event_log.log_client_event(event, suffix)
        await self.transport.send_event(event)

    async def publish_transcript(self) -> None:
        if not self.publish_snapshots or not self.is_live:
            return
        await self.transport.send_event(
            {"type": TRANSCRIPT_SNAPSHOT, "entries": self.transcript.snapshot()}
        )

    async def update_session(self, should_trigger_response: bool = False) -> None:
        """Push the active agent's configuration and the turn detection mode."""
        agent = self.active_agent
        turn_detection = None if self.push_to_talk else dict(SERVER_VAD_TURN_DETECTION)
        await self.send_command(
            SessionUpdateCommand(
                session={
                    "instructions": agent.instructions,
                    "voice": self.voice or agent.voice,
                    "tools": self.graph.tool_schemas(agent.name),
                    "turn_detection": turn_detection,
                    "input_audio_transcription": {"model": DEFAULT_TRANSCRIPTION_MODEL},
                }
            )
        )
        if should_trigger_response:
            await self.send_simulated_user_message(SIMULATED_GREETING_TEXT)

    async def send_simulated_user_message(self, text: str) -> str:
        """Inject a hidden user message and ask for a response."""
        item_id = new_item_id()
        self._hidden_items.add(item_id)
        self._message_kinds[item_id] = MessageKind.USER
        self.transcript.insert_message(item_id, MessageRole.USER, text, hidden=True)
        await self.send_command(
            ConversationItemCreateCommand(
                item={
                    "id": item_id,
                    "type": "message",
                    "role": "user",
                    "content": [{"type": "input_text", "text": text}],
                }
            )
        )
        await self.send_command(ResponseCreateCommand(), "(simulated user text message)")
        return item_id

    async def send_user_text(self, text: str) -> None:
        await self.send_command(
            ConversationItemCreateCommand(
                item={
                    "type": "message",
                    "role": "user",
                    "content": [{"type": "input_text", "text": text}],
                }
            )
        )
        await self.send_command(ResponseCreateCommand(), "(send user text message)")

    async def set_push_to_talk(self, enabled: bool) -> None:
        self.push_to_talk = enabled
        await self.update_session(should_trigger_response=False)

    async def push_to_talk_start(self) -> None:
        await self.send_command(InputAudioBufferClearCommand(), "clear PTT buffer")

    async def push_to_talk_stop(self) -> None:
        await self.send_command(InputAudioBufferCommitCommand(), "commit PTT")
        await self.send_command(ResponseCreateCommand(), "trigger response PTT")

    async def interrupt(self) -> None:
        await self.send_command(ResponseCancelCommand())

    def mute(self, muted: bool) -> None:
        self.muted = muted
        logger.info(f"Session {self.session_id} {'muted' if muted else 'unmuted'}")

    # Inbound

    async def handle_event(self, event: Dict[str, Any]) -> None:
        """Record a transport event and apply it to the transcript."""
        if not self.is_live:
            logger.debug(f"Event {event.get('type')} ignored: session {self.session_id} is not live")
            return

        event_type = event.get("type", "")
        canonical = EVENT_ALIASES.get(event_type, event_type)

        item = event.get("item")
        if canonical == EVENT_HISTORY_ADDED and isinstance(item, dict):
            self.event_log.log_history_item(item)
        else:
            self.event_log.log_server_event(event)

        handler = self.handlers.get(canonical)
        if handler is None:
            return
        await handler(event, self)
        await self.publish_transcript()

    # Agents and tools

    async def switch_agent(self, target: str, source: Optional[str] = None) -> bool:
        """Make `target` the active agent if the current agent may hand off to it."""
        current = self.active_agent.name
        if source and source != current:
            logger.warning(f"Handoff source {source} is not the active agent {current}")
        if not self.graph.can_handoff(current, target):
            logger.error(f"Rejected handoff from {current} to {target}: not a permitted route")
            return False

        self.active_agent = self.graph[target]
        logger.info(f"Session {self.session_id} handed off from {current} to {target}")
        self.add_breadcrumb(f"Agent: {target}", self.active_agent.snapshot())
        await self.update_session(should_trigger_response=False)
        return True

    def start_function_call(self, call: FunctionCallEvent) -> asyncio.Task:
        return self._spawn(self._run_function_call(call), f"function call {call.name}")

    async def _run_function_call(self, call: FunctionCallEvent) -> None:
        agent_name = self.active_agent.name
        try:
            arguments: Any = parse_arguments(call.arguments)
        except ValueError:
            arguments = call.arguments
        self.add_breadcrumb(f"function call: {call.name}", arguments)

        target = self.graph.resolve_handoff(agent_name, call.name)
        if target is not None:
            switched = await self.switch_agent(target)
            output: Any = {"assistant": target} if switched else {"error": f"Cannot transfer to {target}"}
        else:
            context = ToolContext(history=self.history(), data=self.tool_data, add_breadcrumb=self.add_breadcrumb)
            result = await self.graph.executor_for(agent_name).execute(call.name, call.arguments, context)
            output = result.output

        if not self.is_live:
            logger.debug(f"Result of {call.name} discarded: session {self.session_id} ended")
            return

        self.add_breadcrumb(f"function call result: {call.name}", output)
        await self.send_command(
            ConversationItemCreateCommand(
                item={
                    "type": "function_call_output",
                    "call_id": call.call_id,
                    "output": json.dumps(output),
                }
            )
        )
        await self.send_command(ResponseCreateCommand())
        await self.publish_transcript()

    # Guardrails

    def submit_guardrail(self, item_id: str) -> Optional[asyncio.Task]:
        """Classify a completed assistant message, once per item id."""
        if self.guardrails is None or not self.is_live:
            return None
        if not self.guardrails.claim(item_id):
            return None
        return self._spawn(self._classify(item_id), f"guardrail for {item_id}")

    async def _classify(self, item_id: str) -> None:
        entry = self.transcript.get(item_id)
        if entry is None:
            return
        text = entry.text
        outcome = await self.guardrails.classify(text)

        if not self.is_live:
            return

        if outcome.errored and outcome.tripwire_triggered:
            self._suppress_unclassified(item_id, outcome.output_info)
        elif outcome.tripwire_triggered:
            await self.apply_guardrail_trip(outcome.output_info, item_id=item_id, send_correction=True)
        else:
            moderation = extract_moderation(outcome.output_info) or {}
            rationale = "Classifier unavailable" if outcome.errored else moderation.get("moderationRationale", "")
            self.transcript.annotate_guardrail(
                item_id,
                GuardrailResult(
                    status=ItemStatus.DONE,
                    category=ModerationCategory.NONE,
                    rationale=rationale,
                    test_text=text,
                ),
            )
        await self.publish_transcript()

    def _suppress_unclassified(self, item_id: str, output_info: Dict[str, Any]) -> None:
        # Fail-closed: no verdict to show, so the message is hidden
        self.transcript.annotate_guardrail(
            item_id, GuardrailResult(status=ItemStatus.DONE, rationale=str(output_info.get("error", "")))
        )
        try:
            self.transcript.set_hidden(item_id, True)
        except OrderingError as e:
            logger.warning(f"{e}; message left visible")
        self.add_breadcrumb(GUARDRAIL_BREADCRUMB_TITLE, {"details": output_info})

    async def apply_guardrail_trip(
        self,
        output_info: Dict[str, Any],
        item_id: Optional[str] = None,
        send_correction: bool = True,
    ) -> None:
        """
        Annotate the offending assistant message with a tripped guardrail.

        The message is kept and annotated, not rewritten. A trip whose outcome
        carries no moderation verdict is logged and leaves the message as it is.
        With send_correction the agent is sent a SYSTEM_CORRECTIVE message
        asking it to respond again.
        """
        if not self.is_live:
            return

        if item_id is None:
            last = self.transcript.last_message(MessageRole.ASSISTANT)
            item_id = last.item_id if last else None
        if item_id is None:
            logger.warning("Guardrail tripped but there is no assistant message to annotate")
            return

        moderation = extract_moderation(output_info)

        if moderation is None:
            logger.warning(f"Guardrail trip without a moderation verdict ignored: {output_info}")
            return

        try:
            category = ModerationCategory(moderation.get("moderationCategory"))
        except ValueError:
            category = None
        entry = self.transcript.get(item_id)
        self.transcript.annotate_guardrail(
            item_id,
            GuardrailResult(
                status=ItemStatus.DONE,
                category=category,
                rationale=moderation.get("moderationRationale", ""),
                test_text=moderation.get("testText") or (entry.text if entry else None),
            ),
        )

        if send_correction:
            await self.send_corrective_message(moderation)

    async def send_corrective_message(self, details: Dict[str, Any]) -> str:
        item_id = new_item_id()
        self._message_kinds[item_id] = MessageKind.SYSTEM_CORRECTIVE
        self._corrective_details[item_id] = details
        text = f"{CORRECTIVE_MESSAGE_PREFIX}\nFailure Details: {json.dumps(details)}"
        await self.send_command(
            ConversationItemCreateCommand(
                item={
                    "id": item_id,
                    "type": "message",
                    "role": "user",
                    "content": [{"type": "input_text", "text": text}],
                }
            )
        )
        await self.send_command(ResponseCreateCommand(), "(guardrail correction)")
        return item_id
