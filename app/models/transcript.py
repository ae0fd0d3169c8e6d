"""
Transcript state for one realtime session.

The TranscriptStore keeps one entry per item id and reconciles the stream of partial
and final events the transport emits: idempotent inserts, streamed deltas, wholesale
replacements and finalization. Breadcrumbs record orchestration events (tool calls,
agent switches, guardrail activity) next to the conversation without ever being
deduplicated. Entries are ordered by creation time rather than by insertion order,
since breadcrumbs and messages are produced by different parts of the pipeline.
"""

import itertools
import logging
import time
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from app.config.constants import INAUDIBLE_PLACEHOLDER, LOGGER_NAME, TRANSCRIBING_PLACEHOLDER
from app.errors import OrderingError
from app.models.guardrail_schemas import GuardrailResult, ModerationCategory
from app.models.realtime_schemas import ItemStatus, MessageKind, MessageRole

logger = logging.getLogger(LOGGER_NAME)


class EntryKind(str, Enum):
    MESSAGE = "MESSAGE"
    BREADCRUMB = "BREADCRUMB"


class TranscriptEntry(BaseModel):
    """A message or breadcrumb in the transcript."""
    item_id: str
    kind: EntryKind
    role: Optional[MessageRole] = None
    message_kind: Optional[MessageKind] = None
    text: str = ""
    data: Optional[Any] = None
    status: ItemStatus = ItemStatus.IN_PROGRESS
    created_at_ms: int
    timestamp: str
    seq: int = 0
    hidden: bool = False
    guardrail_result: Optional[GuardrailResult] = None
    expanded: bool = False

    @property
    def display_text(self) -> str:
        # A user turn exists before its transcription arrives
        if (
            self.kind == EntryKind.MESSAGE
            and self.role == MessageRole.USER
            and not self.text
            and self.status == ItemStatus.IN_PROGRESS
        ):
            return TRANSCRIBING_PLACEHOLDER
        return self.text


def format_timestamp(created_at_ms: int) -> str:
    """Render epoch milliseconds as HH:MM:SS.mmm local time."""
    moment = datetime.fromtimestamp(created_at_ms / 1000)
    return f"{moment.strftime('%H:%M:%S')}.{created_at_ms % 1000:03d}"


class TranscriptStore:
    """
    Ordered, id-addressable collection of transcript entries.

    Mutations of unknown ids raise OrderingError so callers can log the upstream
    ordering problem; guardrail annotation of an unknown id is logged and ignored.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Args:
            clock: Returns the current time in seconds; defaults to time.time
        """
        self._clock = clock or time.time
        self._entries: Dict[str, TranscriptEntry] = {}
        self._seq = itertools.count()

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _new_entry(self, **fields: Any) -> TranscriptEntry:
        created_at_ms = self._now_ms()
        return TranscriptEntry(
            created_at_ms=created_at_ms,
            timestamp=format_timestamp(created_at_ms),
            seq=next(self._seq),
            **fields,
        )

    def _require(self, item_id: str, operation: str) -> TranscriptEntry:
        entry = self._entries.get(item_id)
        if entry is None:
            raise OrderingError(item_id, operation)
        return entry

    def get(self, item_id: str) -> Optional[TranscriptEntry]:
        return self._entries.get(item_id)

    def insert_message(
        self,
        item_id: str,
        role: MessageRole,
        text: str = "",
        hidden: bool = False,
        message_kind: Optional[MessageKind] = None,
        guardrail_result: Optional[GuardrailResult] = None,
    ) -> bool:
        """
        Add a message unless an entry with this id already exists.

        Args:
            item_id: Stable id of the conversation item
            role: user or assistant
            text: Initial text, often empty for streamed items
            hidden: True for injected messages the UI must not render
            message_kind: Origin tag; derived from the role when omitted
            guardrail_result: Initial moderation annotation

        Returns:
            True if a new entry was created, False for a duplicate insert
        """
        if item_id in self._entries:
            logger.debug(f"Ignoring duplicate insert for transcript item {item_id}")
            return False

        if message_kind is None:
            message_kind = MessageKind.USER if role == MessageRole.USER else MessageKind.ASSISTANT

        self._entries[item_id] = self._new_entry(
            item_id=item_id,
            kind=EntryKind.MESSAGE,
            role=role,
            message_kind=message_kind,
            text=text or "",
            hidden=hidden,
            guardrail_result=guardrail_result,
        )
        return True

    def append_delta(self, item_id: str, fragment: str) -> None:
        entry = self._require(item_id, "append_delta")
        entry.text += fragment

    def replace_text(self, item_id: str, text: str) -> None:
        entry = self._require(item_id, "replace_text")
        entry.text = text

    def finalize(self, item_id: str, final_text: Optional[str] = None) -> None:
        """
        Mark an entry DONE, optionally replacing its text with the final value.

        A final value that is empty or a lone newline becomes the inaudible
        placeholder; other whitespace is kept as given. A guardrail result
        still pending at this point is settled as DONE/NONE; a classifier verdict
        arriving later overwrites it.
        """
        entry = self._require(item_id, "finalize")
        if final_text is not None:
            entry.text = final_text if final_text not in ("", "\n") else INAUDIBLE_PLACEHOLDER
        entry.status = ItemStatus.DONE

        if entry.guardrail_result and entry.guardrail_result.status == ItemStatus.IN_PROGRESS:
            entry.guardrail_result = GuardrailResult(
                status=ItemStatus.DONE,
                category=ModerationCategory.NONE,
                rationale="",
            )

    def insert_breadcrumb(self, title: str, data: Optional[Any] = None) -> TranscriptEntry:
        entry = self._new_entry(
            item_id=f"breadcrumb-{uuid.uuid4()}",
            kind=EntryKind.BREADCRUMB,
            text=title,
            data=data,
            status=ItemStatus.DONE,
        )
        self._entries[entry.item_id] = entry
        return entry

    def annotate_guardrail(self, item_id: str, result: GuardrailResult) -> bool:
        entry = self._entries.get(item_id)
        if entry is None:
            logger.warning(f"Guardrail result for unknown transcript item {item_id} ignored")
            return False
        entry.guardrail_result = result
        return True

    def set_hidden(self, item_id: str, hidden: bool) -> None:
        self._require(item_id, "set_hidden").hidden = hidden

    def toggle_expand(self, item_id: str) -> bool:
        entry = self._require(item_id, "toggle_expand")
        entry.expanded = not entry.expanded
        return entry.expanded

    def entries(self, include_hidden: bool = True) -> List[TranscriptEntry]:
        ordered = sorted(self._entries.values(), key=lambda e: (e.created_at_ms, e.seq))
        if include_hidden:
            return ordered
        return [entry for entry in ordered if not entry.hidden]

    def messages(self) -> List[TranscriptEntry]:
        return [e for e in self.entries() if e.kind == EntryKind.MESSAGE]

    def last_message(self, role: MessageRole) -> Optional[TranscriptEntry]:
        for entry in reversed(self.messages()):
            if entry.role == role:
                return entry
        return None

    def snapshot(self) -> List[Dict[str, Any]]:
        """Visible entries in display order, serialized for the UI."""
        rendered = []
        for entry in self.entries(include_hidden=False):
            payload = entry.model_dump(mode="json", exclude={"seq"})
            payload["text"] = entry.display_text
            rendered.append(payload)
        return rendered
