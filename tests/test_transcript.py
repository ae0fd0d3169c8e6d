import unittest

from app.config.constants import INAUDIBLE_PLACEHOLDER, TRANSCRIBING_PLACEHOLDER
from app.errors import OrderingError
from app.models.guardrail_schemas import GuardrailResult, ModerationCategory
from app.models.realtime_schemas import ItemStatus, MessageKind, MessageRole
from app.models.transcript import EntryKind, TranscriptStore, format_timestamp


class FakeClock:
    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class TestTranscriptStore(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.transcript = TranscriptStore(self.clock)

    def test_insert_message_is_idempotent(self):
        self.assertTrue(self.transcript.insert_message("a", MessageRole.USER, "hello"))
        self.assertFalse(self.transcript.insert_message("a", MessageRole.USER, "different"))

        self.assertEqual(len(self.transcript), 1)
        self.assertEqual(self.transcript.get("a").text, "hello")

    def test_message_kind_defaults_from_role(self):
        self.transcript.insert_message("u", MessageRole.USER)
        self.transcript.insert_message("a", MessageRole.ASSISTANT)

        self.assertEqual(self.transcript.get("u").message_kind, MessageKind.USER)
        self.assertEqual(self.transcript.get("a").message_kind, MessageKind.ASSISTANT)

    def test_deltas_concatenate_in_order(self):
        self.transcript.insert_message("a", MessageRole.ASSISTANT)
        for fragment in ["Hel", "lo", ", world"]:
            self.transcript.append_delta("a", fragment)

        self.assertEqual(self.transcript.get("a").text, "Hello, world")
        self.assertEqual(self.transcript.get("a").status, ItemStatus.IN_PROGRESS)

    def test_delta_for_unknown_id_raises_ordering_error(self):
        with self.assertRaises(OrderingError) as ctx:
            self.transcript.append_delta("missing", "x")
        self.assertEqual(ctx.exception.item_id, "missing")
        self.assertEqual(len(self.transcript), 0)

    def test_finalize_and_replace_unknown_id_raise(self):
        with self.assertRaises(OrderingError):
            self.transcript.finalize("missing", "text")
        with self.assertRaises(OrderingError):
            self.transcript.replace_text("missing", "text")

    def test_finalize_with_empty_text_uses_inaudible_placeholder(self):
        self.transcript.insert_message("u", MessageRole.USER)
        self.transcript.insert_message("n", MessageRole.USER)
        self.transcript.finalize("u", "")
        self.transcript.finalize("n", "\n")

        entry = self.transcript.get("u")
        self.assertEqual(entry.text, INAUDIBLE_PLACEHOLDER)
        self.assertEqual(entry.status, ItemStatus.DONE)
        self.assertEqual(self.transcript.get("n").text, INAUDIBLE_PLACEHOLDER)

    def test_finalize_keeps_other_whitespace(self):
        self.transcript.insert_message("u", MessageRole.USER)
        self.transcript.finalize("u", "  ")

        self.assertEqual(self.transcript.get("u").text, "  ")

    def test_finalize_without_text_keeps_streamed_text(self):
        self.transcript.insert_message("a", MessageRole.ASSISTANT)
        self.transcript.append_delta("a", "streamed")
        self.transcript.finalize("a")

        self.assertEqual(self.transcript.get("a").text, "streamed")
        self.assertEqual(self.transcript.get("a").status, ItemStatus.DONE)

    def test_finalize_settles_pending_guardrail(self):
        self.transcript.insert_message(
            "a", MessageRole.ASSISTANT, guardrail_result=GuardrailResult(status=ItemStatus.IN_PROGRESS)
        )
        self.transcript.finalize("a", "done")

        result = self.transcript.get("a").guardrail_result
        self.assertEqual(result.status, ItemStatus.DONE)
        self.assertEqual(result.category, ModerationCategory.NONE)
        self.assertEqual(result.rationale, "")

    def test_empty_user_message_displays_transcribing_placeholder(self):
        self.transcript.insert_message("u", MessageRole.USER)
        self.assertEqual(self.transcript.get("u").display_text, TRANSCRIBING_PLACEHOLDER)

        snapshot = self.transcript.snapshot()
        self.assertEqual(snapshot[0]["text"], TRANSCRIBING_PLACEHOLDER)

    def test_breadcrumbs_are_never_deduplicated(self):
        first = self.transcript.insert_breadcrumb("Agent: a")
        second = self.transcript.insert_breadcrumb("Agent: a")

        self.assertNotEqual(first.item_id, second.item_id)
        self.assertTrue(first.item_id.startswith("breadcrumb-"))
        self.assertEqual(first.kind, EntryKind.BREADCRUMB)
        self.assertEqual(first.status, ItemStatus.DONE)
        self.assertEqual(len(self.transcript), 2)

    def test_entries_are_ordered_by_creation_time(self):
        self.transcript.insert_message("first", MessageRole.USER, "1")
        self.clock.advance(0.5)
        self.transcript.insert_breadcrumb("crumb")
        self.clock.advance(0.5)
        self.transcript.insert_message("third", MessageRole.ASSISTANT, "3")

        ids = [entry.item_id for entry in self.transcript.entries()]
        self.assertEqual(ids[0], "first")
        self.assertTrue(ids[1].startswith("breadcrumb-"))
        self.assertEqual(ids[2], "third")

    def test_same_millisecond_entries_keep_insertion_order(self):
        self.transcript.insert_message("a", MessageRole.USER)
        self.transcript.insert_message("b", MessageRole.ASSISTANT)

        self.assertEqual([e.item_id for e in self.transcript.entries()], ["a", "b"])

    def test_hidden_entries_are_left_out_of_snapshot(self):
        self.transcript.insert_message("hidden", MessageRole.USER, "hi", hidden=True)
        self.transcript.insert_message("shown", MessageRole.ASSISTANT, "Hello")

        self.assertEqual([e["item_id"] for e in self.transcript.snapshot()], ["shown"])
        self.assertEqual(len(self.transcript.entries(include_hidden=False)), 1)
        self.assertEqual(len(self.transcript.entries()), 2)

    def test_set_hidden(self):
        self.transcript.insert_message("a", MessageRole.ASSISTANT, "text")
        self.transcript.set_hidden("a", True)
        self.assertTrue(self.transcript.get("a").hidden)

    def test_annotate_unknown_id_is_ignored(self):
        self.assertFalse(
            self.transcript.annotate_guardrail("missing", GuardrailResult(status=ItemStatus.DONE))
        )

    def test_annotate_guardrail(self):
        self.transcript.insert_message("a", MessageRole.ASSISTANT, "text")
        result = GuardrailResult(
            status=ItemStatus.DONE,
            category=ModerationCategory.OFF_BRAND,
            rationale="Disparages a competitor",
            test_text="text",
        )
        self.assertTrue(self.transcript.annotate_guardrail("a", result))
        self.assertEqual(self.transcript.get("a").guardrail_result.category, ModerationCategory.OFF_BRAND)

    def test_toggle_expand(self):
        crumb = self.transcript.insert_breadcrumb("crumb", {"x": 1})
        self.assertTrue(self.transcript.toggle_expand(crumb.item_id))
        self.assertFalse(self.transcript.toggle_expand(crumb.item_id))

    def test_last_message_by_role(self):
        self.transcript.insert_message("a1", MessageRole.ASSISTANT, "one")
        self.clock.advance(1)
        self.transcript.insert_message("u1", MessageRole.USER, "question")
        self.clock.advance(1)
        self.transcript.insert_message("a2", MessageRole.ASSISTANT, "two")

        self.assertEqual(self.transcript.last_message(MessageRole.ASSISTANT).item_id, "a2")
        self.assertEqual(self.transcript.last_message(MessageRole.USER).item_id, "u1")

    def test_format_timestamp_has_milliseconds(self):
        rendered = format_timestamp(1_700_000_000_123)
        self.assertRegex(rendered, r"^\d{2}:\d{2}:\d{2}\.123$")


if __name__ == "__main__":
    unittest.main()
