"""Tests for turn handling, at-most-once persistence and session recovery."""

from booking_assistant.core.flow_controller import FlowController
from booking_assistant.core.reply_orchestrator import ReplyGenerator, ReplyOrchestrator
from booking_assistant.models.mode import Mode
from booking_assistant.store.base import StoreError
from booking_assistant.store.memory_store import InMemoryStore

from conftest import COMPLETE_MESSAGE, TODAY


class FailingInsertStore(InMemoryStore):
    def __init__(self, failures=1):
        super().__init__()
        self.failures = failures

    def insert_booking(self, session_id, booking):
        if self.failures:
            self.failures -= 1
            raise StoreError("insert refused")
        return super().insert_booking(session_id, booking)


class FailingMirrorStore(InMemoryStore):
    def upsert_conversation(self, snapshot):
        raise StoreError("mirror down")


def _flow(store):
    return FlowController(store=store, today=lambda: TODAY)


class TestTurns:
    def test_partial_turn_asks_next_question(self, flow, store):
        result = flow.process_message("s1", "call me Sarah")
        assert result.session_id == "s1"
        assert result.booking_ready is False
        assert "email" in result.response.lower()
        assert store.bookings == {}

        state = flow.get_state("s1")
        assert state.booking.customer_name == "Sarah"
        assert state.turn_count == 1
        assert [m.role for m in state.messages] == ["user", "assistant"]
        assert state.last_mode == Mode.NORMAL

    def test_fields_accumulate_across_turns(self, flow):
        flow.process_message("s1", "I'm Sarah Jones")
        flow.process_message("s1", "sarah@x.com, 07700 900 123")
        state = flow.get_state("s1")
        assert state.booking.customer_name == "Sarah Jones"
        assert state.booking.customer_phone == "07700 900 123"
        assert state.missing_fields[0] == "service_type"

    def test_later_email_overwrites(self, flow):
        flow.process_message("s1", "first@x.com")
        flow.process_message("s1", "sorry, use second@x.com instead")
        assert flow.get_state("s1").booking.customer_email == "second@x.com"

    def test_complete_message_persists_once(self, flow, store):
        first = flow.process_message("s1", COMPLETE_MESSAGE)
        assert first.booking_ready is True
        assert "received your booking request" in first.response

        second = flow.process_message("s1", "thanks!")
        assert second.booking_ready is False
        assert flow.get_state("s1").last_mode == Mode.CONFIRM

        rows = store.bookings_for("s1")
        assert len(rows) == 1
        assert rows[0]["status"] == "pending"
        assert rows[0]["booking_date"] == "2030-12-25"
        assert store.conversations["s1"]["booking_id"] == rows[0]["id"]

    def test_sessions_are_independent(self, flow, store):
        flow.process_message("a", COMPLETE_MESSAGE)
        flow.process_message("b", "call me Sarah")
        assert flow.get_state("b").booking.customer_email is None
        assert store.bookings_for("b") == []


class TestPersistenceFailures:
    def test_failed_insert_is_retried_next_complete_turn(self):
        store = FailingInsertStore(failures=1)
        flow = _flow(store)

        first = flow.process_message("s1", COMPLETE_MESSAGE)
        assert first.booking_ready is False
        assert flow.get_state("s1").booking_persisted is False

        second = flow.process_message("s1", "is that ok?")
        assert second.booking_ready is True
        assert len(store.bookings_for("s1")) == 1

    def test_mirror_failure_does_not_break_the_turn(self):
        flow = _flow(FailingMirrorStore())
        result = flow.process_message("s1", COMPLETE_MESSAGE)
        assert result.booking_ready is True
        assert flow.get_state("s1").booking_id is not None


class TestUpdatesAndCancellation:
    def test_change_request_waits_for_the_new_value(self, flow, store):
        flow.process_message("s1", COMPLETE_MESSAGE)
        booking_id = flow.get_state("s1").booking_id

        asked = flow.process_message("s1", "actually please change the pickup time")
        assert asked.booking_ready is False
        assert flow.get_state("s1").last_mode == Mode.UPDATE
        assert store.bookings[booking_id]["booking_time"] == "17:00:00"

        flow.process_message("s1", "make it 6pm")
        assert store.bookings[booking_id]["booking_time"] == "18:00:00"
        assert store.bookings[booking_id]["extracted_data"]["booking_time"] == "18:00:00"
        assert len(store.bookings_for("s1")) == 1

    def test_update_wording_still_retries_failed_insert(self):
        store = FailingInsertStore(failures=1)
        flow = _flow(store)
        flow.process_message("s1", COMPLETE_MESSAGE)

        result = flow.process_message("s1", "can you update me once it's confirmed?")
        assert flow.get_state("s1").last_mode == Mode.UPDATE
        assert result.booking_ready is True
        assert len(store.bookings_for("s1")) == 1

    def test_correction_after_failed_insert_is_saved_with_new_value(self):
        store = FailingInsertStore(failures=2)
        flow = _flow(store)
        flow.process_message("s1", COMPLETE_MESSAGE)
        flow.process_message("s1", "please change the time")
        assert store.bookings == {}

        result = flow.process_message("s1", "6pm please")
        assert result.booking_ready is True
        assert store.bookings_for("s1")[0]["booking_time"] == "18:00:00"

    def test_cancel_marks_stored_booking(self, flow, store):
        flow.process_message("s1", COMPLETE_MESSAGE)
        booking_id = flow.get_state("s1").booking_id

        result = flow.process_message("s1", "please cancel the booking")
        assert "cancel" in result.response.lower()
        assert store.bookings[booking_id]["status"] == "cancelled"
        assert store.conversations["s1"]["status"] == "cancelled"

    def test_cancel_before_completion_never_inserts(self, flow, store):
        flow.process_message("s1", "call me Sarah")
        flow.process_message("s1", "not interested, " + COMPLETE_MESSAGE)
        assert flow.get_state("s1").is_complete
        assert store.bookings == {}

    def test_out_of_region_reply(self, flow):
        result = flow.process_message("s1", "I need a car in Dubai")
        assert "only operate within the UK" in result.response
        assert flow.get_state("s1").last_mode == Mode.OUT_OF_REGION


class TestSessions:
    def test_start_session_mirrors_initiated(self, flow, store):
        state = flow.start_session()
        row = store.conversations[state.session_id]
        assert row["status"] == "initiated"
        assert row["messages"] == []

    def test_reset_starts_a_fresh_session(self, flow):
        flow.process_message("s1", "call me Sarah")
        fresh = flow.reset_session("s1")
        assert fresh.session_id != "s1"
        assert fresh.booking.customer_name is None
        assert flow.state_manager.get("s1") is None

    def test_unknown_session_has_no_state(self, flow):
        assert flow.get_state("nope") is None

    def test_recovers_from_store_without_second_insert(self, store):
        _flow(store).process_message("s1", COMPLETE_MESSAGE)

        restarted = _flow(store)
        state = restarted.get_state("s1")
        assert state.booking_persisted is True
        assert state.booking.customer_name == "John Smith"
        assert state.turn_count == 1
        assert len(state.messages) == 2

        result = restarted.process_message("s1", "thanks")
        assert result.booking_ready is False
        assert len(store.bookings_for("s1")) == 1

    def test_conversation_row_holds_only_conversation_columns(self, flow, store):
        flow.process_message("s1", "call me Sarah")
        row = store.conversations["s1"]
        assert set(row) == {"session_id", "messages", "booking_id", "status", "created_at", "updated_at"}

    def test_recovery_replays_relative_dates_from_message_day(self, flow, store):
        store.upsert_conversation({
            "session_id": "old",
            "messages": [
                {"role": "user", "content": "call me Sarah", "timestamp": "2030-06-01T09:00:00+00:00"},
                {"role": "assistant", "content": "Hi Sarah!", "timestamp": "2030-06-01T09:00:01+00:00"},
                {"role": "user", "content": "tomorrow at 5pm", "timestamp": "2030-06-01T09:01:00+00:00"},
            ],
            "booking_id": None,
            "status": "normal",
        })

        state = flow.get_state("old")
        assert state.booking.customer_name == "Sarah"
        assert state.booking.booking_date == "2030-06-02"
        assert state.booking.booking_time == "17:00:00"
        assert state.booking_persisted is False
        assert state.last_mode == Mode.NORMAL
        assert state.turn_count == 2


class TestReplies:
    def test_generator_failure_falls_back(self, store):
        class Broken:
            def generate_reply(self, *args, **kwargs):
                raise RuntimeError("quota")

        flow = FlowController(
            store=store,
            reply_orchestrator=ReplyOrchestrator(generator=Broken()),
            today=lambda: TODAY,
        )
        result = flow.process_message("s1", "call me Sarah")
        assert result.response.startswith("What email address")

    def test_generator_sees_history_without_current_turn(self, store):
        seen = {}

        class Recorder(ReplyGenerator):
            def generate_reply(self, user_message, extracted_data, missing_fields, mode, recent_messages=None):
                seen["history"] = recent_messages
                seen["mode"] = mode
                return "Lovely, thank you."

        flow = FlowController(
            store=store,
            reply_orchestrator=ReplyOrchestrator(generator=Recorder()),
            today=lambda: TODAY,
        )
        flow.process_message("s1", "call me Sarah")
        result = flow.process_message("s1", "sarah@x.com")

        assert result.response == "Lovely, thank you."
        assert seen["history"] == [
            {"role": "user", "content": "call me Sarah"},
            {"role": "assistant", "content": "Lovely, thank you."},
        ]
        assert seen["mode"] == Mode.NORMAL
