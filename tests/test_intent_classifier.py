"""Tests for per-turn mode classification and precedence."""

import pytest

from booking_assistant.core.intent_classifier import IntentSignals, classify_mode, classify_signals, resolve_mode
from booking_assistant.models.mode import Mode


class TestClassifySignals:
    def test_cancel_phrases(self):
        for text in ("please cancel the booking", "I'm not interested", "I've changed my mind", "stop booking"):
            assert classify_signals(text).cancelled, text

    def test_out_of_region(self):
        assert classify_signals("can you drive me to Paris?").out_of_region
        assert not classify_signals("pick me up in Parisian Street").out_of_region

    def test_update(self):
        assert classify_signals("actually please change the pickup time").update
        assert classify_signals("sorry, I meant Friday").update

    def test_empty(self):
        assert classify_signals("") == IntentSignals()


class TestResolveMode:
    def test_cancel_beats_everything(self):
        signals = IntentSignals(cancelled=True, out_of_region=True, update=True)
        assert resolve_mode(signals, was_complete=True) == Mode.CANCELLED

    def test_out_of_region_beats_update(self):
        assert resolve_mode(IntentSignals(out_of_region=True, update=True), False) == Mode.OUT_OF_REGION

    def test_update_beats_confirm(self):
        assert resolve_mode(IntentSignals(update=True), was_complete=True) == Mode.UPDATE

    @pytest.mark.parametrize("was_complete,expected", [(True, Mode.CONFIRM), (False, Mode.NORMAL)])
    def test_no_signal(self, was_complete, expected):
        assert resolve_mode(IntentSignals(), was_complete) == expected


class TestClassifyMode:
    def test_cancel_regardless_of_completion(self):
        assert classify_mode("cancel booking", was_complete=False) == Mode.CANCELLED
        assert classify_mode("cancel booking", was_complete=True) == Mode.CANCELLED

    def test_update_on_complete_record(self):
        assert classify_mode("actually please change the pickup time", was_complete=True) == Mode.UPDATE

    def test_plain_message_on_complete_record(self):
        assert classify_mode("thanks!", was_complete=True) == Mode.CONFIRM
