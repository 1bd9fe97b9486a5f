"""Tests for the immutable booking record and merge semantics."""

import pytest
from pydantic import ValidationError

from booking_assistant.models.booking import (
    OTHER_SERVICE,
    REQUIRED_FIELDS,
    BookingRecord,
    changed_fields,
    is_complete,
    merge,
    missing_fields,
)

FULL = {
    "customer_name": "John Smith",
    "customer_email": "john@x.com",
    "customer_phone": "07464 111 222",
    "service_type": "Airport Transfer",
    "pickup_location": "Heathrow",
    "dropoff_location": "Mayfair",
    "booking_date": "2030-12-25",
    "booking_time": "17:00:00",
    "passenger_count": 2,
}


class TestMerge:
    def test_returns_new_snapshot(self):
        old = BookingRecord()
        new = merge(old, {"customer_name": "Sarah"})
        assert new is not old
        assert old.customer_name is None
        assert new.customer_name == "Sarah"

    def test_last_write_wins(self):
        rec = merge(BookingRecord(), {"booking_time": "17:00:00"})
        assert merge(rec, {"booking_time": "18:00:00"}).booking_time == "18:00:00"

    def test_no_match_never_clears(self):
        rec = merge(BookingRecord(), {"customer_email": "a@b.co"})
        for partial in ({}, {"customer_email": None}, {"customer_email": "  "}):
            assert merge(rec, partial).customer_email == "a@b.co"

    def test_empty_partial_returns_same_object(self):
        rec = BookingRecord(customer_name="A")
        assert merge(rec, {}) is rec
        assert merge(rec, {"unknown": "x"}) is rec

    @pytest.mark.parametrize("bad", [0, -2, True, "3"])
    def test_rejects_bad_passenger_counts(self, bad):
        assert merge(BookingRecord(), {"passenger_count": bad}).passenger_count is None


class TestCompletion:
    def test_missing_follows_required_order(self):
        assert missing_fields(BookingRecord()) == list(REQUIRED_FIELDS)

    def test_missing_is_idempotent(self):
        rec = merge(BookingRecord(), {"customer_name": "A", "booking_date": "2030-01-02"})
        assert missing_fields(rec) == missing_fields(rec)
        assert "customer_name" not in missing_fields(rec)

    def test_complete(self):
        assert is_complete(BookingRecord(**FULL))
        assert not is_complete(BookingRecord(**{**FULL, "customer_phone": None}))

    def test_optional_preferences_not_required(self):
        rec = BookingRecord(**FULL)
        assert rec.vehicle_preference is None
        assert missing_fields(rec) == []


class TestRecord:
    def test_frozen(self):
        rec = BookingRecord()
        with pytest.raises(ValidationError):
            rec.customer_name = "X"

    def test_known_fields_skips_unset(self):
        assert BookingRecord(customer_name="A").known_fields() == {"customer_name": "A"}

    def test_changed_fields(self):
        old = BookingRecord(**FULL)
        new = merge(old, {"booking_time": "18:00:00"})
        assert changed_fields(old, new) == {"booking_time": "18:00:00"}
        assert changed_fields(new, new) == {}

    def test_unknown_service_filed_as_other(self):
        assert merge(BookingRecord(), {"service_type": "Limo Hire"}).service_type == OTHER_SERVICE
        assert merge(BookingRecord(), {"service_type": "Wedding Transport"}).service_type == "Wedding Transport"
