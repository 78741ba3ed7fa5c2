"""Tests for dl_common.id_generator and dl_common.datetime_utils."""

import random
import re
from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from src.dl_common.datetime_utils import format_api_date, parse_timestamp, to_epoch_ms, utc_now
from src.dl_common.id_generator import TransactionRefGenerator, generate_offline_txn_ref

_REF = re.compile(r"^OFFLINE-TXN-(\d+)-(\d{4})$")


class TestTransactionRefGenerator:
    def test_format(self) -> None:
        assert _REF.match(generate_offline_txn_ref())

    def test_suffix_in_range(self) -> None:
        gen = TransactionRefGenerator(rng=random.Random(7))
        for _ in range(200):
            suffix = int(_REF.match(gen.next_ref()).group(2))
            assert 1000 <= suffix <= 9999

    def test_millis_component_is_current(self) -> None:
        before = to_epoch_ms(utc_now())
        ms = int(_REF.match(generate_offline_txn_ref()).group(1))
        assert before - 1 <= ms <= to_epoch_ms(utc_now()) + 1

    def test_custom_prefix(self) -> None:
        assert TransactionRefGenerator(prefix="CASH").next_ref().startswith("CASH-")

    @pytest.mark.parametrize("prefix", ["", " PAD"])
    def test_rejects_bad_prefix(self, prefix: str) -> None:
        with pytest.raises(ValueError):
            TransactionRefGenerator(prefix=prefix)


class TestUtcNow:
    def test_returns_aware_datetime(self) -> None:
        now = utc_now()
        assert isinstance(now, datetime)
        assert now.tzinfo == UTC


class TestParseTimestamp:
    def test_z_suffix(self) -> None:
        dt = parse_timestamp("2024-05-01T10:00:00.000Z")
        assert dt == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)

    def test_naive_is_utc(self) -> None:
        assert parse_timestamp("2024-05-01T10:00:00").tzinfo is not None

    def test_offset_preserved(self) -> None:
        dt = parse_timestamp("2024-05-01T15:30:00+05:30")
        assert dt.utcoffset() == timedelta(hours=5, minutes=30)
        assert to_epoch_ms(dt) == to_epoch_ms(datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc))

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty(self, value: str | None) -> None:
        assert parse_timestamp(value) is None


class TestEpochMs:
    def test_millisecond_resolution(self) -> None:
        base = datetime(2024, 5, 1, tzinfo=UTC)
        assert to_epoch_ms(base + timedelta(milliseconds=1)) - to_epoch_ms(base) == 1

    def test_none_is_zero(self) -> None:
        assert to_epoch_ms(None) == 0


def test_format_api_date() -> None:
    assert format_api_date(date(2024, 1, 9)) == "2024-01-09"
    assert format_api_date(None) is None
