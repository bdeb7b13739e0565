# File: tests/test_normalizer.py
"""
Unit tests for interval normalization.
"""

import pytest
from datetime import date, timedelta

from src.availability.models import MINUTES_PER_DAY, RawEvent, parse_time_of_day
from src.availability.normalizer import IntervalNormalizer, merge_intervals

DAY = date(2025, 7, 24)
NEXT = DAY + timedelta(days=1)


def spans(result, day):
    return [(i.start_minute, i.end_minute) for i in result.intervals_on(day)]


class TestTimeParsing:

    def test_parses_hours_and_minutes(self):
        assert parse_time_of_day("09:30") == 570
        assert parse_time_of_day("09:30:00") == 570

    def test_24_00_is_end_of_day(self):
        assert parse_time_of_day("24:00") == MINUTES_PER_DAY

    @pytest.mark.parametrize("value", ["25:00", "24:30", "9", "10:60", "noon"])
    def test_rejects_bad_times(self, value):
        with pytest.raises(ValueError):
            parse_time_of_day(value)

    def test_raw_event_accepts_column_names(self):
        event = RawEvent.from_dict({"event_date": "2025-07-24", "start_time": "10:00",
                                    "end_time": "11:00", "is_all_day": False})
        assert event.date == DAY
        assert (event.start_minute, event.end_minute) == (600, 660)
        assert event.all_day is False


class TestMergeIntervals:

    def test_merges_overlapping_and_touching(self):
        merged = merge_intervals("a", DAY, [(720, 780), (600, 660), (630, 720)])
        assert [(i.start_minute, i.end_minute) for i in merged] == [(600, 780)]

    def test_keeps_disjoint_sorted(self):
        merged = merge_intervals("a", DAY, [(900, 960), (600, 660)])
        assert [(i.start_minute, i.end_minute) for i in merged] == [(600, 660), (900, 960)]


class TestIntervalNormalizer:

    def setup_method(self):
        self.normalizer = IntervalNormalizer(default_duration=60)

    def test_simple_event(self):
        result = self.normalizer.normalize("a", [
            {"date": "2025-07-24", "start_time": "10:00", "end_time": "11:00"},
        ])
        assert spans(result, DAY) == [(600, 660)]
        assert result.invalid == []

    def test_missing_end_uses_default_duration(self):
        result = self.normalizer.normalize("a", [{"date": "2025-07-24", "start_time": "10:00"}])
        assert spans(result, DAY) == [(600, 660)]

    def test_default_duration_crosses_midnight(self):
        result = self.normalizer.normalize("a", [{"date": "2025-07-24", "start_time": "23:30"}])
        assert spans(result, DAY) == [(1410, MINUTES_PER_DAY)]
        assert spans(result, NEXT) == [(0, 30)]

    def test_overnight_event_split_at_midnight(self):
        result = self.normalizer.normalize("a", [{
            "date": "2025-07-24", "end_date": "2025-07-25",
            "start_time": "23:00", "end_time": "01:00",
        }])
        assert spans(result, DAY) == [(1380, MINUTES_PER_DAY)]
        assert spans(result, NEXT) == [(0, 60)]

    def test_multi_day_timed_event(self):
        result = self.normalizer.normalize("a", [{
            "date": "2025-07-24", "end_date": "2025-07-26",
            "start_time": "22:00", "end_time": "02:00",
        }])
        assert spans(result, DAY) == [(1320, MINUTES_PER_DAY)]
        assert spans(result, NEXT) == [(0, MINUTES_PER_DAY)]
        assert spans(result, DAY + timedelta(days=2)) == [(0, 120)]

    def test_all_day_event_covers_every_date(self):
        result = self.normalizer.normalize("a", [
            {"date": "2025-07-24", "end_date": "2025-07-26", "all_day": True},
        ])
        for offset in range(3):
            assert spans(result, DAY + timedelta(days=offset)) == [(0, MINUTES_PER_DAY)]

    def test_record_without_start_time_blocks_whole_day(self):
        result = self.normalizer.normalize("a", [{"date": "2025-07-24"}])
        assert spans(result, DAY) == [(0, MINUTES_PER_DAY)]

    def test_end_before_start_is_invalid(self):
        result = self.normalizer.normalize("a", [
            {"date": "2025-07-24", "start_time": "11:00", "end_time": "10:00"},
            {"date": "2025-07-24", "start_time": "12:00", "end_time": "13:00"},
        ])
        assert spans(result, DAY) == [(720, 780)]
        assert len(result.invalid) == 1
        assert result.invalid[0].member_id == "a"

    def test_zero_length_event_is_invalid(self):
        result = self.normalizer.normalize("a", [
            {"date": "2025-07-24", "start_time": "10:00", "end_time": "10:00"},
        ])
        assert result.intervals_by_date == {}
        assert len(result.invalid) == 1

    def test_unparseable_records_are_dropped(self):
        result = self.normalizer.normalize("a", [
            {"date": "not-a-date", "start_time": "10:00"},
            {"start_time": "10:00"},
            {"date": "2025-07-24", "start_time": "24:00", "end_time": "24:00"},
            {"date": "2025-07-24", "start_time": "10:00", "end_time": "11:00"},
        ])
        assert len(result.invalid) == 3
        assert spans(result, DAY) == [(600, 660)]

    def test_end_date_before_start_date_is_invalid(self):
        result = self.normalizer.normalize("a", [
            {"date": "2025-07-24", "end_date": "2025-07-23", "all_day": True},
        ])
        assert len(result.invalid) == 1

    def test_date_range_filter(self):
        result = self.normalizer.normalize("a", [
            {"date": "2025-07-23", "start_time": "23:00", "end_time": "01:00", "end_date": "2025-07-24"},
            {"date": "2025-07-28", "start_time": "10:00", "end_time": "11:00"},
        ], start_date=DAY, end_date=NEXT)
        assert list(result.intervals_by_date) == [DAY]
        assert spans(result, DAY) == [(0, 60)]

    def test_intervals_are_sorted_and_disjoint(self):
        result = self.normalizer.normalize("a", [
            {"date": "2025-07-24", "start_time": "15:00", "end_time": "16:00"},
            {"date": "2025-07-24", "start_time": "09:00", "end_time": "10:30"},
            {"date": "2025-07-24", "start_time": "10:00", "end_time": "11:00"},
            {"date": "2025-07-24", "start_time": "11:00", "end_time": "11:30"},
        ])
        assert spans(result, DAY) == [(540, 690), (900, 960)]

    @pytest.mark.parametrize("flag", ["false", "False", "0", 0, False])
    def test_false_all_day_flags_keep_times(self, flag):
        result = self.normalizer.normalize("a", [
            {"date": "2025-07-24", "start_time": "10:00", "end_time": "11:00", "all_day": flag},
        ])
        assert spans(result, DAY) == [(600, 660)]

    @pytest.mark.parametrize("flag", ["true", "1", 1, True])
    def test_true_all_day_flags_block_the_day(self, flag):
        result = self.normalizer.normalize("a", [
            {"date": "2025-07-24", "start_time": "10:00", "end_time": "11:00", "is_all_day": flag},
        ])
        assert spans(result, DAY) == [(0, MINUTES_PER_DAY)]

    def test_unrecognised_all_day_flag_is_invalid(self):
        result = self.normalizer.normalize("a", [
            {"date": "2025-07-24", "start_time": "10:00", "end_time": "11:00", "all_day": "sometimes"},
        ])
        assert result.intervals_by_date == {}
        assert len(result.invalid) == 1

    def test_explicit_zero_default_duration_is_kept(self):
        normalizer = IntervalNormalizer(default_duration=0)
        assert normalizer.default_duration == 0

        result = normalizer.normalize("a", [{"date": "2025-07-24", "start_time": "10:00"}])
        assert result.intervals_by_date == {}
        assert len(result.invalid) == 1
