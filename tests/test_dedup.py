"""
Tests for the duplicate submission cleanup.
"""

import asyncio
from datetime import datetime, timezone

from libs.db.dedup import (
    ACTION_DELETE,
    ACTION_FIX,
    dedup_submissions,
    intended_utc_date,
    plan_exact_duplicates,
    plan_timezone_repairs,
)

MARCH_5 = datetime(2024, 3, 5, tzinfo=timezone.utc)
MARCH_5_IST = datetime(2024, 3, 4, 18, 30, tzinfo=timezone.utc)


def _doc(doc_id, date, username="alice", slug="two-sum", guild="1"):
    return {
        "_id": doc_id,
        "guildId": guild,
        "leetcodeUsername": username,
        "questionSlug": slug,
        "date": date,
    }


class TestIntendedUtcDate:

    def test_evening_offset_maps_to_next_day(self):
        assert intended_utc_date(MARCH_5_IST) == MARCH_5

    def test_morning_offset_maps_to_same_day(self):
        assert intended_utc_date(datetime(2024, 3, 5, 4, 0, tzinfo=timezone.utc)) == MARCH_5

    def test_noon_counts_as_next_day(self):
        assert intended_utc_date(datetime(2024, 3, 4, 12, 0, tzinfo=timezone.utc)) == MARCH_5


class TestPlanExactDuplicates:

    def test_keeps_lowest_id(self):
        plans = plan_exact_duplicates([_doc(3, MARCH_5), _doc(1, MARCH_5), _doc(2, MARCH_5)])
        assert len(plans) == 1
        assert plans[0].keep_id == 1
        assert plans[0].delete_ids == [2, 3]

    def test_distinct_keys_untouched(self):
        docs = [_doc(1, MARCH_5), _doc(2, MARCH_5, username="bob"), _doc(3, MARCH_5, slug="add-two")]
        assert plan_exact_duplicates(docs) == []


class TestPlanTimezoneRepairs:

    def test_midnight_documents_skipped(self):
        assert plan_timezone_repairs([_doc(1, MARCH_5)], {}) == []

    def test_fix_when_no_correct_record(self):
        repairs = plan_timezone_repairs([_doc(1, MARCH_5_IST)], {})
        assert len(repairs) == 1
        assert repairs[0].action == ACTION_FIX
        assert repairs[0].intended_date == MARCH_5

    def test_delete_when_correct_record_exists(self):
        existing = {("1", "alice", "two-sum", MARCH_5): 9}
        repairs = plan_timezone_repairs([_doc(1, MARCH_5_IST)], existing)
        assert repairs[0].action == ACTION_DELETE
        assert repairs[0].correct_id == 9

    def test_second_bad_record_for_same_day_is_deleted(self):
        later = datetime(2024, 3, 4, 19, 0, tzinfo=timezone.utc)
        repairs = plan_timezone_repairs([_doc(2, later), _doc(1, MARCH_5_IST)], {})
        assert [(r.doc_id, r.action) for r in repairs] == [(1, ACTION_FIX), (2, ACTION_DELETE)]


class TestDedupSubmissions:

    def _seed(self, fake_db):
        collection = fake_db["daily_submissions"]
        collection.docs.extend([
            _doc(1, MARCH_5),
            _doc(2, MARCH_5),
            _doc(3, MARCH_5_IST),
            _doc(4, MARCH_5_IST, username="bob"),
        ])
        return collection

    def test_dry_run_writes_nothing(self, fake_db):
        collection = self._seed(fake_db)
        report = asyncio.run(dedup_submissions(dry_run=True))

        assert report.exact_deleted == 1
        assert report.tz_deleted == 1
        assert report.tz_fixed == 1
        assert len(collection.docs) == 4

    def test_applies_both_passes(self, fake_db):
        collection = self._seed(fake_db)
        report = asyncio.run(dedup_submissions())

        assert report.total_deleted == 2
        remaining = {doc["_id"]: doc for doc in collection.docs}
        assert set(remaining) == {1, 4}
        assert remaining[4]["date"] == MARCH_5
