"""
Cleanup of duplicate daily submission records.

Pass 1 removes exact duplicates sharing (guildId, leetcodeUsername,
questionSlug, date), keeping the earliest _id.

Pass 2 repairs records whose date is not a UTC midnight. Older builds keyed
days on the server's local midnight, so an IST server stored "today" as
18:30Z of the previous UTC day. The intended day is the UTC midnight of the
stored date, moved forward one day when the stored time is at or after
12:00 UTC. If a correct record already exists the bad one is deleted,
otherwise its date is fixed in place.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from libs.db.database import DAILY_SUBMISSIONS, get_database
from libs.leetcode.parsing import is_utc_midnight, utc_midnight

logger = logging.getLogger(__name__)

SubmissionKey = Tuple[str, str, str, datetime]

ACTION_DELETE = "delete"
ACTION_FIX = "fix"


@dataclass
class DuplicateGroup:
    key: SubmissionKey
    keep_id: Any
    delete_ids: List[Any]


@dataclass
class TimezoneRepair:
    doc_id: Any
    key: SubmissionKey
    bad_date: datetime
    intended_date: datetime
    action: str
    correct_id: Optional[Any] = None


@dataclass
class DedupReport:
    exact_groups: List[DuplicateGroup] = field(default_factory=list)
    repairs: List[TimezoneRepair] = field(default_factory=list)
    dry_run: bool = False

    @property
    def exact_deleted(self) -> int:
        return sum(len(group.delete_ids) for group in self.exact_groups)

    @property
    def tz_deleted(self) -> int:
        return sum(1 for repair in self.repairs if repair.action == ACTION_DELETE)

    @property
    def tz_fixed(self) -> int:
        return sum(1 for repair in self.repairs if repair.action == ACTION_FIX)

    @property
    def total_deleted(self) -> int:
        return self.exact_deleted + self.tz_deleted


def document_key(doc: Dict[str, Any], date: Optional[datetime] = None) -> SubmissionKey:
    return (
        doc["guildId"],
        doc["leetcodeUsername"],
        doc["questionSlug"],
        date if date is not None else doc["date"],
    )


def intended_utc_date(stored: datetime) -> datetime:
    """UTC midnight the stored date was meant to represent."""
    midnight = utc_midnight(stored)
    hours = (stored - midnight).total_seconds() / 3600
    if hours >= 12:
        return midnight + timedelta(days=1)
    return midnight


def plan_exact_duplicates(docs: Iterable[Dict[str, Any]]) -> List[DuplicateGroup]:
    """Group documents by their unique key and keep the earliest _id of each group."""
    grouped: Dict[SubmissionKey, List[Any]] = defaultdict(list)
    for doc in docs:
        grouped[document_key(doc)].append(doc["_id"])

    plans = []
    for key, ids in grouped.items():
        if len(ids) < 2:
            continue
        ids = sorted(ids)
        plans.append(DuplicateGroup(key=key, keep_id=ids[0], delete_ids=ids[1:]))
    return plans


def plan_timezone_repairs(
    docs: Iterable[Dict[str, Any]],
    existing: Dict[SubmissionKey, Any],
) -> List[TimezoneRepair]:
    """
    Decide what to do with every document whose date is not a UTC midnight.

    existing maps correct (midnight-dated) keys to their _id. Planned fixes are
    added to it so two bad documents for the same day never both survive.
    """
    existing = dict(existing)
    repairs = []
    for doc in sorted(docs, key=lambda d: d["_id"]):
        if is_utc_midnight(doc["date"]):
            continue
        intended = intended_utc_date(doc["date"])
        key = document_key(doc, intended)
        correct_id = existing.get(key)
        if correct_id is not None:
            action = ACTION_DELETE
        else:
            action = ACTION_FIX
            existing[key] = doc["_id"]
        repairs.append(TimezoneRepair(
            doc_id=doc["_id"],
            key=key,
            bad_date=doc["date"],
            intended_date=intended,
            action=action,
            correct_id=correct_id,
        ))
    return repairs


async def _load_documents(collection) -> List[Dict[str, Any]]:
    projection = {"guildId": 1, "leetcodeUsername": 1, "questionSlug": 1, "date": 1}
    return [doc async for doc in collection.find({}, projection)]


async def dedup_submissions(dry_run: bool = False) -> DedupReport:
    """Run both cleanup passes. With dry_run nothing is written."""
    db = await get_database()
    collection = db[DAILY_SUBMISSIONS]
    report = DedupReport(dry_run=dry_run)

    docs = await _load_documents(collection)
    report.exact_groups = plan_exact_duplicates(docs)
    exact_ids = {doc_id for group in report.exact_groups for doc_id in group.delete_ids}

    if not dry_run and exact_ids:
        result = await collection.delete_many({"_id": {"$in": list(exact_ids)}})
        logger.info(f"Pass 1: deleted {result.deleted_count} exact duplicate(s)")

    remaining = [doc for doc in docs if doc["_id"] not in exact_ids]
    existing = {
        document_key(doc): doc["_id"]
        for doc in remaining
        if is_utc_midnight(doc["date"])
    }
    report.repairs = plan_timezone_repairs(remaining, existing)

    if not dry_run:
        delete_ids = [r.doc_id for r in report.repairs if r.action == ACTION_DELETE]
        if delete_ids:
            result = await collection.delete_many({"_id": {"$in": delete_ids}})
            logger.info(f"Pass 2: deleted {result.deleted_count} timezone-offset duplicate(s)")
        for repair in report.repairs:
            if repair.action == ACTION_FIX:
                await collection.update_one(
                    {"_id": repair.doc_id}, {"$set": {"date": repair.intended_date}}
                )
        if report.tz_fixed:
            logger.info(f"Pass 2: fixed {report.tz_fixed} document(s) to UTC-midnight dates")

    return report
