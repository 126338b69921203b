"""
Daily submission records, streaks and leaderboard aggregation.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pymongo.errors import DuplicateKeyError

from libs.db.database import DAILY_SUBMISSIONS, get_database
from libs.db.models import DIFFICULTIES, DailySubmission
from libs.leetcode.parsing import utc_midnight

logger = logging.getLogger(__name__)

DEFAULT_LEADERBOARD_LIMIT = 10


def submission_key(guild_id: str, username: str, slug: str, day: datetime) -> Dict[str, Any]:
    """Unique key of a daily submission record."""
    return {
        "guildId": str(guild_id),
        "leetcodeUsername": username,
        "questionSlug": slug,
        "date": utc_midnight(day),
    }


def next_streak(previous: Optional[DailySubmission], day: datetime) -> int:
    """
    Streak for a completion on day, given the user's latest earlier record.

    Consecutive UTC days extend the streak, a second record on the same day
    keeps it, and any gap resets it to 1.
    """
    if previous is None:
        return 1
    day = utc_midnight(day)
    previous_day = utc_midnight(previous.date)
    if previous_day == day - timedelta(days=1):
        return previous.streak + 1
    if previous_day == day:
        return previous.streak
    return 1


async def _collection():
    db = await get_database()
    return db[DAILY_SUBMISSIONS]


async def _latest_before(collection, guild_id: str, username: str, day: datetime) -> Optional[DailySubmission]:
    """The user's most recent record dated on or before day."""
    cursor = collection.find(
        {"guildId": str(guild_id), "leetcodeUsername": username, "date": {"$lte": day}}
    ).sort("date", -1).limit(1)
    async for doc in cursor:
        return DailySubmission.from_document(doc)
    return None


async def get_daily_submission(
    guild_id: str, username: str, slug: str, day: datetime
) -> Optional[DailySubmission]:
    collection = await _collection()
    doc = await collection.find_one(submission_key(guild_id, username, slug, day))
    return DailySubmission.from_document(doc) if doc else None


async def record_daily_submission(
    guild_id: str,
    username: str,
    user_id: Optional[str],
    question_title: str,
    question_slug: str,
    difficulty: str,
    submission_time: datetime,
    day: Optional[datetime] = None,
) -> Tuple[DailySubmission, bool]:
    """
    Store a completion unless one already exists for this guild, user, problem and day.

    Returns the stored record and whether this call created it.
    """
    collection = await _collection()
    day = utc_midnight(day or submission_time)
    key = submission_key(guild_id, username, question_slug, day)

    existing = await collection.find_one(key)
    if existing:
        return DailySubmission.from_document(existing), False

    previous = await _latest_before(collection, guild_id, username, day)
    submission = DailySubmission(
        guild_id=str(guild_id),
        user_id=str(user_id) if user_id else username,
        leetcode_username=username,
        date=day,
        question_title=question_title,
        question_slug=question_slug,
        difficulty=difficulty if difficulty in DIFFICULTIES else "Medium",
        submission_time=submission_time,
        streak=next_streak(previous, day),
    )

    try:
        result = await collection.update_one(
            key, {"$setOnInsert": submission.to_document()}, upsert=True
        )
    except DuplicateKeyError:
        logger.info(f"Concurrent insert for {username}/{question_slug} on {day.date()}, keeping existing record")
        result = None

    if result is None or result.upserted_id is None:
        stored = await collection.find_one(key)
        return DailySubmission.from_document(stored), False

    submission.id = result.upserted_id
    logger.info(
        f"Recorded daily submission: guild={guild_id} user={username} "
        f"slug={question_slug} date={day.date()} streak={submission.streak}"
    )
    return submission, True


async def get_current_streak(guild_id: str, username: str, today: Optional[datetime] = None) -> int:
    """Streak of the user's latest record if it is from today or yesterday, else 0."""
    collection = await _collection()
    today = utc_midnight(today)
    latest = await _latest_before(collection, guild_id, username, today)
    if latest is None:
        return 0
    if utc_midnight(latest.date) >= today - timedelta(days=1):
        return latest.streak
    return 0


async def get_user_submissions(guild_id: str, username: str, limit: int = 30) -> List[DailySubmission]:
    collection = await _collection()
    cursor = collection.find(
        {"guildId": str(guild_id), "leetcodeUsername": username}
    ).sort("date", -1).limit(limit)
    return [DailySubmission.from_document(doc) async for doc in cursor]


async def get_leaderboard_data(guild_id: str, limit: int = DEFAULT_LEADERBOARD_LIMIT) -> List[Dict[str, Any]]:
    """
    All-time leaderboard for a guild.

    Counts the unique daily challenges each LeetCode username completed,
    sorted descending.
    """
    if not guild_id:
        logger.error("get_leaderboard_data called without a guild id")
        return []

    collection = await _collection()
    pipeline = [
        {"$match": {"guildId": str(guild_id)}},
        {"$group": {
            "_id": "$leetcodeUsername",
            "uniqueQuestionSlugs": {"$addToSet": "$questionSlug"},
        }},
        {"$project": {
            "_id": 0,
            "leetcodeUsername": "$_id",
            "uniqueCompletions": {"$size": "$uniqueQuestionSlugs"},
        }},
        {"$sort": {"uniqueCompletions": -1, "leetcodeUsername": 1}},
        {"$limit": limit},
    ]
    leaderboard = [row async for row in collection.aggregate(pipeline)]
    logger.info(f"Fetched leaderboard for guild {guild_id}: {len(leaderboard)} users")
    return leaderboard


async def count_submissions_by_guild(guild_ids: Iterable[str]) -> Dict[str, int]:
    collection = await _collection()
    pipeline = [
        {"$match": {"guildId": {"$in": [str(gid) for gid in guild_ids]}}},
        {"$group": {"_id": "$guildId", "submissions": {"$sum": 1}}},
    ]
    return {row["_id"]: row.get("submissions", 0) async for row in collection.aggregate(pipeline)}


async def count_all_submissions() -> int:
    collection = await _collection()
    return await collection.count_documents({})
