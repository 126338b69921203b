"""
Document models for the tracker collections.

Each model maps one MongoDB document (camelCase field names) to a dataclass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

RUN_CHECK_TASK = "runCheck"
DEFAULT_CRON_SCHEDULES = ("0 10 * * *", "0 18 * * *")
DIFFICULTIES = ("Easy", "Medium", "Hard")


def _normalize_discord_id(value: Any) -> Optional[str]:
    """Legacy documents stored unlinked users as the string 'null'."""
    if value is None or value == "null" or value == "":
        return None
    return str(value)


@dataclass
class CronJob:
    schedule: str
    task: str = RUN_CHECK_TASK

    def to_document(self) -> Dict[str, str]:
        return {"schedule": self.schedule, "task": self.task}


@dataclass
class UserStats:
    streak: int = 0
    total_active_days: int = 0
    active_years: List[int] = field(default_factory=list)
    last_updated: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "UserStats":
        return cls(
            streak=int(doc.get("streak") or 0),
            total_active_days=int(doc.get("totalActiveDays") or 0),
            active_years=list(doc.get("activeYears") or []),
            last_updated=doc.get("lastUpdated"),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "streak": self.streak,
            "totalActiveDays": self.total_active_days,
            "activeYears": self.active_years,
            "lastUpdated": self.last_updated,
        }


@dataclass
class Guild:
    guild_id: str
    channel_id: str
    admin_role_id: Optional[str] = None
    users: Dict[str, Optional[str]] = field(default_factory=dict)
    user_stats: Dict[str, UserStats] = field(default_factory=dict)
    cron_jobs: List[CronJob] = field(default_factory=list)
    broadcast_enabled: bool = True
    contest_reminder_enabled: bool = False

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Guild":
        return cls(
            guild_id=str(doc["guildId"]),
            channel_id=str(doc.get("channelId") or ""),
            admin_role_id=doc.get("adminRoleId"),
            users={
                username: _normalize_discord_id(discord_id)
                for username, discord_id in (doc.get("users") or {}).items()
            },
            user_stats={
                username: UserStats.from_document(stats or {})
                for username, stats in (doc.get("userStats") or {}).items()
            },
            cron_jobs=[
                CronJob(schedule=job["schedule"], task=job.get("task", RUN_CHECK_TASK))
                for job in doc.get("cronJobs") or []
            ],
            broadcast_enabled=doc.get("broadcastEnabled", True),
            contest_reminder_enabled=doc.get("contestReminderEnabled", False),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "guildId": self.guild_id,
            "channelId": self.channel_id,
            "adminRoleId": self.admin_role_id,
            "users": dict(self.users),
            "userStats": {name: stats.to_document() for name, stats in self.user_stats.items()},
            "cronJobs": [job.to_document() for job in self.cron_jobs],
            "broadcastEnabled": self.broadcast_enabled,
            "contestReminderEnabled": self.contest_reminder_enabled,
        }

    @property
    def check_schedules(self) -> List[str]:
        return sorted(job.schedule for job in self.cron_jobs if job.task == RUN_CHECK_TASK)

    def username_for_discord_id(self, discord_id: str) -> Optional[str]:
        for username, linked_id in self.users.items():
            if linked_id == str(discord_id):
                return username
        return None


@dataclass
class DailySubmission:
    guild_id: str
    user_id: str
    leetcode_username: str
    date: datetime
    question_title: str
    question_slug: str
    difficulty: str
    submission_time: datetime
    streak: int = 1
    id: Any = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "DailySubmission":
        return cls(
            guild_id=doc["guildId"],
            user_id=doc.get("userId") or doc["leetcodeUsername"],
            leetcode_username=doc["leetcodeUsername"],
            date=doc["date"],
            question_title=doc.get("questionTitle", ""),
            question_slug=doc["questionSlug"],
            difficulty=doc.get("difficulty", "Medium"),
            submission_time=doc.get("submissionTime") or doc["date"],
            streak=int(doc.get("streak") or 1),
            id=doc.get("_id"),
        )

    def to_document(self) -> Dict[str, Any]:
        doc = {
            "guildId": self.guild_id,
            "userId": self.user_id,
            "leetcodeUsername": self.leetcode_username,
            "date": self.date,
            "questionTitle": self.question_title,
            "questionSlug": self.question_slug,
            "difficulty": self.difficulty,
            "submissionTime": self.submission_time,
            "streak": self.streak,
        }
        if self.id is not None:
            doc["_id"] = self.id
        return doc


@dataclass
class TelegramUser:
    leetcode_username: str
    user_id: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    is_enabled: bool = True
    temp_token: Optional[str] = None
    token_expires: Optional[datetime] = None
    created_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    id: Any = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "TelegramUser":
        chat_id = doc.get("telegramChatId")
        return cls(
            leetcode_username=doc["leetcodeUsername"],
            user_id=doc.get("userId"),
            telegram_chat_id=str(chat_id) if chat_id is not None else None,
            is_enabled=doc.get("isEnabled", True),
            temp_token=doc.get("tempToken"),
            token_expires=doc.get("tokenExpires"),
            created_at=doc.get("createdAt"),
            last_updated=doc.get("lastUpdated"),
            id=doc.get("_id"),
        )

    @property
    def is_linked(self) -> bool:
        return bool(self.telegram_chat_id)


@dataclass
class BroadcastLog:
    sender_id: str
    sender_username: str
    type: str
    message: str
    success_count: int = 0
    fail_count: int = 0
    sent_at: Optional[datetime] = None

    def to_document(self) -> Dict[str, Any]:
        return {
            "senderId": self.sender_id,
            "senderUsername": self.sender_username,
            "type": self.type,
            "message": self.message,
            "successCount": self.success_count,
            "failCount": self.fail_count,
            "sentAt": self.sent_at,
        }
