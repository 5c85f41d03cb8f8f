from datetime import datetime, timezone
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.medicine import Medicine
from app.models.user import User
from app.schemas.activity import ActivityEntry

PER_SOURCE_LIMIT = 20
FEED_LIMIT = 5


def _action(created_at, updated_at) -> str:
    return "created" if created_at == updated_at else "updated"


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything stored is UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def merge_activities(medicines, users, limit: int = FEED_LIMIT) -> list[ActivityEntry]:
    """Merge medicine and user rows into one feed, newest first."""
    entries = [
        ActivityEntry(
            type="medicine",
            action=_action(m.created_at, m.updated_at),
            name=m.name,
            user=m.created_by,
            timestamp=_aware(m.updated_at),
        )
        for m in medicines
    ]
    entries += [
        ActivityEntry(
            type="user",
            action=_action(u.created_at, u.updated_at),
            username=u.username,
            timestamp=_aware(u.updated_at),
        )
        for u in users
    ]
    entries.sort(key=lambda e: e.timestamp, reverse=True)
    return entries[:limit]


class ActivityService:
    async def recent_activities(
        self,
        db: AsyncSession,
        limit: int = FEED_LIMIT,
        per_source: int = PER_SOURCE_LIMIT,
    ) -> list[ActivityEntry]:
        medicines = (await db.execute(
            select(Medicine).order_by(Medicine.updated_at.desc()).limit(per_source)
        )).scalars().all()
        users = (await db.execute(
            select(User).order_by(User.updated_at.desc()).limit(per_source)
        )).scalars().all()
        return merge_activities(medicines, users, limit)


activity_service = ActivityService()
