from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.dialects.mysql import DATETIME as MySQLDateTime
from sqlmodel import Field, SQLModel


def _utc_now():
    return datetime.now(timezone.utc)


def timestamp_type():
    return DateTime(timezone=True).with_variant(MySQLDateTime(fsp=6), 'mysql')


class IDModel(SQLModel):
    # Autoincrement keeps ids in insertion order; used as the ordering tie-breaker.
    id: Optional[int] = Field(default=None, primary_key=True)


class CreatedAtModel(SQLModel):
    created_at: datetime = Field(
        default_factory=_utc_now,
        sa_type=timestamp_type(),
        index=True,
        sa_column_kwargs={'nullable': False},
    )
