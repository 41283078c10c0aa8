"""
Access key models using Pydantic.
"""

from datetime import date, datetime, time, timezone
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class AccessKey(BaseModel):
    """A dashboard access key valid until the start of ``until`` (UTC)"""
    key: str = Field(..., min_length=1)
    until: date

    @field_validator('key')
    @classmethod
    def key_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Access key must not be blank')
        return v

    @property
    def expires_at(self) -> datetime:
        return datetime.combine(self.until, time.min, tzinfo=timezone.utc)

    def is_active(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.now(timezone.utc)) < self.expires_at
