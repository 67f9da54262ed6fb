"""Per-user settings stored alongside habits."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class UserSettings(SQLModel, table=True):
    """End-of-day reset time for a user.

    ``end_of_day_meridiem`` is only set on rows written by older clients,
    which kept the hour on a 12-hour clock.
    """

    __tablename__: ClassVar[str] = "user_settings"

    user_id: str = Field(primary_key=True, max_length=64)
    end_of_day_hour: str = Field(default="4", max_length=2)
    end_of_day_minute: str = Field(default="00", max_length=2)
    end_of_day_meridiem: Optional[str] = Field(default=None, max_length=2)
