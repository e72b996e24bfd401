"""Pydantic models for schedule and session data.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Models that flow through the reconciliation pipeline are frozen: each stage
returns new instances via model_copy(update=...) instead of mutating its input.
"""

import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

Period = Literal["AM", "PM"]
SessionRole = Literal["parent", "child"]


class ClockTime(BaseModel):
    """A wall-clock time in canonical 12-hour form, e.g. ("09:30", "AM")."""

    model_config = ConfigDict(frozen=True)

    time: str = "00:00"
    period: Period = "AM"

    @property
    def minutes(self) -> int:
        """Minutes since midnight.

        Hours of 13 and above are read as 24-hour values regardless of period,
        so "13:05 PM" and "01:05 PM" both give 785.
        """
        hh, _, mm = self.time.partition(":")
        try:
            hour = int(hh or 0)
            minute = int(mm or 0)
        except ValueError:
            return 0
        if hour >= 13:
            return hour * 60 + minute
        if self.period == "PM" and hour != 12:
            hour += 12
        if self.period == "AM" and hour == 12:
            hour = 0
        return hour * 60 + minute

    def label(self) -> str:
        """Render as "HH:MM AM"."""
        return f"{self.time} {self.period}"


class Session(BaseModel):
    """A single schedule entry after normalization.

    parent_title carries an explicit parent-session reference from the source
    record (by title) until the linker has resolved it into a parent_id.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    schedule_id: str = ""
    title: str
    start_time: ClockTime = ClockTime()
    end_time: ClockTime = ClockTime()
    date: datetime.date | None = None
    location: str = ""
    session_type: SessionRole = "parent"
    parent_id: str | None = None
    parent_title: str | None = None
    tags: tuple[str, ...] = ()

    @property
    def is_child(self) -> bool:
        return self.session_type == "child"


class ImportedRowMapping(BaseModel):
    """One declared session row from an uploaded schedule sheet.

    Persisted per (event, schedule) and consulted on every reload, since the
    backend does not echo parent linkage back.
    """

    model_config = ConfigDict(frozen=True)

    signature: str
    title: str
    date_key: str
    location: str = ""
    start_time: str
    start_period: Period
    end_time: str
    end_period: Period
    session_type: SessionRole
    parent_title: str | None = None
    crosses_midnight: bool = False

    @property
    def start(self) -> ClockTime:
        return ClockTime(time=self.start_time, period=self.start_period)

    @property
    def end(self) -> ClockTime:
        return ClockTime(time=self.end_time, period=self.end_period)


class Schedule(BaseModel):
    """A named schedule owning zero or more sessions."""

    id: str = Field(validation_alias=AliasChoices("uuid", "id"))
    name: str = Field(default="Schedule", validation_alias=AliasChoices("name", "title"))

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value)


class TimezoneOption(BaseModel):
    """A timezone entry from the lookup service: backend identifier + IANA name."""

    identifier: str = Field(
        validation_alias=AliasChoices("identifier", "uuid", "id"),
    )
    iana_name: str = Field(
        validation_alias=AliasChoices("iana_name", "ianaName", "name"),
    )
    label: str = ""  # Display label, e.g. "(UTC+01:00) Paris"

    @field_validator("identifier", mode="before")
    @classmethod
    def _coerce_identifier(cls, value):
        return str(value)
