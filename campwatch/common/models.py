"""
Data models for the availability watcher
"""
from datetime import timedelta
from enum import Enum
from typing import Optional, List, Tuple, Sequence

from dateutil import parser as date_parser
from pydantic import BaseModel, ConfigDict, Field, model_validator


CAMPGROUND_URL = "https://www.recreation.gov/camping/campgrounds/{campground_id}"


# The only upstream status that counts as bookable
AVAILABLE_STATUS = "Available"


class PollTrigger(str, Enum):
    SCHEDULED = "scheduled"
    MANUAL = "manual"


class PollOutcome(str, Enum):
    FAILED = "failed"
    NOTHING = "nothing"
    PARTIAL = "partial"
    MATCHED = "matched"


class AvailabilityRecord(BaseModel):
    """Open nights for one campsite in one campground/month"""
    model_config = ConfigDict(frozen=True)

    campground_id: str
    site_id: str
    site_name: Optional[str] = None  # e.g., "A001"
    loop: Optional[str] = None
    site_type: Optional[str] = None  # STANDARD NONELECTRIC, GROUP, etc.
    available_dates: Tuple[str, ...] = ()
    month: str

    @property
    def display_name(self) -> str:
        return self.site_name or self.site_id

    @property
    def booking_url(self) -> str:
        return CAMPGROUND_URL.format(campground_id=self.campground_id)


class MatchedSite(AvailabilityRecord):
    """A record together with the run of nights that qualified it"""
    matched_run: Tuple[str, ...]

    @model_validator(mode="after")
    def _check_run(self) -> "MatchedSite":
        if not self.matched_run:
            raise ValueError("matched_run must not be empty")

        days = [date_parser.isoparse(d).date() for d in self.matched_run]
        for prev, curr in zip(days, days[1:]):
            if curr - prev != timedelta(days=1):
                raise ValueError(f"matched_run is not consecutive: {prev} -> {curr}")

        size = len(self.matched_run)
        dates = self.available_dates
        if not any(
            dates[i:i + size] == self.matched_run
            for i in range(len(dates) - size + 1)
        ):
            raise ValueError("matched_run is not a contiguous part of available_dates")
        return self

    @classmethod
    def from_record(cls, record: AvailabilityRecord, run: Sequence[str]) -> "MatchedSite":
        return cls(**record.model_dump(), matched_run=tuple(run))


class PollResult(BaseModel):
    """What a single poll cycle saw and decided"""
    label: str
    trigger: PollTrigger
    outcome: PollOutcome
    records: List[AvailabilityRecord] = Field(default_factory=list)
    matches: List[MatchedSite] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def total_nights(self) -> int:
        return sum(len(r.available_dates) for r in self.records)


class PollState(BaseModel):
    """
    Process-wide counters.

    poll_count is only advanced by scheduled polls and last_update_id only by
    the command listener, so each field has a single writer.
    """
    poll_count: int = 0
    last_update_id: int = 0

    def next_poll(self) -> int:
        """Count a scheduled poll and return its number"""
        self.poll_count += 1
        return self.poll_count

    def advance_update_id(self, update_id: int) -> bool:
        """Move the long-poll cursor forward; never backwards"""
        if update_id <= self.last_update_id:
            return False
        self.last_update_id = update_id
        return True

    def snapshot(self) -> "PollState":
        return self.model_copy()


class ChatUpdate(BaseModel):
    """One inbound Telegram update, reduced to what the listener needs"""
    update_id: int
    chat_id: Optional[str] = None
    text: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "ChatUpdate":
        message = data.get("message") or {}
        chat = message.get("chat") or {}
        chat_id = chat.get("id")
        return cls(
            update_id=data["update_id"],
            chat_id=str(chat_id) if chat_id is not None else None,
            text=message.get("text"),
        )


class SendResult(BaseModel):
    """Outcome of a sendMessage call"""
    ok: bool
    description: Optional[str] = None
