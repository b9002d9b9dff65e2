from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .questionnaire import GateRule, Questionnaire


class JobStatus(str, Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"


class JobPosting(BaseModel):
    """Job posting with its optional screening questionnaire."""

    job_id: str = Field(alias="id")
    slug: str = ""
    title: str = ""
    status: JobStatus = JobStatus.ACTIVE
    archived: bool = False
    expires_at: datetime = Field(alias="expiresAt")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    questionnaire: Questionnaire | None = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("expires_at", "created_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def is_open(self, now: datetime) -> bool:
        """Return True when candidates can still see and apply to the job."""
        return (
            self.status is JobStatus.ACTIVE
            and not self.archived
            and self.expires_at > now
        )

    def gate_rules(self) -> list[GateRule]:
        if self.questionnaire is None:
            return []
        return self.questionnaire.ordered_rules()
