from __future__ import annotations
from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from roadit.core.clock import as_utc, format_timestamp, truncate_ms


class IssueType(str, PyEnum):
    pothole = "Pothole"
    waterlogging = "Waterlogging"
    broken_road = "Broken Road"
    other = "Other"


class Severity(str, PyEnum):
    minor = "Minor"
    moderate = "Moderate"
    severe = "Severe/Hazardous"


class IssueStatus(str, PyEnum):
    received = "Received"
    under_review = "Under Review"
    repair_scheduled = "Repair Scheduled"
    repair_in_progress = "Repair In Progress"
    resolved = "Resolved"
    cannot_action = "Cannot Action"


class Municipality(str, PyEnum):
    NDMC = "NDMC"
    BMC = "BMC"
    BBMP = "BBMP"
    KMC = "KMC"
    GCC = "GCC"
    GHMC = "GHMC"


class CamelModel(BaseModel):
    """Models that travel as camelCase JSON, both on the wire and in the storage slot."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Location(CamelModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(ge=-180, le=180, allow_inf_nan=False)


class IssueDraft(CamelModel):
    """Everything the reporter supplies; the store fills in id and timestamps."""
    model_config = ConfigDict(frozen=True)

    type: IssueType
    severity: Severity
    status: IssueStatus = IssueStatus.received
    location: Location
    address: str = ""
    photo_url: str = ""
    photo_hint: str = ""
    description: str = ""
    municipality: Municipality
    cannot_action_reason: Optional[str] = None


class Issue(IssueDraft):
    id: str = Field(min_length=1)
    submitted_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None

    @field_validator("submitted_at", "updated_at", "resolved_at")
    @classmethod
    def _utc_millis(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is None:
            return v
        return truncate_ms(as_utc(v))

    @model_validator(mode="after")
    def _submitted_before_updated(self) -> "Issue":
        if self.submitted_at > self.updated_at:
            raise ValueError("submittedAt must not be later than updatedAt")
        return self

    @model_validator(mode="after")
    def _resolved_at_matches_status(self) -> "Issue":
        if (self.status == IssueStatus.resolved) != (self.resolved_at is not None):
            raise ValueError("resolvedAt must be set exactly when status is Resolved")
        return self

    @field_serializer("submitted_at", "updated_at", "resolved_at", when_used="json-unless-none")
    def _iso(self, v: datetime) -> str:
        return format_timestamp(v)


class IssueReport(CamelModel):
    """Body of the report form. The photo arrives as a data URI or an already hosted URL."""
    type: IssueType
    severity: Severity
    location: Location
    municipality: Municipality
    description: str = Field(min_length=10, max_length=4000)
    address: str = Field(default="", max_length=300)
    photo_data_uri: Optional[str] = None
    photo_url: Optional[str] = None
    photo_hint: Optional[str] = None

    @model_validator(mode="after")
    def _needs_photo(self) -> "IssueReport":
        if not (self.photo_data_uri or self.photo_url):
            raise ValueError("Photo is required.")
        return self


class StatusPatch(BaseModel):
    # Plain string so that unknown values reach the workflow and come back as an error envelope.
    status: str = ""


class StatusUpdateIn(CamelModel):
    issue_id: str = ""
    status: str = ""


class StatusUpdateResult(BaseModel):
    success: bool
    issue: Optional[Issue] = None
    error: Optional[str] = None


class AssessIn(CamelModel):
    photo_data_uri: str = ""


class AssessOut(CamelModel):
    success: bool
    issue_type: Optional[IssueType] = None
    severity: Optional[Severity] = None
    error: Optional[str] = None


class MunicipalityIn(BaseModel):
    lat: float
    lng: float


class MunicipalityOut(BaseModel):
    success: bool
    municipality: Optional[str] = None
    code: Optional[Municipality] = None
    error: Optional[str] = None
