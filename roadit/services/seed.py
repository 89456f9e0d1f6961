# roadit/services/seed.py
from datetime import datetime, timezone

from roadit.schemas.issue import Issue, IssueStatus, IssueType, Location, Municipality, Severity

PLACEHOLDER_PHOTO = "https://placehold.co/600x400.png"


def _at(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


# Sample issues shown on first start, before anyone has reported anything.
SEED_ISSUES: tuple[Issue, ...] = (
    Issue(
        id="1",
        type=IssueType.pothole,
        severity=Severity.moderate,
        status=IssueStatus.received,
        location=Location(lat=28.6139, lng=77.2090),
        address="Connaught Place, New Delhi, Delhi",
        photo_url=PLACEHOLDER_PHOTO,
        photo_hint="pothole road",
        description="Large pothole in the middle of the road, causing traffic issues.",
        submitted_at=_at("2025-07-15T10:00:00"),
        updated_at=_at("2025-07-15T10:00:00"),
        municipality=Municipality.NDMC,
    ),
    Issue(
        id="2",
        type=IssueType.waterlogging,
        severity=Severity.severe,
        status=IssueStatus.under_review,
        location=Location(lat=12.9716, lng=77.5946),
        address="MG Road, Bengaluru, Karnataka",
        photo_url=PLACEHOLDER_PHOTO,
        photo_hint="waterlogged street",
        description="Severe waterlogging after rain, making the road impassable for smaller vehicles.",
        submitted_at=_at("2025-07-14T14:30:00"),
        updated_at=_at("2025-07-16T11:20:00"),
        municipality=Municipality.BBMP,
    ),
    Issue(
        id="3",
        type=IssueType.broken_road,
        severity=Severity.minor,
        status=IssueStatus.resolved,
        location=Location(lat=19.0760, lng=72.8777),
        address="Bandra Kurla Complex, Mumbai, Maharashtra",
        photo_url=PLACEHOLDER_PHOTO,
        photo_hint="cracked asphalt",
        description="Minor cracks on the pavement.",
        submitted_at=_at("2025-07-10T09:00:00"),
        updated_at=_at("2025-07-18T16:45:00"),
        resolved_at=_at("2025-07-18T16:45:00"),
        municipality=Municipality.BMC,
    ),
    Issue(
        id="4",
        type=IssueType.pothole,
        severity=Severity.severe,
        status=IssueStatus.repair_in_progress,
        location=Location(lat=22.5726, lng=88.3639),
        address="Park Street, Kolkata, West Bengal",
        photo_url=PLACEHOLDER_PHOTO,
        photo_hint="deep pothole",
        description="A very deep and dangerous pothole near the main crossing. Multiple vehicles have been damaged.",
        submitted_at=_at("2025-06-20T11:00:00"),
        updated_at=_at("2025-07-20T10:00:00"),
        municipality=Municipality.KMC,
    ),
)
