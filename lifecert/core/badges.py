from typing import NamedTuple


class Badge(NamedTuple):
    color: str
    icon: str


DEFAULT_BADGE = Badge("gray", "clock")

STATUS_BADGES = {
    "approved": Badge("green", "check"),
    "rejected": Badge("red", "cross"),
    "needs_review": Badge("yellow", "alert"),
}


def status_badge(status: str) -> Badge:
    """Badge for a certificate status; pending and unknown values fall back to gray."""
    return STATUS_BADGES.get(status, DEFAULT_BADGE)


def status_label(status: str) -> str:
    return status.replace("_", " ").upper()
