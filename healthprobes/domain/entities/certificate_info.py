from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

HOSTNAME_KEY = "hostname"
PORT_KEY = "port"
EXPIRY_DATE_KEY = "expiry-date"
DAYS_REMAINING_KEY = "days-remaining"

SECONDS_PER_DAY = 86_400


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class CertificateInfo:
    """Peer certificate presented by ``hostname:port``."""
    hostname: str
    port: int
    not_after: datetime
    not_before: Optional[datetime] = None
    subject: str = ""
    issuer: str = ""

    @property
    def expiry_utc(self) -> datetime:
        return _as_utc(self.not_after)

    def days_remaining(self, now: Optional[datetime] = None) -> int:
        """Whole days until expiry, rounded half to even; negative once expired."""
        current = _as_utc(now) if now is not None else datetime.now(timezone.utc)
        return int(round((self.expiry_utc - current).total_seconds() / SECONDS_PER_DAY))

    def verify(self, now: Optional[datetime] = None) -> Optional[str]:
        """Check the validity window. Returns a reason on failure, else None."""
        current = _as_utc(now) if now is not None else datetime.now(timezone.utc)
        if self.not_before is not None and current < _as_utc(self.not_before):
            return f"certificate not valid before {_as_utc(self.not_before).isoformat()}"
        if current > self.expiry_utc:
            return f"certificate expired at {self.expiry_utc.isoformat()}"
        return None
