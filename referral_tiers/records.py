"""
Record and profile types for referral tiering.

MonthlyReferralRecord rows are owned by the data-access layer; everything
else here is derived and recomputed on every read.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import InvalidArgument


class Tier(str, Enum):
    """Relationship tier of a referring office."""

    VIP = "VIP"
    WARM = "Warm"
    COLD = "Cold"
    DORMANT = "Dormant"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_label(cls, label: "str | Tier") -> "Tier":
        """Look up a tier by its label, case-insensitively."""
        if isinstance(label, Tier):
            return label
        for tier in cls:
            if tier.value.lower() == str(label).strip().lower():
                return tier
        raise InvalidArgument(
            f"Unknown tier {label!r}, expected one of {[t.value for t in cls]}"
        )


TIER_ORDER = [Tier.VIP, Tier.WARM, Tier.COLD, Tier.DORMANT]


@dataclass(frozen=True)
class MonthlyReferralRecord:
    """Referral count for one office in one calendar month."""

    office_id: str
    year_month: str
    referral_count: int = 0


@dataclass(frozen=True)
class OfficeReferralProfile:
    """
    Rolling referral metrics for one office.

    Attributes:
        office_id: Office identifier
        l12: Referrals in the trailing 12 calendar months
        r3: Referrals in the trailing 3 calendar months
        mslr: Months since last referral (0 = referred this month)
        total_referrals: All-time referrals up to the anchor month
        last_active_month: Most recent YYYY-MM with referrals, if any
    """

    office_id: str
    l12: int = 0
    r3: int = 0
    mslr: int = 0
    total_referrals: int = 0
    last_active_month: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: dict) -> "OfficeReferralProfile":
        """Build a profile from a loose mapping, missing numbers default to 0."""
        last_active = data.get("last_active_month")
        return cls(
            office_id=str(data.get("office_id", "")),
            l12=int(data.get("l12") or 0),
            r3=int(data.get("r3") or 0),
            mslr=int(data.get("mslr") or 0),
            total_referrals=int(data.get("total_referrals") or 0),
            # NaN from a DataFrame row is truthy, only real strings count
            last_active_month=last_active if isinstance(last_active, str) and last_active else None,
        )


@dataclass(frozen=True)
class TieredOffice:
    """Profile with its assigned tier and directory details."""

    profile: OfficeReferralProfile
    tier: Tier
    name: str = ""
    address: str = ""

    @property
    def office_id(self) -> str:
        return self.profile.office_id

    @property
    def l12(self) -> int:
        return self.profile.l12

    @property
    def r3(self) -> int:
        return self.profile.r3

    @property
    def mslr(self) -> int:
        return self.profile.mslr
