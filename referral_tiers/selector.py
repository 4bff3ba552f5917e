"""
Campaign office selection by tier and free-text search.

Offices can be TieredOffice objects or mappings with ``tier``, ``name``
and ``address`` keys. Results keep the input order.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Sequence, TypeVar

import pandas as pd

from .records import Tier

ALL_TIERS = "all"

T = TypeVar("T")


def _field(office: Any, key: str) -> Any:
    if isinstance(office, Mapping):
        return office.get(key)
    return getattr(office, key, None)


def resolve_tier_filter(tier_filter: "str | Tier | Iterable[str | Tier] | None") -> set[Tier] | None:
    """
    Normalize a tier filter to a set of tiers, or None for "all".

    Raises:
        InvalidArgument: If a label is not a known tier
    """
    if tier_filter is None:
        return None
    if isinstance(tier_filter, (str, Tier)):
        if isinstance(tier_filter, str) and tier_filter.strip().lower() == ALL_TIERS:
            return None
        return {Tier.from_label(tier_filter)}

    labels = list(tier_filter)
    if not labels or any(str(label).strip().lower() == ALL_TIERS for label in labels):
        return None
    return {Tier.from_label(label) for label in labels}


def _matches_query(name: Any, address: Any, query: str) -> bool:
    return query in str(name or "").lower() or query in str(address or "").lower()


def filter_by_tier_and_query(
    offices: Sequence[T],
    tier_filter: "str | Tier | Iterable[str | Tier] | None" = ALL_TIERS,
    query: str = "",
) -> list[T]:
    """
    Select offices for a campaign.

    Args:
        offices: Tiered offices
        tier_filter: "all", a tier label, or several labels
        query: Case-insensitive substring of name or address

    Returns:
        Matching offices in their original order
    """
    tiers = resolve_tier_filter(tier_filter)
    q = (query or "").strip().lower()

    selected = []
    for office in offices:
        if tiers is not None:
            tier = _field(office, "tier")
            if tier is None or Tier.from_label(tier) not in tiers:
                continue
        if q and not _matches_query(_field(office, "name"), _field(office, "address"), q):
            continue
        selected.append(office)
    return selected


def filter_frame(
    df: pd.DataFrame,
    tier_filter: "str | Tier | Iterable[str | Tier] | None" = ALL_TIERS,
    query: str = "",
) -> pd.DataFrame:
    """Same selection over a DataFrame with tier, name and address columns."""
    tiers = resolve_tier_filter(tier_filter)
    q = (query or "").strip().lower()

    mask = pd.Series(True, index=df.index)
    if tiers is not None:
        mask &= df["tier"].astype(str).isin([t.value for t in tiers])
    if q:
        text = df.reindex(columns=["name", "address"]).fillna("").astype(str)
        mask &= (
            text["name"].str.lower().str.contains(q, regex=False)
            | text["address"].str.lower().str.contains(q, regex=False)
        )
    return df[mask]
