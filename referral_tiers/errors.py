"""Exceptions raised by the referral tier package."""


class ReferralTierError(Exception):
    """Base class for all referral tier errors."""


class ParseError(ReferralTierError, ValueError):
    """A value (e.g. a ``year_month`` string) could not be parsed."""


class InvalidArgument(ReferralTierError, ValueError):
    """An argument violates the contract of the called operation."""
