"""Query key factory.

Keys are tuples, so a shorter key is a prefix of every key below it and can be
used to invalidate a whole group (e.g. `BOOKINGS_ALL`).
"""

import typing as t

QueryKey = tuple[t.Hashable, ...]


def _freeze(value: t.Any) -> t.Hashable:
    """Make filter dicts usable inside a key."""
    if isinstance(value, dict):
        return tuple(sorted((k, _freeze(v)) for k, v in value.items() if v is not None))
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    if hasattr(value, "model_dump"):
        return _freeze(value.model_dump(exclude_none=True))
    return t.cast(t.Hashable, value)


# Auth
AUTH_USER: QueryKey = ("auth", "user")
AUTH_PROFILE: QueryKey = ("auth", "profile")
AUTH_APPLICATION_STATUS: QueryKey = ("auth", "application-status")

# Campaigns
CAMPAIGNS_ALL: QueryKey = ("campaigns",)


def campaigns_list(filters: t.Any = None) -> QueryKey:
    return ("campaigns", "list", _freeze(filters))


def campaign_detail(campaign_id: str) -> QueryKey:
    return ("campaigns", "detail", campaign_id)


def campaigns_featured(limit: int | None = None) -> QueryKey:
    return ("campaigns", "featured", limit)


def campaigns_suggestions(query: str) -> QueryKey:
    return ("campaigns", "suggestions", query)


def campaigns_seller(filters: t.Any = None) -> QueryKey:
    return ("campaigns", "seller", _freeze(filters))


def campaign_analytics(campaign_id: str, params: t.Any = None) -> QueryKey:
    return ("campaigns", "analytics", campaign_id, _freeze(params))


# Bookings
BOOKINGS_ALL: QueryKey = ("bookings",)


def bookings_list(filters: t.Any = None) -> QueryKey:
    return ("bookings", "list", _freeze(filters))


def my_bookings(filters: t.Any = None) -> QueryKey:
    return ("bookings", "my-bookings", _freeze(filters))


def booking_detail(booking_id: str) -> QueryKey:
    return ("bookings", "detail", booking_id)


def bookings_by_campaign(campaign_id: str) -> QueryKey:
    return ("bookings", "by-campaign", campaign_id)


def campaign_booking_stats(campaign_id: str) -> QueryKey:
    return ("bookings", "campaign-stats", campaign_id)


# Payments
PAYMENTS_ALL: QueryKey = ("payments",)


def payment_history(filters: t.Any = None) -> QueryKey:
    return ("payments", "history", _freeze(filters))


def payment_verify(reference: str) -> QueryKey:
    return ("payments", "verify", reference)


# Finance
FINANCE_DASHBOARD: QueryKey = ("finance", "dashboard")


def finance_transactions(filters: t.Any = None) -> QueryKey:
    return ("finance", "transactions", _freeze(filters))


def finance_withdrawals(filters: t.Any = None) -> QueryKey:
    return ("finance", "withdrawals", _freeze(filters))


def finance_analytics(params: t.Any = None) -> QueryKey:
    return ("finance", "analytics", _freeze(params))
