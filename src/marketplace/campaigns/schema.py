"""Schema for campaigns (the events sellers put on sale)."""

import typing as t
from datetime import datetime
from enum import StrEnum

from pydantic import Field

from marketplace.common.schema import Pagination, Schema


class EventType(StrEnum):
    CONCERT = "CONCERT"
    SPORTS = "SPORTS"
    THEATER = "THEATER"
    CONFERENCE = "CONFERENCE"
    FESTIVAL = "FESTIVAL"
    BAR = "BAR"
    HOTEL = "HOTEL"
    OTHER = "OTHER"


class CampaignStatus(StrEnum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    ENDED = "ENDED"
    CANCELLED = "CANCELLED"


class TicketType(Schema):
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=0)
    sold: int | None = None
    description: str | None = None
    max_per_order: int | None = None
    benefits: list[str] | None = None

    @property
    def remaining(self) -> int:
        return max(self.quantity - (self.sold or 0), 0)


class CampaignSeller(Schema):
    id: str
    business_name: str


class CampaignAnalytics(Schema):
    total_views: int = 0
    total_bookings: int = 0


class Campaign(Schema):
    id: str
    title: str
    description: str = ""
    event_type: EventType = EventType.OTHER
    ticket_types: dict[str, TicketType] = Field(default_factory=dict)
    total_quantity: int = 0
    sold_quantity: int = 0
    max_per_customer: int = 0
    event_date: datetime | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    venue: str = ""
    venue_address: str = ""
    venue_city: str = ""
    venue_country: str | None = None
    cover_image: str = ""
    images: list[str] | None = None
    status: CampaignStatus = CampaignStatus.DRAFT
    is_multi_scan: bool | None = None
    max_scans_per_ticket: int | None = None
    tags: list[str] | None = None
    metadata: dict[str, t.Any] | None = None
    seller: CampaignSeller | None = None
    analytics: CampaignAnalytics | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def lowest_price(self) -> float | None:
        prices = [ticket_type.price for ticket_type in self.ticket_types.values()]
        return min(prices) if prices else None

    @property
    def is_sold_out(self) -> bool:
        return self.total_quantity > 0 and self.sold_quantity >= self.total_quantity


class CampaignInput(Schema):
    """Fields a seller sends to create or update a campaign; unset fields are omitted."""

    title: str | None = Field(default=None, min_length=3)
    description: str | None = Field(default=None, min_length=20)
    event_type: EventType | None = None
    ticket_types: dict[str, TicketType] | None = None
    total_quantity: int | None = None
    max_per_customer: int | None = None
    event_date: datetime | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    venue: str | None = None
    venue_address: str | None = None
    venue_city: str | None = None
    venue_country: str | None = None
    cover_image: str | None = None
    images: list[str] | None = None
    status: CampaignStatus | None = None
    is_multi_scan: bool | None = None
    max_scans_per_ticket: int | None = None
    tags: list[str] | None = None
    metadata: dict[str, t.Any] | None = None


class CampaignList(Schema):
    campaigns: list[Campaign] = Field(default_factory=list)
    pagination: Pagination | None = None


SortBy = t.Literal["eventDate", "createdAt", "price", "popularity"]


class CampaignFilters(Schema):
    search: str | None = None
    event_type: EventType | None = None
    city: str | None = None
    price_min: float | None = None
    price_max: float | None = None
    date_from: str | None = None
    date_to: str | None = None
    tags: str | None = None
    sort_by: SortBy | None = None
    sort_order: t.Literal["asc", "desc"] | None = None
    page: int | None = None
    limit: int | None = None


class SellerCampaignFilters(Schema):
    status: CampaignStatus | None = None
    page: int | None = None
    limit: int | None = None
