"""The booking the user is assembling before it is submitted."""

import typing as t

from .schema import BookingDraftDetails, CreateBookingData


class BookingDraft:
    """Holds at most one in-progress booking."""

    def __init__(self) -> None:
        self.current: BookingDraftDetails | None = None

    def set_details(self, **details: t.Any) -> BookingDraftDetails:
        """Replace the draft."""
        self.current = BookingDraftDetails(**details)
        return self.current

    def update_details(self, **updates: t.Any) -> BookingDraftDetails:
        """Merge `updates` into the draft, starting one if there is none."""
        if self.current is None:
            return self.set_details(**updates)
        merged = {**self.current.model_dump(exclude_unset=True), **updates}
        self.current = BookingDraftDetails(**merged)
        return self.current

    def clear(self) -> None:
        self.current = None

    def to_create_data(self) -> CreateBookingData:
        """Build the create-booking request from the draft.

        Raises:
            ValueError: If there is no draft or it lacks campaign, ticket type or quantity.
        """
        if self.current is None:
            raise ValueError("No booking in progress")
        missing = [name for name in ("campaign_id", "ticket_type", "quantity") if getattr(self.current, name) is None]
        if missing:
            raise ValueError(f"Booking draft is missing: {', '.join(missing)}")
        return CreateBookingData(
            campaign_id=self.current.campaign_id,
            ticket_type=self.current.ticket_type,
            quantity=self.current.quantity,
            issuance_type=self.current.issuance_type,
        )
