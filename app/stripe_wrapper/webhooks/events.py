"""
Verified webhook event envelope.

A WebhookEvent is built exactly once per inbound delivery, after the
signature has been verified, and is handed unchanged to every matching
handler. It is never persisted by this app.

Usage:
    from stripe_wrapper.webhooks.events import WebhookEvent

    def handle(event: WebhookEvent) -> None:
        logger.info(
            "Handling event",
            extra={"event_id": event.id, "object_id": event.object_id},
        )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from core.helpers import from_unix_timestamp, get_field, to_plain_dict

if TYPE_CHECKING:
    from datetime import datetime
    from typing import Any

    import stripe


@dataclass(frozen=True)
class WebhookEvent:
    """
    Immutable representation of one verified Stripe event.

    Attributes:
        id: Stripe event id (evt_...)
        type: Dot-namespaced event type (e.g. "payment_intent.succeeded")
        payload: The event's data.object; a Stripe SDK object whose class
            is selected by its "object" discriminator where the SDK knows it
        created_at: When Stripe created the event (aware, UTC)
        livemode: Whether the event came from live mode
        api_version: API version used to render the payload
        previous_attributes: Changed fields for *.updated events
        raw: The full parsed stripe.Event
    """

    id: str
    type: str
    payload: Any
    created_at: datetime | None
    livemode: bool = False
    api_version: str | None = None
    previous_attributes: dict[str, Any] | None = None
    raw: Any = field(default=None, repr=False, compare=False)

    @classmethod
    def from_stripe_event(cls, event: stripe.Event) -> WebhookEvent:
        data = get_field(event, "data")

        return cls(
            id=event["id"],
            type=event["type"],
            payload=get_field(data, "object"),
            created_at=from_unix_timestamp(get_field(event, "created")),
            livemode=bool(get_field(event, "livemode", False)),
            api_version=get_field(event, "api_version"),
            previous_attributes=to_plain_dict(get_field(data, "previous_attributes")),
            raw=event,
        )

    @property
    def object_id(self) -> str | None:
        """Id of the object the event describes, if it has one."""
        return get_field(self.payload, "id")

    @property
    def object_type(self) -> str | None:
        """The payload's "object" discriminator (e.g. "payment_intent")."""
        return get_field(self.payload, "object")
