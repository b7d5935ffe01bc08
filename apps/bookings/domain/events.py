"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from datetime import date

from shared.domain.base import DomainEvent


@dataclass
class BookingCreated(DomainEvent):
    """
    Event: A new booking was created

    ``status`` is confirmed for instant-book properties, pending otherwise.
    """
    booking_id: int
    property_id: int
    guest_id: int
    host_id: int
    check_in: date
    check_out: date
    total_price: int
    currency: str
    status: str


@dataclass
class BookingCancelled(DomainEvent):
    """
    Event: Booking was cancelled and its nights released
    """
    booking_id: int
    property_id: int
    guest_id: int
    cancelled_by_id: int
    refund_amount: int
    payment_status: str


@dataclass
class BookingStatusChanged(DomainEvent):
    """
    Event: Booking moved along its lifecycle (other than cancellation)
    """
    booking_id: int
    property_id: int
    old_status: str
    new_status: str


@dataclass
class BookingRescheduled(DomainEvent):
    booking_id: int
    property_id: int
    check_in: date
    check_out: date
    guests: int
    total_price: int
