"""Domain services for booking workflows.

Availability checking, pricing and the state-changing workflows
(create, cancel, transition, reschedule, confirm payment) live here.
Views and tasks call these functions with the acting user passed in
explicitly; nothing reads the current user from a request.

Double booking is prevented in two layers. The availability query is a
fast pre-check with a readable error. The ``BookingNight`` table holds
one row per occupied (property, night) under a unique constraint, so two
requests that both passed the pre-check still cannot both commit.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.properties.models import Property
from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import ValueObject
from shared.domain.exceptions import (
    Conflict,
    Forbidden,
    IllegalStateTransition,
    InvalidRequest,
    NotFound,
)
from shared.domain.value_objects import DateRange, Money

from .domain.events import (
    BookingCancelled,
    BookingCreated,
    BookingRescheduled,
    BookingStatusChanged,
)
from .models import Booking, BookingNight

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from apps.users.models import User

logger = logging.getLogger(__name__)

DATES_UNAVAILABLE = "dates unavailable"


# ============================================================================
# AVAILABILITY
# ============================================================================

def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset
    return queryset.select_for_update()


def is_property_available(property_id, check_in: date, check_out: date, exclude_booking_id=None) -> bool:
    """True iff no pending or confirmed booking of the property overlaps [check_in, check_out)."""

    bookings = Booking.objects.filter(property_id=property_id).active().overlapping(check_in, check_out)
    if exclude_booking_id is not None:
        bookings = bookings.exclude(pk=exclude_booking_id)
    return not bookings.exists()


def ensure_property_is_available(property_id, check_in: date, check_out: date, *, exclude_booking_id=None) -> None:
    """Same check as ``is_property_available`` but raises ``Conflict``."""

    if not is_property_available(property_id, check_in, check_out, exclude_booking_id=exclude_booking_id):
        logger.info(f"Property {property_id} is not available for {check_in} - {check_out}")
        raise Conflict(DATES_UNAVAILABLE, property_id=property_id)


# ============================================================================
# PRICING
# ============================================================================

@dataclass(frozen=True)
class PriceQuote(ValueObject):
    """Price breakdown of a stay in minor units."""
    nightly_rate: int
    nights: int
    cleaning_fee: int
    service_fee: int
    total: int
    currency: str

    @property
    def subtotal(self) -> int:
        return self.nightly_rate * self.nights

    def as_money(self) -> Money:
        return Money(self.total, self.currency)

    def to_dict(self) -> dict:
        return {
            "nightly_rate": self.nightly_rate,
            "nights": self.nights,
            "subtotal": self.subtotal,
            "cleaning_fee": self.cleaning_fee,
            "service_fee": self.service_fee,
            "total": self.total,
            "currency": self.currency,
        }


def nights_between(check_in: date, check_out: date) -> int:
    """Length of stay in nights, partial days rounded up."""

    nights = math.ceil((check_out - check_in) / timedelta(days=1))
    if nights < 1:
        raise InvalidRequest("check-out must be after check-in")
    return nights


def compute_total_price(property_obj: Property, nights: int) -> int:
    """base_price x nights + cleaning_fee + service_fee, in minor units."""

    if nights < 1:
        raise InvalidRequest("a stay is at least one night")
    return property_obj.base_price * nights + property_obj.cleaning_fee + property_obj.service_fee


def quote_booking(property_obj: Property, check_in: date, check_out: date) -> PriceQuote:
    nights = nights_between(check_in, check_out)
    return PriceQuote(
        nightly_rate=property_obj.base_price,
        nights=nights,
        cleaning_fee=property_obj.cleaning_fee,
        service_fee=property_obj.service_fee,
        total=compute_total_price(property_obj, nights),
        currency=property_obj.currency,
    )


# ============================================================================
# VALIDATION HELPERS
# ============================================================================

def _get_active_property(property_id, *, lock: bool = False) -> Property:
    properties = Property.objects.filter(pk=property_id, is_active=True)
    if lock:
        properties = _lock_queryset_if_possible(properties)
    property_obj = properties.first()
    if property_obj is None:
        raise NotFound("Property", property_id)
    return property_obj


def _get_booking(booking_id, *, lock: bool = False) -> Booking:
    bookings = Booking.objects.select_related("property")
    if lock:
        bookings = _lock_queryset_if_possible(bookings)
    booking = bookings.filter(pk=booking_id).first()
    if booking is None:
        raise NotFound("Booking", booking_id)
    return booking


def validate_stay(property_obj: Property, check_in: date, check_out: date, guest_count: int) -> int:
    """Check capacity, then stay length. Returns the number of nights."""

    if guest_count < 1:
        raise InvalidRequest("at least one guest is required")
    if guest_count > property_obj.max_guests:
        raise InvalidRequest("capacity exceeded", guests=guest_count, max_guests=property_obj.max_guests)

    nights = nights_between(check_in, check_out)
    if nights < property_obj.min_stay:
        raise InvalidRequest("below minimum stay", nights=nights, min_stay=property_obj.min_stay)
    if nights > property_obj.max_stay:
        raise InvalidRequest("exceeds maximum stay", nights=nights, max_stay=property_obj.max_stay)
    return nights


def _ensure_party(booking: Booking, actor: "User", *, guest: bool = True, host: bool = True) -> None:
    if actor.is_staff:
        return
    if guest and booking.guest_id == actor.pk:
        return
    if host and booking.host_id == actor.pk:
        return
    raise Forbidden("you are not allowed to change this booking", booking_id=booking.pk)


def _hold_nights(booking: Booking) -> None:
    BookingNight.objects.bulk_create(
        BookingNight(booking=booking, property_id=booking.property_id, night=night)
        for night in DateRange(booking.check_in, booking.check_out).nights()
    )


def _release_nights(booking: Booking) -> None:
    BookingNight.objects.filter(booking=booking).delete()


# ============================================================================
# WORKFLOWS
# ============================================================================

def create_booking(
    property_id,
    check_in: date,
    check_out: date,
    guest_count: int,
    *,
    guest: "User",
    special_requests: str = "",
) -> Booking:
    """Validate a stay request and persist it as a new booking.

    Checks run in order and the first failure is raised: property exists
    and is active (``NotFound``), capacity and stay length
    (``InvalidRequest``), availability (``Conflict``). The availability
    check is repeated under a lock on the property row and the held
    nights are inserted in the same transaction.
    """

    property_obj = _get_active_property(property_id)
    validate_stay(property_obj, check_in, check_out, guest_count)
    ensure_property_is_available(property_obj.pk, check_in, check_out)

    try:
        with DjangoUnitOfWork() as uow:
            property_obj = _get_active_property(property_id, lock=True)
            ensure_property_is_available(property_obj.pk, check_in, check_out)
            quote = quote_booking(property_obj, check_in, check_out)

            booking = Booking.objects.create(
                property=property_obj,
                guest=guest,
                host_id=property_obj.host_id,
                check_in=check_in,
                check_out=check_out,
                guests=guest_count,
                status=Booking.Status.CONFIRMED if property_obj.instant_book else Booking.Status.PENDING,
                payment_status=Booking.PaymentStatus.PENDING,
                nightly_rate=quote.nightly_rate,
                nights=quote.nights,
                cleaning_fee=quote.cleaning_fee,
                service_fee=quote.service_fee,
                total_price=quote.total,
                currency=quote.currency,
                special_requests=special_requests,
            )
            _hold_nights(booking)

            uow.add_event(
                BookingCreated(
                    booking_id=booking.pk,
                    property_id=property_obj.pk,
                    guest_id=guest.pk,
                    host_id=property_obj.host_id,
                    check_in=check_in,
                    check_out=check_out,
                    total_price=booking.total_price,
                    currency=booking.currency,
                    status=booking.status,
                )
            )
    except IntegrityError:
        logger.warning(
            f"Night slots for property {property_id} ({check_in} - {check_out}) were taken concurrently"
        )
        raise Conflict(DATES_UNAVAILABLE, property_id=property_id)

    logger.info(
        f"Booking {booking.pk} created for property {property_obj.pk} by user {guest.pk}: "
        f"{check_in} - {check_out}, status={booking.status}, total={booking.total_price} {booking.currency}"
    )
    return booking


def days_until_check_in(check_in: date, now: datetime) -> int:
    """Whole days from ``now`` to the start of the check-in day, rounded up."""

    starts_at = datetime.combine(check_in, time.min, tzinfo=now.tzinfo)
    return math.ceil((starts_at - now) / timedelta(days=1))


def refund_percent(days_until: int) -> int:
    """Share of the total refunded when cancelling ``days_until`` days ahead."""

    for min_days, percent in settings.BOOKING_REFUND_TIERS:
        if days_until >= min_days:
            return percent
    return 0


def cancel_booking(booking_id, reason: str = "", *, actor: "User", now: datetime | None = None) -> Booking:
    """Cancel a pending or confirmed booking and release its nights.

    The booking row is re-read under lock so the refund decision uses
    the committed check-in date. ``payment_status`` becomes refunded when
    the cancellation happens at least a day before check-in;
    ``refund_amount`` follows ``BOOKING_REFUND_TIERS``.
    """

    now = now or timezone.now()

    with DjangoUnitOfWork() as uow:
        booking = _get_booking(booking_id, lock=True)
        _ensure_party(booking, actor)
        if not booking.can_transition_to(Booking.Status.CANCELLED):
            raise IllegalStateTransition(booking.status, Booking.Status.CANCELLED)

        days_until = days_until_check_in(booking.check_in, now)
        booking.status = Booking.Status.CANCELLED
        booking.cancellation_reason = reason
        booking.cancelled_at = now
        booking.refund_amount = booking.total.percent(refund_percent(days_until)).amount
        if days_until >= 1:
            booking.payment_status = Booking.PaymentStatus.REFUNDED
        booking.save(
            update_fields=[
                "status",
                "payment_status",
                "refund_amount",
                "cancellation_reason",
                "cancelled_at",
                "updated_at",
            ]
        )
        _release_nights(booking)

        uow.add_event(
            BookingCancelled(
                booking_id=booking.pk,
                property_id=booking.property_id,
                guest_id=booking.guest_id,
                cancelled_by_id=actor.pk,
                refund_amount=booking.refund_amount,
                payment_status=booking.payment_status,
            )
        )

    logger.info(
        f"Booking {booking.pk} cancelled by user {actor.pk} {days_until} day(s) before check-in, "
        f"refund={booking.refund_amount}"
    )
    return booking


def transition_booking(booking_id, new_status: str, *, actor: "User", reason: str = "") -> Booking:
    """Move a booking along its lifecycle, see ``Booking.TRANSITIONS``."""

    if new_status not in Booking.Status.values:
        raise InvalidRequest(f"unknown booking status {new_status!r}")
    if new_status == Booking.Status.CANCELLED:
        return cancel_booking(booking_id, reason, actor=actor)

    with DjangoUnitOfWork() as uow:
        booking = _get_booking(booking_id, lock=True)
        # Only the host approves or completes a stay.
        _ensure_party(booking, actor, guest=False)
        if not booking.can_transition_to(new_status):
            raise IllegalStateTransition(booking.status, new_status)

        old_status = booking.status
        booking.status = new_status
        booking.save(update_fields=["status", "updated_at"])
        if not booking.is_active:
            _release_nights(booking)

        uow.add_event(
            BookingStatusChanged(
                booking_id=booking.pk,
                property_id=booking.property_id,
                old_status=old_status,
                new_status=new_status,
            )
        )

    logger.info(f"Booking {booking.pk} moved from {old_status} to {new_status} by user {actor.pk}")
    return booking


def reschedule_booking(
    booking_id,
    check_in: date,
    check_out: date,
    guest_count: int,
    *,
    actor: "User",
) -> Booking:
    """Change dates or party size of an active booking and re-price it."""

    try:
        with DjangoUnitOfWork() as uow:
            booking = _get_booking(booking_id, lock=True)
            _ensure_party(booking, actor, host=False)
            if not booking.is_active:
                raise InvalidRequest(f"a {booking.status} booking cannot be changed")

            property_obj = _get_active_property(booking.property_id, lock=True)
            validate_stay(property_obj, check_in, check_out, guest_count)
            ensure_property_is_available(property_obj.pk, check_in, check_out, exclude_booking_id=booking.pk)
            quote = quote_booking(property_obj, check_in, check_out)

            _release_nights(booking)
            booking.check_in = check_in
            booking.check_out = check_out
            booking.guests = guest_count
            booking.nightly_rate = quote.nightly_rate
            booking.nights = quote.nights
            booking.cleaning_fee = quote.cleaning_fee
            booking.service_fee = quote.service_fee
            booking.total_price = quote.total
            booking.currency = quote.currency
            booking.save()
            _hold_nights(booking)

            uow.add_event(
                BookingRescheduled(
                    booking_id=booking.pk,
                    property_id=booking.property_id,
                    check_in=check_in,
                    check_out=check_out,
                    guests=guest_count,
                    total_price=booking.total_price,
                )
            )
    except IntegrityError:
        logger.warning(f"Night slots for booking {booking_id} ({check_in} - {check_out}) were taken concurrently")
        raise Conflict(DATES_UNAVAILABLE, booking_id=booking_id)

    logger.info(
        f"Booking {booking.pk} rescheduled to {check_in} - {check_out}, "
        f"total={booking.total_price} {booking.currency}"
    )
    return booking


def confirm_payment(booking_id, *, actor: "User") -> Booking:
    """Simulated payment: pending -> paid, and a pending booking becomes confirmed."""

    with DjangoUnitOfWork() as uow:
        booking = _get_booking(booking_id, lock=True)
        _ensure_party(booking, actor, host=False)
        if not booking.is_active:
            raise IllegalStateTransition(booking.status, Booking.PaymentStatus.PAID, "only active bookings can be paid")
        if booking.payment_status != Booking.PaymentStatus.PENDING:
            raise IllegalStateTransition(booking.payment_status, Booking.PaymentStatus.PAID)

        old_status = booking.status
        booking.payment_status = Booking.PaymentStatus.PAID
        if booking.status == Booking.Status.PENDING:
            booking.status = Booking.Status.CONFIRMED
        booking.save(update_fields=["payment_status", "status", "updated_at"])

        if booking.status != old_status:
            uow.add_event(
                BookingStatusChanged(
                    booking_id=booking.pk,
                    property_id=booking.property_id,
                    old_status=old_status,
                    new_status=booking.status,
                )
            )

    logger.info(f"Payment confirmed for booking {booking.pk}")
    return booking


def complete_finished_bookings(today: date | None = None) -> int:
    """Mark confirmed bookings whose check-out has passed as completed."""

    today = today or timezone.localdate()
    completed = 0

    finished_ids = list(
        Booking.objects.filter(status=Booking.Status.CONFIRMED, check_out__lte=today).values_list("pk", flat=True)
    )
    for booking_id in finished_ids:
        with DjangoUnitOfWork() as uow:
            booking = _get_booking(booking_id, lock=True)
            if booking.status != Booking.Status.CONFIRMED:
                continue
            booking.status = Booking.Status.COMPLETED
            booking.save(update_fields=["status", "updated_at"])
            _release_nights(booking)
            uow.add_event(
                BookingStatusChanged(
                    booking_id=booking.pk,
                    property_id=booking.property_id,
                    old_status=Booking.Status.CONFIRMED,
                    new_status=Booking.Status.COMPLETED,
                )
            )
        completed += 1

    if completed:
        logger.info(f"Completed {completed} finished bookings")
    return completed
