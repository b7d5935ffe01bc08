from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from apps.bookings.models import Booking
from apps.properties.models import Property
from apps.reviews import services
from apps.reviews.domain.events import ReviewCreated, ReviewDeleted
from apps.reviews.models import Review
from apps.reviews.tasks import recalculate_ratings
from shared.application.message_bus import message_bus
from shared.domain.exceptions import Conflict, Forbidden, InvalidRequest, NotFound


@pytest.fixture
def host():
    return get_user_model().objects.create_user(email="host@example.com", password="pass", is_host=True)


@pytest.fixture
def guest():
    return get_user_model().objects.create_user(email="guest@example.com", password="pass")


@pytest.fixture
def listing(host):
    return Property.objects.create(
        host=host,
        title="Hill cabin",
        description="Pine cabin",
        address="7 Ridge Road",
        city="Manali",
        country="India",
        base_price=10000,
        currency="INR",
        max_guests=3,
    )


def _stay(listing, guest, status=Booking.Status.COMPLETED, check_in=date(2024, 1, 10)):
    return Booking.objects.create(
        property=listing,
        guest=guest,
        host=listing.host,
        check_in=check_in,
        check_out=date(check_in.year, check_in.month, check_in.day + 3),
        status=status,
        nightly_rate=10000,
        nights=3,
        total_price=30000,
        currency="INR",
    )


@pytest.mark.django_db
def test_review_type_follows_the_reviewer(listing, guest, host):
    booking = _stay(listing, guest)

    assert services.review_type_for(booking, guest) == Review.Type.GUEST_TO_HOST
    assert services.review_type_for(booking, host) == Review.Type.HOST_TO_GUEST


@pytest.mark.django_db
@pytest.mark.parametrize("status", [Booking.Status.PENDING, Booking.Status.CONFIRMED, Booking.Status.CANCELLED])
def test_only_completed_bookings_can_be_reviewed(listing, guest, status):
    booking = _stay(listing, guest, status=status)

    with pytest.raises(InvalidRequest):
        services.create_review(booking.pk, 5, "Great place to stay", reviewer=guest)


@pytest.mark.django_db
def test_stranger_cannot_review(listing, guest):
    booking = _stay(listing, guest)
    stranger = get_user_model().objects.create_user(email="x@example.com", password="pass")

    with pytest.raises(Forbidden):
        services.create_review(booking.pk, 5, "Great place to stay", reviewer=stranger)


@pytest.mark.django_db
def test_missing_booking_is_not_found(guest):
    with pytest.raises(NotFound):
        services.create_review(12345, 5, "Great place to stay", reviewer=guest)


@pytest.mark.django_db
def test_each_party_reviews_once(listing, guest, host):
    booking = _stay(listing, guest)
    services.create_review(booking.pk, 5, "Great place to stay", reviewer=guest)
    services.create_review(booking.pk, 4, "Tidy and polite guest", reviewer=host)

    with pytest.raises(Conflict):
        services.create_review(booking.pk, 3, "Second thoughts here", reviewer=guest)
    assert Review.objects.count() == 2


@pytest.mark.django_db
@pytest.mark.parametrize("rating", [0, 6])
def test_rating_must_be_one_to_five(listing, guest, rating):
    booking = _stay(listing, guest)

    with pytest.raises(InvalidRequest):
        services.create_review(booking.pk, rating, "Great place to stay", reviewer=guest)


@pytest.mark.django_db
def test_events_are_published_after_commit(listing, guest, monkeypatch, django_capture_on_commit_callbacks):
    booking = _stay(listing, guest)
    published = []
    monkeypatch.setattr(message_bus, "publish_events", published.extend)

    with django_capture_on_commit_callbacks(execute=True):
        review = services.create_review(booking.pk, 4, "Great place to stay", reviewer=guest)
    with django_capture_on_commit_callbacks(execute=True):
        services.delete_review(review.pk, actor=guest)

    assert [type(event) for event in published] == [ReviewCreated, ReviewDeleted]
    assert published[0].property_id == listing.pk
    assert published[0].guest_id == guest.pk
    assert published[1].review_id == review.pk


@pytest.mark.django_db
def test_property_rating_is_average_of_guest_reviews(listing, guest, host, django_capture_on_commit_callbacks):
    other_guest = get_user_model().objects.create_user(email="g2@example.com", password="pass")
    first = _stay(listing, guest)
    second = _stay(listing, other_guest, check_in=date(2024, 2, 10))

    with django_capture_on_commit_callbacks(execute=True):
        services.create_review(first.pk, 5, "Great place to stay", reviewer=guest)
        services.create_review(second.pk, 2, "Too cold at night", reviewer=other_guest)
        services.create_review(first.pk, 1, "Left a big mess", reviewer=host)

    listing.refresh_from_db()
    assert listing.rating == Decimal("3.50")
    assert listing.review_count == 2
    guest.refresh_from_db()
    assert guest.rating == Decimal("1.00")
    assert guest.review_count == 1


@pytest.mark.django_db
def test_only_author_may_change_review(listing, guest, host):
    booking = _stay(listing, guest)
    review = services.create_review(booking.pk, 4, "Great place to stay", reviewer=guest)

    with pytest.raises(Forbidden):
        services.update_review(review.pk, actor=host, rating=1)
    with pytest.raises(Forbidden):
        services.delete_review(review.pk, actor=host)

    updated = services.update_review(review.pk, actor=guest, comment="Even better on reflection")
    assert updated.rating == 4
    assert updated.comment == "Even better on reflection"


@pytest.mark.django_db
def test_helpful_and_report_counters(listing, guest, host):
    booking = _stay(listing, guest)
    review = services.create_review(booking.pk, 4, "Great place to stay", reviewer=guest)

    assert services.mark_helpful(review.pk) == 1
    assert services.mark_helpful(review.pk) == 2
    assert services.report_review(review.pk, "off-topic", reporter=host) == 1
    with pytest.raises(NotFound):
        services.mark_helpful(review.pk + 100)


@pytest.mark.django_db
def test_statistics_only_count_guest_reviews(listing, guest, host):
    booking = _stay(listing, guest)
    Review.objects.create(
        booking=booking, property=listing, reviewer=guest, type=Review.Type.GUEST_TO_HOST, rating=5, comment="ok"
    )
    Review.objects.create(
        booking=booking, property=listing, reviewer=host, type=Review.Type.HOST_TO_GUEST, rating=1, comment="ok"
    )

    stats = Review.objects.filter(property=listing).statistics()

    assert stats["total_reviews"] == 1
    assert stats["average_rating"] == 5
    assert stats["rating_distribution"] == {"1": 0, "2": 0, "3": 0, "4": 0, "5": 1}


@pytest.mark.django_db
def test_recalculate_task_repairs_drifted_ratings(listing, guest):
    booking = _stay(listing, guest)
    Review.objects.create(
        booking=booking, property=listing, reviewer=guest, type=Review.Type.GUEST_TO_HOST, rating=4, comment="ok"
    )
    Property.objects.filter(pk=listing.pk).update(rating=Decimal("1.00"), review_count=7)

    result = recalculate_ratings.delay().get()

    listing.refresh_from_db()
    assert result == {"properties": 1, "guests": 0}
    assert listing.rating == Decimal("4.00")
    assert listing.review_count == 1
