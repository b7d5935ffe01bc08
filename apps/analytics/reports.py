"""Aggregate reports behind the analytics endpoints.

Each report takes an already scoped queryset (by host, by date range)
and returns plain dicts ready for a DRF ``Response``. All money values
are integer minor units.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from django.db.models import Avg, Case, CharField, Count, F, Q, Sum, Value, When  # type: ignore
from django.db.models.functions import TruncMonth  # type: ignore

from apps.bookings.models import Booking
from apps.properties.models import Amenity, Property

TOP_RATED_MIN_RATING = 4.5
PRICE_BUCKETS = [0, 5000, 10000, 15000, 20000, 30000, 50000, 100000]
RATING_BUCKETS = [(1, 2, "1-2"), (2, 3, "2-3"), (3, 4, "3-4"), (4, 4.5, "4-4.5"), (4.5, 5.01, "4.5-5")]


def _number(value, digits: int = 2) -> float:
    return round(float(value or 0), digits)


def _percent(part: int, whole: int) -> float:
    return round(part * 100 / whole, 2) if whole else 0.0


def filter_created(queryset, start_date=None, end_date=None):
    """Restrict to rows created within [start_date, end_date], both optional."""
    if start_date:
        queryset = queryset.filter(created_at__date__gte=start_date)
    if end_date:
        queryset = queryset.filter(created_at__date__lte=end_date)
    return queryset


def monthly(queryset, **aggregates) -> list[dict]:
    """Group ``queryset`` by month of ``created_at``."""
    rows = (
        queryset.annotate(month=TruncMonth("created_at"))
        .order_by("month")
        .values("month")
        .annotate(**aggregates)
    )
    result = []
    for row in rows:
        row = dict(row)
        row["month"] = row["month"].strftime("%Y-%m")
        for key, value in row.items():
            if key != "month" and not isinstance(value, int):
                row[key] = _number(value)
        result.append(row)
    return result


def _breakdown(queryset, field: str) -> dict:
    return {
        row[field]: {"count": row["count"], "revenue": row["revenue"] or 0}
        for row in queryset.order_by().values(field).annotate(count=Count("id"), revenue=Sum("total_price"))
    }


def _top_properties(bookings, limit: int = 10) -> list[dict]:
    rows = (
        bookings.order_by()
        .values("property_id", "property__title", "property__city", "property__country")
        .annotate(
            booking_count=Count("id"),
            total_revenue=Sum("total_price"),
            average_revenue=Avg("total_price"),
        )
        .order_by("-total_revenue", "property_id")[:limit]
    )
    return [
        {
            "property_id": row["property_id"],
            "title": row["property__title"],
            "city": row["property__city"],
            "country": row["property__country"],
            "booking_count": row["booking_count"],
            "total_revenue": row["total_revenue"] or 0,
            "average_revenue": round(row["average_revenue"] or 0),
        }
        for row in rows
    ]


def popular_locations(properties, limit: int = 10) -> list[dict]:
    rows = (
        properties.order_by()
        .values("city", "state", "country")
        .annotate(property_count=Count("id"), average_price=Avg("base_price"), average_rating=Avg("rating"))
        .order_by("-property_count", "city")[:limit]
    )
    return [
        {
            "city": row["city"],
            "state": row["state"],
            "country": row["country"],
            "property_count": row["property_count"],
            "average_price": round(row["average_price"] or 0),
            "average_rating": _number(row["average_rating"], 1),
        }
        for row in rows
    ]


def _property_summary(properties, limit: int = 10) -> list[dict]:
    rows = properties.order_by("-rating", "-review_count", "pk").values(
        "id", "title", "city", "country", "rating", "review_count", "base_price", "host_id"
    )[:limit]
    return [{**row, "rating": _number(row["rating"])} for row in rows]


# ============================================================================
# REPORTS
# ============================================================================

def platform_report(start_date=None, end_date=None) -> dict:
    """Platform totals, monthly growth and location/rating insights."""
    users = get_user_model().objects.all()
    properties = Property.objects.filter(is_active=True)
    bookings = filter_created(Booking.objects.all(), start_date, end_date)

    total_bookings = bookings.count()
    paid = bookings.filter(payment_status=Booking.PaymentStatus.PAID).aggregate(
        count=Count("id"), total=Sum("total_price")
    )
    total_revenue = paid["total"] or 0

    return {
        "overview": {
            "total_users": users.count(),
            "total_hosts": users.filter(is_host=True).count(),
            "total_properties": properties.count(),
            "total_bookings": total_bookings,
            "total_revenue": total_revenue,
            "average_booking_value": round(total_revenue / paid["count"]) if paid["count"] else 0,
        },
        "growth": {
            "user_growth": monthly(filter_created(users, start_date, end_date), count=Count("id")),
            "booking_trends": monthly(bookings, bookings=Count("id"), revenue=Sum("total_price")),
        },
        "insights": {
            "popular_locations": popular_locations(properties),
            "top_rated_properties": _property_summary(properties.filter(rating__gte=TOP_RATED_MIN_RATING)),
        },
    }


def booking_report(bookings) -> dict:
    total = bookings.count()
    cancelled = bookings.filter(status=Booking.Status.CANCELLED).count()
    return {
        "total_bookings": total,
        "status_breakdown": _breakdown(bookings, "status"),
        "payment_status_breakdown": _breakdown(bookings, "payment_status"),
        "monthly_trends": monthly(
            bookings,
            bookings=Count("id"),
            revenue=Sum("total_price"),
            average_value=Avg("total_price"),
        ),
        "top_properties": _top_properties(bookings.filter(status=Booking.Status.COMPLETED)),
        "average_stay": _number(bookings.aggregate(nights=Avg("nights"))["nights"], 1),
        "cancellation_rate": _percent(cancelled, total),
    }


def property_report(properties) -> dict:
    """Type, price, rating, amenity and location distributions of listings."""
    type_rows = (
        properties.order_by()
        .values("property_type")
        .annotate(count=Count("id"), average_price=Avg("base_price"), average_rating=Avg("rating"))
        .order_by("property_type")
    )

    price_bucket = Case(
        *[
            When(base_price__gte=low, base_price__lt=high, then=Value(f"{low}-{high}"))
            for low, high in zip(PRICE_BUCKETS, PRICE_BUCKETS[1:])
        ],
        default=Value(f"{PRICE_BUCKETS[-1]}+"),
        output_field=CharField(),
    )
    rating_bucket = Case(
        When(review_count=0, then=Value("unrated")),
        *[When(rating__gte=low, rating__lt=high, then=Value(label)) for low, high, label in RATING_BUCKETS],
        default=Value("below-1"),
        output_field=CharField(),
    )

    def bucketed(expression) -> dict:
        rows = properties.order_by().annotate(bucket=expression).values("bucket").annotate(count=Count("id"))
        return {row["bucket"]: row["count"] for row in rows}

    amenity_rows = (
        Amenity.objects.filter(properties__in=properties)
        .values("id", "name")
        .annotate(count=Count("properties", distinct=True), average_rating=Avg("properties__rating"))
        .order_by("-count", "name")[:20]
    )
    location_rows = (
        properties.order_by()
        .values("city", "state")
        .annotate(count=Count("id"), average_price=Avg("base_price"), average_rating=Avg("rating"))
        .order_by("-count", "city")[:15]
    )

    return {
        "total_properties": properties.count(),
        "property_type_distribution": [
            {
                "property_type": row["property_type"],
                "count": row["count"],
                "average_price": round(row["average_price"] or 0),
                "average_rating": _number(row["average_rating"]),
            }
            for row in type_rows
        ],
        "price_distribution": bucketed(price_bucket),
        "rating_distribution": bucketed(rating_bucket),
        "amenity_popularity": [
            {
                "amenity_id": row["id"],
                "name": row["name"],
                "count": row["count"],
                "average_rating": _number(row["average_rating"]),
            }
            for row in amenity_rows
        ],
        "location_analytics": [
            {
                "city": row["city"],
                "state": row["state"],
                "count": row["count"],
                "average_price": round(row["average_price"] or 0),
                "average_rating": _number(row["average_rating"]),
            }
            for row in location_rows
        ],
        "top_performing_properties": _property_summary(properties),
    }


def review_report(reviews) -> dict:
    """Guest-to-host review statistics; host-to-guest reviews are ignored."""
    reviews = reviews.about_properties()
    sentiment = reviews.aggregate(
        positive=Count("id", filter=Q(rating__gte=4)),
        neutral=Count("id", filter=Q(rating=3)),
        negative=Count("id", filter=Q(rating__lte=2)),
    )
    top_rows = (
        reviews.order_by()
        .values("property_id", "property__title", "property__city")
        .annotate(review_count=Count("id"), average_rating=Avg("rating"))
        .order_by("-review_count", "property_id")[:10]
    )
    by_type = (
        reviews.order_by()
        .values(property_type=F("property__property_type"))
        .annotate(
            total_reviews=Count("id"),
            property_count=Count("property", distinct=True),
            average_rating=Avg("rating"),
        )
        .order_by("property_type")
    )

    return {
        **reviews.statistics(),
        "review_trends": monthly(reviews, review_count=Count("id"), average_rating=Avg("rating")),
        "sentiment": sentiment,
        "top_reviewed_properties": [
            {
                "property_id": row["property_id"],
                "title": row["property__title"],
                "city": row["property__city"],
                "review_count": row["review_count"],
                "average_rating": _number(row["average_rating"]),
            }
            for row in top_rows
        ],
        "average_rating_by_property_type": [
            {**row, "average_rating": _number(row["average_rating"])} for row in by_type
        ],
    }


def financial_report(bookings) -> dict:
    """Revenue by payment status, monthly paid revenue and refunds."""
    paid = bookings.filter(payment_status=Booking.PaymentStatus.PAID)
    total = bookings.count()
    refunds = bookings.filter(payment_status=Booking.PaymentStatus.REFUNDED).aggregate(
        count=Count("id"), amount=Sum("refund_amount")
    )
    return {
        "total_revenue": paid.aggregate(total=Sum("total_price"))["total"] or 0,
        "revenue_breakdown": _breakdown(bookings, "payment_status"),
        "monthly_revenue": monthly(
            paid,
            revenue=Sum("total_price"),
            booking_count=Count("id"),
            average_value=Avg("total_price"),
        ),
        "refunds": {
            "total_bookings": total,
            "total_refunds": refunds["count"],
            "refund_amount": refunds["amount"] or 0,
            "refund_rate": _percent(refunds["count"], total),
        },
        "top_earning_properties": _top_properties(paid),
    }

