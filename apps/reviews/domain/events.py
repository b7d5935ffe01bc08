"""
Review Domain Events

Published after commit; ``apps.reviews.handlers`` keeps the derived
ratings of properties and guests in sync with them.
"""

from dataclasses import dataclass

from shared.domain.base import DomainEvent


@dataclass
class ReviewCreated(DomainEvent):
    review_id: int
    property_id: int
    guest_id: int
    reviewer_id: int
    type: str
    rating: int


@dataclass
class ReviewUpdated(DomainEvent):
    """
    Event: Rating or comment of a review changed
    """
    review_id: int
    property_id: int
    guest_id: int
    type: str
    rating: int


@dataclass
class ReviewDeleted(DomainEvent):
    """
    Event: Review was removed by its author

    ``review_id`` refers to a row that no longer exists.
    """
    review_id: int
    property_id: int
    guest_id: int
    type: str
