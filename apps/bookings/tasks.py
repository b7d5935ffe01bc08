"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import date

from celery import shared_task  # type: ignore

from . import services

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (scheduled by Celery Beat, see config/celery.py)
# ============================================================================

@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings(today: str | None = None) -> dict[str, int]:
    """
    Complete confirmed bookings after check-out.

    Bookings whose check-out date is today or earlier move from
    CONFIRMED to COMPLETED, which makes them eligible for reviews.

    Args:
        today: optional ISO date overriding the current date

    Returns:
        dict: {"completed": number of completed bookings}
    """
    completed = services.complete_finished_bookings(date.fromisoformat(today) if today else None)
    logger.info(f"complete_finished_bookings run finished: {completed} booking(s) completed")
    return {"completed": completed}
