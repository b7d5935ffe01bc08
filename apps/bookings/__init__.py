"""Bookings app package.

This app encapsulates the booking domain: the booking model, the
per-night slot table that makes double booking impossible, and the
services that check availability, price stays and drive the booking
lifecycle (create, cancel, confirm, complete, reschedule).
"""
