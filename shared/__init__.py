"""
Shared Kernel

Value objects, domain events, the error taxonomy and the small amount of
infrastructure (unit of work, message bus, API glue) used by every app.
"""
