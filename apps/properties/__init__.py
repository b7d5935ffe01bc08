"""Properties app package.

This app encapsulates all functionality related to property listings:
the property model with its capacity, pricing and stay rules, amenities,
listing filters and the per-property availability and analytics
endpoints.
"""
