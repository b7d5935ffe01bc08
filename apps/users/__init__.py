"""Users app package.

Defines the custom user model (``apps.users.models.User``, the
project's AUTH_USER_MODEL) used for both guests and hosts, the user
directory API and the JWT authentication endpoints.
"""
