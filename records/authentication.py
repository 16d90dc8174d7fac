"""
Bearer token authentication for the API.

This module defines a subclass of simplejwt's ``JWTAuthentication`` so
the project's configuration has a stable import path.  Keeping it apart
from the auth views avoids circular imports when Django REST framework
imports authentication classes during initialization.
"""
from __future__ import annotations

from rest_framework_simplejwt import authentication


class JWTAuthentication(authentication.JWTAuthentication):
    """Resolve ``Authorization: Bearer <token>`` to the owning user.

    simplejwt rejects missing, malformed and expired tokens as well as
    tokens naming a deleted or inactive user.  Because the class sends a
    ``WWW-Authenticate`` header, DRF answers those cases with 401 rather
    than 403, which keeps them distinct from a missing record (404).
    """

    www_authenticate_realm = 'medtrack'
