"""HTTP client for the ARK public REST API."""

from .ark import ArkClient
from .base import APIError, BaseAPIClient, NotFoundError
from .pagination import fetch_paginated
from .query import build_query, render_order_by

__all__ = [
    "APIError",
    "ArkClient",
    "BaseAPIClient",
    "NotFoundError",
    "build_query",
    "fetch_paginated",
    "render_order_by",
]
