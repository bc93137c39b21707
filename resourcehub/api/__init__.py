"""API router registry used by the app factory.

This keeps route module imports and inclusion order in one place so
`resourcehub.main` stays focused on startup wiring.
"""

from __future__ import annotations

from fastapi import APIRouter

from . import account, admin, auth, cart, health, orders, resources, seller

API_PREFIX = "/api/v1"

API_ROUTERS: tuple[APIRouter, ...] = (
    health.router,
    auth.router,
    resources.router,
    cart.router,
    orders.router,
    account.router,
    seller.router,
    admin.router,
)

__all__ = ["API_PREFIX", "API_ROUTERS"]
