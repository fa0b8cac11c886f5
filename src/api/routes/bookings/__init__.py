"""Rotas HTTP de reservas e disponibilidade."""

from __future__ import annotations

from api.routes.bookings.errors import register_error_handlers
from api.routes.bookings.router import providers_router, router

__all__ = ["providers_router", "register_error_handlers", "router"]
