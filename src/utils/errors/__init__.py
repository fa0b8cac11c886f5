"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    CollaboratorHttpError,
    InfrastructureError,
    RedisConnectionError,
    StaleBookingError,
)

__all__ = [
    "CollaboratorHttpError",
    "InfrastructureError",
    "RedisConnectionError",
    "StaleBookingError",
]
