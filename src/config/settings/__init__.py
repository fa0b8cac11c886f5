"""Agregador de settings do booking_core.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Base settings
from config.settings.base import (
    BaseSettings,
    Environment,
    StoreBackend,
    StoreSettings,
    get_base_settings,
    get_store_settings,
)

# Booking settings
from config.settings.booking import (
    BookingSettings,
    get_booking_settings,
)

# Collaborator settings
from config.settings.collaborators import (
    CollaboratorSettings,
    get_collaborator_settings,
)

__all__ = [
    "BaseSettings",
    "BookingSettings",
    "CollaboratorSettings",
    "Environment",
    "StoreBackend",
    "StoreSettings",
    "get_base_settings",
    "get_booking_settings",
    "get_collaborator_settings",
    "get_store_settings",
]
