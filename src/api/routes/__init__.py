"""Rotas HTTP da API.

Responsabilidades:
- Definir endpoints HTTP (reservas, disponibilidade, health)
- Validação inicial de request (headers, query params)
- Delegação para o BookingService
- Respostas HTTP apropriadas (erros de domínio → status HTTP)

Agregação:
- router.py: registra todos os routers no app principal
"""

from __future__ import annotations

from api.routes.router import create_api_router

__all__ = ["create_api_router"]
