"""API — camada de borda HTTP.

Subpastas:
- routes/: endpoints HTTP (reservas, disponibilidade, health)

NÃO PODE conter: regras de transição, detecção de conflito, persistência.
"""
