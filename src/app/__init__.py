"""App — coração do sistema: orquestração e infraestrutura de reservas.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- domain/: entidades, intervalos, erros e intenções de side effect
- services/: ciclo de vida, conflitos, disponibilidade, dispatcher
- infra/: implementações concretas de IO (Redis, memória, httpx)
- protocols/: contratos/interfaces dos colaboradores e stores
- observability/: logs estruturados, correlação, métricas

Padrão: app executa; api adapta; fsm governa; utils apoia.
"""
