"""App: orquestração do relay, casos de uso e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- coordinators/: despacho de eventos de webhook por origem
- use_cases/: relay WhatsApp → Platform e Platform → WhatsApp
- services/: identidade, atribuição de agente, ciclo de vida, status
- domain/: Instance e Tenant
- infra/: stores (memória/Redis) e criptografia do contexto
- protocols/: contratos de Gateway, Platform e stores
- observability/: correlation_id por requisição

Padrão: app executa; api adapta; fsm governa; utils apoia.
"""
