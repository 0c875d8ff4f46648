"""API: camada de borda: webhooks, API de gerenciamento e conectores.

Responsabilidades:
- Receber webhooks do Gateway e da Platform
- Autenticar (bearer da instância, contexto cifrado da custom page)
- Normalizar payloads externos para modelos internos
- Falar HTTP com Gateway e Platform (connectors/)

Subpastas:
- connectors/: clientes HTTP do Gateway e da Platform
- normalizers/: conversão de payloads externos → modelos internos
- routes/: endpoints HTTP (webhooks, instâncias, health)

NÃO PODE conter: FSM, regras de estado, orquestração de use cases.
"""
