"""
Legal Eagle backend.

Marketplace backend where clients book paid consultations with lawyers and
chat with them while an appointment is active.

Packages
--------
- api: FastAPI router, request models and token helpers
- database: configuration, ORM entities, DAOs and the transactional service layer
- realtime: WebSocket connection registry and event handler
- crypt: password hashing
"""
