"""
Service layer.

Each public function is decorated with `@transactional`: it receives the active
SQLAlchemy session from the decorator and must be called with keyword
arguments only. Functions return JSON-ready dicts (see `serializers`) and raise
`legal_eagle.errors.AppError` subclasses for expected failures.

Modules
-------
- auth_funcs: registration, login, token validation, logout
- lawyer_funcs: professional profiles
- appointment_funcs: booking, status changes, refunds
- wallet_funcs: deposits, balance, transaction history
- access_gate: who may read or write a chat room
- chat_funcs: chat rooms and message log
"""
