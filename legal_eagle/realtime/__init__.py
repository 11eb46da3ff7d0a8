"""
Real-time layer.

- `connection_registry`: which socket belongs to which principal and which
  chat rooms each socket has joined.
- `socket_handler`: the `/ws` event loop (authenticate, join/leave, send,
  typing indicators, read receipts).

Delivery is best-effort; the persisted message log is the source of truth.
"""
