"""
The `helpers` package provides utility functions and decorators
that support database operations and cross-cutting concerns.

Contents
--------
- transactionManagement
    - Context variable (`db_session_context`) for propagating the active session across function calls without explicit passing
    - `@transactional` decorator wrapping a service call in one commit-or-rollback unit
- time_utils
    - UTC helpers: `utc_now`, `as_utc` and `local_slot_to_utc` (date + wall-clock time in a zone to a UTC instant)
"""
