"""
Database Transaction Management
===============================

This module provides utilities for managing SQLAlchemy database sessions
using Python context variables and a decorator-based transaction wrapper.

A single ``@transactional`` service call is the unit of atomicity for the
application: booking an appointment (appointment row + wallet debit + payment
transaction), cancelling it (status + wallet credit + refund transaction) and
chat room decisions (status + system message) either commit together or are
rolled back together.

Key features
~~~~~~~~~~~~
- Context variable to store the active session
- Implicit reuse of an existing session (nested service calls join the outer transaction)
- Automatic commit and rollback handling
- Clean session closure after execution
"""

from functools import wraps
import contextvars
import logging

from legal_eagle.database.config.connection_engine import SessionFactory

logger = logging.getLogger(__name__)

db_session_context = contextvars.ContextVar("db_session_context", default=None)
"""Context variable storing the active SQLAlchemy session."""


def transactional(func):
    """
    Decorator to wrap functions in a managed SQLAlchemy transaction.

    Ensures that:
    - If a session already exists in context, it is reused.
    - Otherwise, a new session is created, committed, and closed.
    - On errors, the session is rolled back and closed, and the error re-raised.

    Parameters
    ----------
    func : callable
        The function to wrap. It must accept a `session` keyword argument.

    Returns
    -------
    callable
        The wrapped function, executed within a database transaction.

    Example
    -------
    >>> @transactional
    ... def rename_lawyer(session, lawyer_id, name):
    ...     LawyerDao().fetchLawyerById(session, lawyer_id).name = name
    ...
    >>> rename_lawyer(lawyer_id=some_id, name="A. Counsel")
    """
    @wraps(func)
    def wrap_func(*args, **kwargs):
        session = db_session_context.get()
        if session is not None:
            return func(*args, session=session, **kwargs)

        session = SessionFactory()
        token = db_session_context.set(session)

        try:
            result = func(*args, session=session, **kwargs)
            session.flush()
            session.commit()
        except Exception as e:
            logger.debug(f"Rolling back transaction in {func.__name__}: {e}")
            session.rollback()
            raise e
        finally:
            session.close()
            db_session_context.reset(token)

        return result

    return wrap_func
