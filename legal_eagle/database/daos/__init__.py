"""
DAOs Package: Data Access Layer (SQLAlchemy 2.0)
=================================================

The `daos` package provides the Data Access Layer for the application.
It encapsulates all interactions with SQLAlchemy ORM entities, providing
clean CRUD APIs for the service layer while hiding direct query details.

Conventions
-----------
- Session lifecycle (open/commit/rollback) is handled by callers
- DAOs surface exceptions so upper layers decide error policy
- No DAO offers delete/update for ledger rows or messages (append-only data)

Contents
--------
- UserDao: users, password hashing, atomic wallet debit/credit
- LawyerDao: professional profiles (shared-role and direct)
- SessionDao: issued session tokens, split lookup by owner kind
- AppointmentDao: appointments and qualifying-appointment queries
- TransactionDao: append-only wallet ledger with pagination
- ChatRoomDao: rooms per (client, lawyer) pair, message position reservation
- ChatMessageDao: ordered message log, read flags, unread counts
"""
