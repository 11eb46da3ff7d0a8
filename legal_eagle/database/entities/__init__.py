"""
Entities Package: SQLAlchemy 2.0 ORM Models (UUID + UTC)
=========================================================

The `entities` package defines the ORM models of the application, mapping
database tables to Python classes using SQLAlchemy 2.0-typed mappings.
These classes are consumed by DAOs (`daos` package).

Conventions
-----------
- Portable `Uuid` primary keys
- Timezone-aware timestamps (UTC)
- SQLAlchemy 2.0 style `Mapped[...]` + `mapped_column(...)`
- Status vocabularies as `str` Enums next to the model that uses them

Contents
--------
- User: clients, shared-role lawyers and admins; holds the wallet balance
- Lawyer: professional profile, either linked to a User or directly credentialed
- AuthSession: one row per issued session token
- Appointment: booked, paid consultation slot with its activity window
- Transaction: append-only wallet ledger entry
- ChatRoom: one per (client, lawyer) pair; request status + unlock gate
- ChatMessage: ordered, append-only message log entries of a room
"""

from legal_eagle.database.entities.user import User, UserRole
from legal_eagle.database.entities.lawyer import Lawyer
from legal_eagle.database.entities.auth_session import AuthSession
from legal_eagle.database.entities.appointment import Appointment, AppointmentStatus
from legal_eagle.database.entities.transaction import Transaction, TransactionStatus, TransactionType
from legal_eagle.database.entities.chat_room import ChatRoom, ChatStatus, PaymentStatus
from legal_eagle.database.entities.chat_message import ChatMessage, SenderRole
