"""
Authenticated principals.

A session token resolves to exactly one of two principal shapes:

- `SharedUser`: an `app_user` row (client, shared-role lawyer or admin). A
  shared-role lawyer acts as the profile that back-references it.
- `DirectProfessional`: a `lawyer` row with its own credentials.

Both expose the same read-only surface (`principal_id`, `role`,
`acting_lawyer_id`, `is_admin`, `sender_role`), so authorization code never has
to branch on the concrete type.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Union
from uuid import UUID

from legal_eagle.database.entities.chat_message import SenderRole
from legal_eagle.database.entities.user import UserRole


@dataclass(frozen=True)
class SharedUser:
    user_id: UUID
    role: str
    name: str = ""
    lawyer_id: Optional[UUID] = None

    kind: ClassVar[str] = "user"

    @property
    def principal_id(self) -> UUID:
        return self.user_id

    @property
    def acting_lawyer_id(self) -> Optional[UUID]:
        return self.lawyer_id if self.role == UserRole.LAWYER.value else None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def sender_role(self) -> str:
        if self.role == UserRole.LAWYER.value:
            return SenderRole.LAWYER.value
        if self.is_admin:
            return SenderRole.SYSTEM.value
        return SenderRole.USER.value

    @property
    def key(self) -> str:
        return principal_key(self.kind, self.user_id)

    def to_dict(self) -> dict:
        return {
            "userId": str(self.user_id),
            "role": self.role,
            "name": self.name,
            "lawyerId": str(self.lawyer_id) if self.lawyer_id else None,
            "isDirectLawyer": False,
        }


@dataclass(frozen=True)
class DirectProfessional:
    lawyer_id: UUID
    name: str = ""

    kind: ClassVar[str] = "lawyer"
    role: ClassVar[str] = UserRole.LAWYER.value

    @property
    def principal_id(self) -> UUID:
        return self.lawyer_id

    @property
    def acting_lawyer_id(self) -> Optional[UUID]:
        return self.lawyer_id

    @property
    def is_admin(self) -> bool:
        return False

    @property
    def sender_role(self) -> str:
        return SenderRole.LAWYER.value

    @property
    def key(self) -> str:
        return principal_key(self.kind, self.lawyer_id)

    def to_dict(self) -> dict:
        return {
            "userId": str(self.lawyer_id),
            "role": self.role,
            "name": self.name,
            "lawyerId": str(self.lawyer_id),
            "isDirectLawyer": True,
        }


Principal = Union[SharedUser, DirectProfessional]


def principal_key(kind: str, principal_id) -> str:
    """Registry key of a principal, e.g. ``user:<uuid>`` or ``lawyer:<uuid>``."""
    return f"{kind}:{principal_id}"
