"""
Acting user as supplied by the identity service in front of the API.
"""

from dataclasses import dataclass
from typing import Literal, Optional

from fastapi import Depends, Header, HTTPException


@dataclass(frozen=True)
class Identity:
    user_id: Optional[str] = None
    role: Literal["user", "admin"] = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def can_edit(self, owner_id: Optional[str]) -> bool:
        return self.is_admin or (self.user_id is not None and self.user_id == owner_id)

    def can_view(self, owner_id: Optional[str], is_public: bool) -> bool:
        return is_public or self.can_edit(owner_id)


def get_identity(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Literal["user", "admin"] = Header("user"),
) -> Identity:
    return Identity(user_id=x_user_id or None, role=x_user_role)


def require_user(identity: Identity = Depends(get_identity)) -> Identity:
    if identity.user_id is None:
        raise HTTPException(401, "Not authenticated")
    return identity


def require_admin(identity: Identity = Depends(require_user)) -> Identity:
    if not identity.is_admin:
        raise HTTPException(403, "Admin access required")
    return identity
