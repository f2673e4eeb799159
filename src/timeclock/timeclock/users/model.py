from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class AuthSession:
    """Identity handed over by the identity provider after sign-in.

    Read-only for the engine; a new value is created on every sign-in.
    """

    user_id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_mapping(cls, data) -> "AuthSession":
        user_id = str(data.get("user_id") or "").strip()
        if not user_id:
            raise ValidationError("user_id is required")
        try:
            role = Role(data.get("role") or Role.USER.value)
        except ValueError:
            raise ValidationError(f"Unknown role: {data.get('role')!r}")
        return cls(user_id=user_id, role=role)
