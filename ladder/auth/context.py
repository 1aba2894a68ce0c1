"""
Auth context - who is making the request.

This is the lightweight object attached to each request once the gate
has run. Role and ownership checks only ever look at this.
"""

from __future__ import annotations

from dataclasses import dataclass

from ladder.core.models import Identity, Role


@dataclass(frozen=True)
class AuthContext:
    """
    Identity attached to a request.
    
    Anonymous contexts have no user_id; optional authentication produces
    one instead of failing.
    """
    
    user_id: int | None = None
    email: str | None = None
    username: str | None = None
    role: Role | None = None
    is_admin: bool = False
    
    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None
    
    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None
    
    def has_role(self, role: Role | str) -> bool:
        if self.role is None:
            return False
        wanted = role.value if isinstance(role, Role) else role
        return self.role.value == wanted
    
    @property
    def has_admin_rights(self) -> bool:
        """Admin by role or by the legacy is_admin flag."""
        return self.is_admin or self.has_role(Role.ADMIN)
    
    @classmethod
    def from_identity(cls, identity: Identity) -> AuthContext:
        return cls(
            user_id=identity.id,
            email=identity.email,
            username=identity.username,
            role=identity.role,
            is_admin=identity.has_admin_rights,
        )
    
    @classmethod
    def anonymous(cls) -> AuthContext:
        """Create an anonymous context (no user)."""
        return cls()
