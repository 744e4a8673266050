"""
Authorization policy
Endpoints and services name the capabilities they need; roles map to
capability sets here and nowhere else.
"""

from dataclasses import dataclass
from enum import Enum

from app.errors import AuthenticationError, AuthorizationError
from app.models.user import UserRole


class Capability(str, Enum):
    READ_OWN = 'read:own'
    READ_ANY = 'read:any'
    WRITE_OWN = 'write:own'
    WRITE_ANY = 'write:any'
    ADMIN = 'admin'


ROLE_CAPABILITIES = {
    UserRole.CITIZEN: frozenset({Capability.READ_OWN, Capability.WRITE_OWN}),
    UserRole.ADMIN: frozenset(Capability),
}


@dataclass(frozen=True)
class Identity:
    """Who is making the request, as resolved by the auth gate"""
    id: int
    username: str
    role: UserRole

    @property
    def capabilities(self):
        return capabilities_for(self.role)

    @property
    def is_admin(self):
        return Capability.ADMIN in self.capabilities

    def can(self, capability):
        return Capability(capability) in self.capabilities

    @classmethod
    def from_user(cls, user):
        return cls(id=user.id, username=user.username, role=UserRole(user.role))


def capabilities_for(role):
    return ROLE_CAPABILITIES.get(UserRole(role), frozenset())


def authorize(identity, *capabilities):
    """Raise unless identity holds every listed capability"""
    if identity is None:
        raise AuthenticationError('Access token required')

    missing = [c for c in capabilities if not identity.can(c)]
    if missing:
        if Capability.ADMIN in missing or Capability.WRITE_ANY in missing:
            raise AuthorizationError('Admin access required')
        raise AuthorizationError('Access denied')
    return identity
