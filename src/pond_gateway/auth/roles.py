"""Caller identity and role checks for mutating engine operations.

ADMIN implies every other role.
"""

from dataclasses import dataclass, field

from src.pond_common.enums import Role
from src.pond_common.errors import PermissionDeniedError


@dataclass(frozen=True)
class Caller:
    address: str
    roles: frozenset[Role] = field(default_factory=frozenset)

    def has_role(self, role: Role) -> bool:
        return Role.ADMIN in self.roles or role in self.roles


ANONYMOUS = Caller(address="anonymous")


def require_role(caller: Caller, role: Role) -> None:
    if not caller.has_role(role):
        raise PermissionDeniedError(caller.address, role.value)
