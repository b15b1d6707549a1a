"""
Role reference value used by permission rules.

A rule either targets a named role or the public role (unauthenticated
access). The store and the documents spell the public role as ``null``;
inside the engine it is the ``PUBLIC`` value so that it can never be
mistaken for a missing value or for a role literally named "null".
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class RoleRef:
    """Named role (``id`` set) or the public role (``id`` is None)."""

    id: Optional[str] = None

    @classmethod
    def named(cls, role_id: str) -> "RoleRef":
        if role_id is None:
            raise ValueError("Named role requires an identifier")
        return cls(str(role_id))

    @classmethod
    def from_value(cls, value: Optional[str]) -> "RoleRef":
        """Convert a store or document value; ``None`` is the public role."""
        return PUBLIC if value is None else cls.named(value)

    @property
    def is_public(self) -> bool:
        return self.id is None

    def to_value(self) -> Optional[str]:
        """Store and document form of this role."""
        return self.id

    def sort_key(self) -> Tuple[int, str]:
        # Public role first, then named roles by id
        return (0, "") if self.is_public else (1, self.id)

    def __str__(self) -> str:
        return "public" if self.is_public else self.id


PUBLIC = RoleRef()


def split_roles(roles: Iterable[RoleRef]) -> Tuple[List[str], bool]:
    """
    Split role references into named ids and a public flag.

    Used to build ``role IN (...) OR role IS NULL`` filters.
    """
    named: List[str] = []
    include_public = False
    for role in roles:
        if role.is_public:
            include_public = True
        elif role.id not in named:
            named.append(role.id)
    return named, include_public
