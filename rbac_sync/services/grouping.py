"""
Canonical grouping of permission records into document blocks.

Records of one collection that share the same rule (action, filters,
presets and fields) collapse into a single block listing every role that
holds the rule. The output depends only on the set of records, not on the
order the store returned them in.
"""
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Protocol, Tuple, Union

from rbac_sync.models.enums import PermissionAction
from rbac_sync.schemas.documents import PermissionBlock
from rbac_sync.schemas.role_ref import RoleRef


class PermissionRecord(Protocol):
    role: Optional[str]
    action: str
    permissions: Any
    validation: Any
    presets: Any
    fields: Optional[List[str]]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (dict, list, tuple, str)):
        return len(value) == 0
    return False


def normalize_fields(fields: Optional[List[str]]) -> Optional[Union[str, List[str]]]:
    """
    Sort the field list and collapse a single field to a bare string.

    Returns None when every field is allowed (null) or the list is empty.
    """
    if not isinstance(fields, (list, tuple)) or not fields:
        return None
    ordered = sorted(fields)
    return ordered[0] if len(ordered) == 1 else ordered


@dataclass
class PermissionRule:
    """
    The semantic part of a permission record, roles excluded.

    Two rules are equal when all five attributes are structurally equal;
    empty filters compare equal to absent ones.
    """

    action: str
    permissions: Optional[Any] = None
    validation: Optional[Any] = None
    presets: Optional[Any] = None
    fields: Optional[Union[str, List[str]]] = None

    @classmethod
    def from_record(cls, record: PermissionRecord) -> "PermissionRule":
        return cls(
            action=PermissionAction(record.action).value,
            permissions=None if _is_empty(record.permissions) else record.permissions,
            validation=None if _is_empty(record.validation) else record.validation,
            presets=None if _is_empty(record.presets) else record.presets,
            fields=normalize_fields(record.fields),
        )

    def to_block(self, roles: List[RoleRef]) -> PermissionBlock:
        return PermissionBlock(
            action=PermissionAction(self.action),
            permissions=self.permissions,
            validation=self.validation,
            presets=self.presets,
            fields=self.fields,
            roles=[role.to_value() for role in roles],
        )


def _record_order(record: PermissionRecord) -> Tuple[str, Tuple[int, str]]:
    return (PermissionAction(record.action).value, RoleRef.from_value(record.role).sort_key())


def group_permissions(records: Iterable[PermissionRecord]) -> List[PermissionBlock]:
    """
    Group permission records of one collection into document blocks.

    Records are visited by action, then role, so the block order and the
    order of roles inside a block are stable across runs. A role is listed
    at most once per block.

    Args:
        records: Every permission record stored for the collection

    Returns:
        Blocks in document order; empty when there are no records
    """
    groups: List[Tuple[PermissionRule, List[RoleRef]]] = []

    for record in sorted(records, key=_record_order):
        rule = PermissionRule.from_record(record)
        role = RoleRef.from_value(record.role)

        for existing, roles in groups:
            if existing == rule:
                if role not in roles:
                    roles.append(role)
                break
        else:
            groups.append((rule, [role]))

    return [rule.to_block(roles) for rule, roles in groups]
