"""
YAML codec for the roles document and the permission documents.

Output is deterministic: permission entries have their keys sorted, role
entries keep ``id, name, icon`` first followed by the optional keys in
declaration order. A blank line separates list entries so that version
control diffs stay readable.
"""
from pathlib import Path
from typing import Any, List, Sequence, Type, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from rbac_sync.core.exceptions import DocumentParseError
from rbac_sync.schemas.documents import PermissionBlock, RoleBlock

BlockType = TypeVar("BlockType", bound=BaseModel)


def _separate_entries(text: str, first_key: str) -> str:
    """Insert a blank line before every top-level entry but the first."""
    marker = f"\n- {first_key}:"
    return text.replace(marker, "\n" + marker)


def _dump(entries: List[Any], sort_keys: bool) -> str:
    return yaml.safe_dump(
        entries,
        sort_keys=sort_keys,
        default_flow_style=False,
        allow_unicode=True,
    )


def _load(text: str, path: Path, model: Type[BlockType]) -> List[BlockType]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentParseError(path, "invalid YAML", e) from e

    if data is None:
        return []
    if not isinstance(data, list):
        raise DocumentParseError(path, f"expected a list, got {type(data).__name__}")

    blocks: List[BlockType] = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise DocumentParseError(path, f"entry {index} is not a mapping")
        try:
            blocks.append(model.model_validate(entry))
        except ValidationError as e:
            raise DocumentParseError(path, f"entry {index} is invalid", e) from e
    return blocks


def dump_permissions(blocks: Sequence[PermissionBlock]) -> str:
    """Serialize permission blocks; an empty sequence yields an empty string."""
    if not blocks:
        return ""
    text = _dump([block.to_document() for block in blocks], sort_keys=True)
    return _separate_entries(text, "action")


def load_permissions(text: str, path: Path) -> List[PermissionBlock]:
    """Parse a permission document."""
    return _load(text, path, PermissionBlock)


def dump_roles(blocks: Sequence[RoleBlock]) -> str:
    """Serialize role blocks; an empty sequence yields an empty string."""
    if not blocks:
        return ""
    text = _dump([block.to_document() for block in blocks], sort_keys=False)
    return _separate_entries(text, "id")


def load_roles(text: str, path: Path) -> List[RoleBlock]:
    """Parse the roles document."""
    return _load(text, path, RoleBlock)
