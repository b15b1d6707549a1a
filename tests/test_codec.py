"""Tests for reading and writing the YAML documents."""

from __future__ import annotations

from pathlib import Path

import pytest

from rbac_sync.core.exceptions import DocumentParseError
from rbac_sync.models import DEFAULT_ROLE_ICON, PermissionAction
from rbac_sync.schemas.documents import PermissionBlock, RoleBlock
from rbac_sync.services.codec import dump_permissions, dump_roles, load_permissions, load_roles

PATH = Path("permissions/articles.yaml")


def test_dump_permissions_sorts_keys_and_separates_entries() -> None:
    blocks = [
        PermissionBlock(action="create", presets={"status": "draft"}, roles=["editor"]),
        PermissionBlock(
            action="read",
            permissions={"status": {"_eq": "published"}},
            fields=["body", "title"],
            roles=[None, "editor"],
        ),
    ]

    assert dump_permissions(blocks) == (
        "- action: create\n"
        "  presets:\n"
        "    status: draft\n"
        "  roles:\n"
        "  - editor\n"
        "\n"
        "- action: read\n"
        "  fields:\n"
        "  - body\n"
        "  - title\n"
        "  permissions:\n"
        "    status:\n"
        "      _eq: published\n"
        "  roles:\n"
        "  - null\n"
        "  - editor\n"
    )


def test_dump_permissions_of_nothing_is_empty() -> None:
    assert dump_permissions([]) == ""
    assert dump_roles([]) == ""


def test_load_permissions_expands_field_shorthand() -> None:
    text = "- action: read\n  fields: name\n  roles:\n  - editor\n"

    [block] = load_permissions(text, PATH)

    assert block.action is PermissionAction.READ
    assert block.fields == "name"
    assert block.field_list == ["name"]
    assert list(block.expand("articles")) == [
        {
            "role": "editor",
            "collection": "articles",
            "action": "read",
            "permissions": None,
            "validation": None,
            "presets": None,
            "fields": ["name"],
        }
    ]


def test_field_shorthand_round_trips() -> None:
    block = PermissionBlock(action="read", fields="name", roles=["editor"])

    text = dump_permissions([block])

    assert "fields: name\n" in text
    assert load_permissions(text, PATH)[0].field_list == ["name"]


def test_load_permissions_keeps_null_and_quoted_null_roles_apart() -> None:
    text = "- action: read\n  roles:\n  - null\n  - 'null'\n"

    [block] = load_permissions(text, PATH)

    assert block.roles == [None, "null"]
    assert [role.is_public for role in block.role_refs] == [True, False]


def test_load_permissions_without_roles_still_parses() -> None:
    [block] = load_permissions("- action: delete\n", PATH)

    assert block.roles is None


def test_empty_document_loads_as_no_blocks() -> None:
    assert load_permissions("", PATH) == []


@pytest.mark.parametrize(
    "text, reason",
    [
        ("- action: read\n  roles: [editor\n", "invalid YAML"),
        ("action: read\n", "expected a list"),
        ("- read\n", "is not a mapping"),
        ("- action: publish\n  roles: [editor]\n", "is invalid"),
    ],
)
def test_malformed_permission_documents(text: str, reason: str) -> None:
    with pytest.raises(DocumentParseError) as exc_info:
        load_permissions(text, PATH)

    assert reason in str(exc_info.value)
    assert exc_info.value.path == PATH


def test_dump_roles_keeps_identity_first_and_drops_falsy_values() -> None:
    blocks = [
        RoleBlock(id="admin", name="Administrator", icon="verified", admin_access=True, app_access=True),
        RoleBlock(
            id="editor",
            name="Editor",
            description="Edits articles",
            ip_allowlist=["10.0.0.0/8"],
            enforce_two_factor=False,
        ),
    ]

    assert dump_roles(blocks) == (
        "- id: admin\n"
        "  name: Administrator\n"
        "  icon: verified\n"
        "  app_access: true\n"
        "  admin_access: true\n"
        "\n"
        "- id: editor\n"
        "  name: Editor\n"
        f"  icon: {DEFAULT_ROLE_ICON}\n"
        "  description: Edits articles\n"
        "  ip_allowlist:\n"
        "  - 10.0.0.0/8\n"
    )


def test_load_roles_applies_defaults() -> None:
    text = "- id: 42\n  name: Reviewer\n  description: null\n"

    [role] = load_roles(text, Path("roles.yaml"))

    assert role.to_record() == {
        "id": "42",
        "name": "Reviewer",
        "icon": DEFAULT_ROLE_ICON,
        "description": "",
        "enforce_two_factor": False,
        "external_id": None,
        "ip_allowlist": [],
        "app_access": False,
        "admin_access": False,
    }


def test_load_roles_requires_name() -> None:
    with pytest.raises(DocumentParseError):
        load_roles("- id: editor\n", Path("roles.yaml"))
