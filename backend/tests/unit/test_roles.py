"""Unit tests for the organization role hierarchy."""

import pytest

from tenancy.models.enums import OrganizationRole


class TestRoleHierarchy:
    """owner > admin > member, with no membership below all of them."""

    def test_hierarchy_levels_are_ordered(self):
        level = OrganizationRole.get_hierarchy_level
        assert level(OrganizationRole.OWNER) > level(OrganizationRole.ADMIN)
        assert level(OrganizationRole.ADMIN) > level(OrganizationRole.MEMBER)
        assert level(OrganizationRole.MEMBER) > level(None)

    @pytest.mark.parametrize(
        "role,required,expected",
        [
            (OrganizationRole.OWNER, OrganizationRole.OWNER, True),
            (OrganizationRole.OWNER, OrganizationRole.ADMIN, True),
            (OrganizationRole.OWNER, OrganizationRole.MEMBER, True),
            (OrganizationRole.ADMIN, OrganizationRole.OWNER, False),
            (OrganizationRole.ADMIN, OrganizationRole.ADMIN, True),
            (OrganizationRole.ADMIN, OrganizationRole.MEMBER, True),
            (OrganizationRole.MEMBER, OrganizationRole.ADMIN, False),
            (OrganizationRole.MEMBER, OrganizationRole.MEMBER, True),
        ],
    )
    def test_has_permission(self, role, required, expected):
        assert role.has_permission(required) is expected

    def test_is_admin_covers_owner_and_admin(self):
        assert OrganizationRole.OWNER.is_admin
        assert OrganizationRole.ADMIN.is_admin
        assert not OrganizationRole.MEMBER.is_admin

    def test_roles_serialize_as_lowercase_strings(self):
        assert OrganizationRole("owner") is OrganizationRole.OWNER
        assert OrganizationRole.ADMIN.value == "admin"
