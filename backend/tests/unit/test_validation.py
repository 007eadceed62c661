"""Unit tests for field rules on slugs, names and task titles."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from tenancy.core.exceptions import ValidationError
from tenancy.core.validation import (
    describe_errors,
    normalize_slug,
    validate_name,
    validate_slug,
    validate_task_title,
)
from tenancy.schemas.organization import OrganizationCreateRequest, OrganizationUpdateRequest


class TestSlugRules:
    def test_normalize_trims_and_lowercases(self):
        assert normalize_slug("  Acme-Corp ") == "acme-corp"

    @pytest.mark.parametrize("slug", ["acme", "a1b", "acme-corp-2", "123", " ACME "])
    def test_valid_slugs(self, slug):
        assert validate_slug(slug) == slug.strip().lower()

    @pytest.mark.parametrize("slug", ["ab", "-acme", "acme-", "ac me", "acme_corp", "acmé"])
    def test_invalid_slugs(self, slug):
        with pytest.raises(ValidationError) as exc_info:
            validate_slug(slug)
        assert exc_info.value.field == "slug"

    def test_validate_slug_names_the_failing_field(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_slug("a")

        assert exc_info.value.field == "slug"
        assert exc_info.value.status_code == 422
        assert exc_info.value.details == {"slug": "String should have at least 3 characters"}

    def test_overlong_slug_rejected(self):
        with pytest.raises(ValidationError):
            validate_slug("a" * 64)

    def test_null_slug_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_slug(None)
        assert exc_info.value.field == "slug"


class TestNameAndTitleRules:
    def test_name_is_stripped(self):
        assert validate_name("  Acme Inc  ") == "Acme Inc"

    def test_single_character_name_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_name(" A ")
        assert exc_info.value.field == "name"

    def test_null_name_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_name(None)
        assert exc_info.value.field == "name"

    def test_task_title_minimum_length(self):
        assert validate_task_title("Ship") == "Ship"
        with pytest.raises(ValidationError) as exc_info:
            validate_task_title("abc")
        assert exc_info.value.field == "title"


class TestRequestSchemas:
    def test_create_request_normalizes_slug(self):
        request = OrganizationCreateRequest(name=" Acme Inc ", slug=" ACME-Corp ")

        assert request.name == "Acme Inc"
        assert request.slug == "acme-corp"

    def test_create_request_rejects_bad_slug(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            OrganizationCreateRequest(name="Acme", slug="a!")

        assert "slug" in describe_errors(exc_info.value.errors())

    def test_update_request_rejects_explicit_null_name(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            OrganizationUpdateRequest(name=None)

        assert list(describe_errors(exc_info.value.errors())) == ["name"]

    def test_update_request_allows_clearing_logo(self):
        request = OrganizationUpdateRequest(logo_url=None)

        assert request.model_dump(exclude_unset=True) == {"logo_url": None}

    def test_describe_errors_drops_request_location(self):
        errors = [
            {"loc": ("body", "slug"), "msg": "too short"},
            {"loc": ("body", "slug"), "msg": "second"},
            {"loc": ("query", "slug"), "msg": "bad query"},
            {"loc": ("body",), "msg": "missing body"},
        ]

        assert describe_errors(errors) == {"slug": "too short", "body": "missing body"}
