"""Unit tests for office schemas."""

import pytest
from pydantic import ValidationError

from juris.core.permissions.models import Resource
from juris.modules.offices.schemas import MemberPermissions, OfficeCreate, normalize_handle


pytestmark = pytest.mark.unit


class TestNormalizeHandle:
    """Tests for handle normalisation."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("silva_law", "@silva_law"),
            ("@silva_law", "@silva_law"),
            ("  Silva_Law ", "@silva_law"),
            ("abc", "@abc"),
            ("a" * 20, "@" + "a" * 20),
        ],
    )
    def test_valid(self, raw: str, expected: str):
        assert normalize_handle(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["ab", "a" * 21, "silva-law", "silva law", "@", "", "@@silva", "sílva"],
    )
    def test_invalid(self, raw: str):
        with pytest.raises(ValueError):
            normalize_handle(raw)

    def test_office_create_normalises(self):
        data = OfficeCreate(name="Silva Law", handle="Silva_Law")
        assert data.handle == "@silva_law"

    def test_office_create_rejects_bad_handle(self):
        with pytest.raises(ValidationError):
            OfficeCreate(name="Silva Law", handle="no way")


class TestMemberPermissions:
    """Tests for the override flags."""

    def test_defaults_are_off(self):
        flags = MemberPermissions()
        assert not any(flags.grants_view(r) for r in Resource)

    def test_all_granted_covers_only_flagged_resources(self):
        flags = MemberPermissions.all_granted()

        assert flags.grants_view(Resource.FINANCIAL)
        assert flags.grants_view(Resource.SETTINGS)
        assert not flags.grants_view(Resource.CLIENTS)
        assert not flags.grants_view(Resource.TEAM)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            MemberPermissions().cases = True  # type: ignore[misc]
