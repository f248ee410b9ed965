"""
Unit tests for access scoping, role normalization and error classification.
"""
import pytest

from landlord_reports.core.auth import CurrentUser, Role
from landlord_reports.core.errors import (
    AccessDenied,
    InvalidReportParameter,
    ReportError,
    classify_error,
)
from landlord_reports.services.access import ReportScope, normalize_property_id, resolve_scope


# ── normalize_property_id ────────────────────────────────────────────────────

class TestNormalizePropertyId:
    @pytest.mark.parametrize("raw", [None, "", "null", "undefined", "  "])
    def test_serialization_artifacts_are_absent(self, raw):
        assert normalize_property_id(raw) is None

    def test_real_id_is_kept(self):
        assert normalize_property_id("6f1c2d9e-0000-4000-8000-000000000001") == "6f1c2d9e-0000-4000-8000-000000000001"

    def test_numeric_id_becomes_string(self):
        assert normalize_property_id(42) == "42"

    def test_idempotent(self):
        assert normalize_property_id(normalize_property_id("null")) is None
        assert normalize_property_id(normalize_property_id(" abc ")) == "abc"


# ── Role ─────────────────────────────────────────────────────────────────────

class TestRole:
    def test_case_and_whitespace_are_ignored(self):
        assert Role.from_claim("Admin") is Role.ADMIN
        assert Role.from_claim(" MANAGER ") is Role.MANAGER

    def test_unknown_or_missing_role_is_user(self):
        assert Role.from_claim("tenant") is Role.USER
        assert Role.from_claim(None) is Role.USER

    def test_current_user_id_is_string(self):
        assert CurrentUser(user_id=7, role=Role.MANAGER).id == "7"


# ── resolve_scope ────────────────────────────────────────────────────────────

class TestResolveScope:
    def test_admin_is_unrestricted(self, db, admin, caller):
        assert resolve_scope(db, caller(admin)) == ReportScope()

    def test_admin_property_is_not_ownership_checked(self, db, admin, caller):
        # no such property; admins are not checked
        scope = resolve_scope(db, caller(admin), "does-not-exist")
        assert scope == ReportScope(property_id="does-not-exist")

    def test_manager_without_property_is_scoped_to_ownership(self, db, manager_a, caller):
        scope = resolve_scope(db, caller(manager_a))
        assert scope == ReportScope(property_id=None, manager_id=manager_a.id)

    def test_manager_null_string_is_absent(self, db, manager_a, caller):
        scope = resolve_scope(db, caller(manager_a), "null")
        assert scope == ReportScope(property_id=None, manager_id=manager_a.id)

    def test_manager_own_property(self, db, factory, manager_a, caller):
        prop = factory.property(manager=manager_a)
        scope = resolve_scope(db, caller(manager_a), prop.id)
        assert scope == ReportScope(property_id=prop.id, manager_id=manager_a.id)

    def test_manager_other_property_is_denied(self, db, factory, manager_a, manager_b, caller):
        prop = factory.property(manager=manager_b)
        with pytest.raises(AccessDenied) as excinfo:
            resolve_scope(db, caller(manager_a), prop.id)
        assert "Access denied" in str(excinfo.value)

    def test_manager_unassigned_property_is_denied(self, db, factory, manager_a, caller):
        prop = factory.property(manager=None)
        with pytest.raises(AccessDenied):
            resolve_scope(db, caller(manager_a), prop.id)

    def test_manager_missing_property_is_denied(self, db, manager_a, caller):
        with pytest.raises(AccessDenied):
            resolve_scope(db, caller(manager_a), "does-not-exist")


# ── classify_error ───────────────────────────────────────────────────────────

class TestClassifyError:
    def test_access_denied(self):
        assert classify_error(AccessDenied()) == 403

    def test_access_denied_by_message(self):
        assert classify_error(RuntimeError("Access denied: nope")) == 403

    def test_invalid_parameter(self):
        assert classify_error(InvalidReportParameter("bad date")) == 400

    def test_base_report_error(self):
        assert classify_error(ReportError("something")) == 500

    def test_anything_else(self):
        assert classify_error(ValueError("connection reset")) == 500
