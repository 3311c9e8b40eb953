"""
Tenant provisioning, global email uniqueness and the current term switch.
"""

import datetime
import pytest

from eduportal_backend.api.exceptions import BadRequestException
from eduportal_backend.model.auth import Role, User
from eduportal_backend.model.grading import Term
from eduportal_backend.model.tenant import Tenant
from eduportal_backend.services import provisioning
from eduportal_backend.services.provisioning import create_default_roles, provision_tenant, slugify
from eduportal_backend.services.terms import set_current_term
from eduportal_backend.services.users import create_tenant_user, role_by_name
from eduportal_backend.tests.fixtures import make_school


class TestProvisioning:

    def test_creates_tenant_roles_and_admin(self, db):
        result = provision_tenant(db, "Green Valley School", "Gina", "Green", "Gina@GreenValley.edu")

        assert result.tenant.slug == "green-valley-school"
        assert result.tenant.status == "active"
        assert result.tenant.primary_admin_user_id == result.admin_user.id
        assert sorted(role.name for role in result.roles) == ["ADMIN", "PARENT", "STUDENT", "TEACHER"]
        assert all(role.is_default for role in result.roles)

        assert result.admin_user.email == "gina@greenvalley.edu"
        assert [role.name for role in result.admin_user.roles] == ["ADMIN"]
        assert len(result.temp_password) == 12

    def test_supplied_password_is_not_echoed(self, db):
        result = provision_tenant(db, "Blue School", "Bo", "Blue", "bo@blue.edu", admin_password="mysecret")
        assert result.temp_password is None

    def test_slug_is_derived(self):
        assert slugify("  St. Mary's  High School ") == "st-marys-high-school"

    def test_slug_collision(self, db, school):
        with pytest.raises(BadRequestException):
            provision_tenant(db, "Springfield Elementary", "X", "Y", "x@y.edu")

    def test_missing_admin_fields(self, db):
        with pytest.raises(BadRequestException):
            provision_tenant(db, "School", "", "Last", "a@b.edu")

    def test_admin_email_must_be_unused(self, db, school):
        with pytest.raises(BadRequestException):
            provision_tenant(db, "Another School", "A", "B", "ADMIN@springfield.edu")

    def test_failed_admin_creation_rolls_back(self, db, monkeypatch):

        def broken_user(*args, **kwargs):
            raise RuntimeError("user store unavailable")

        monkeypatch.setattr(provisioning, "create_tenant_user", broken_user)

        with pytest.raises(RuntimeError):
            provision_tenant(db, "Doomed School", "D", "Oomed", "d@doomed.edu")

        tenant = db.query(Tenant).filter(Tenant.slug == "doomed-school").one()
        assert tenant.deleted
        assert tenant.status == "inactive"
        assert db.query(Role).filter(Role.tenant_id == tenant.id, Role.deleted == False).count() == 0

        # the slug is free again
        monkeypatch.undo()
        result = make_school(db, "Doomed School", "again@doomed.edu")
        assert result.tenant.id != tenant.id

    def test_default_role_seeding_is_idempotent(self, db, school):
        assert create_default_roles(db, school.tenant.id) == []
        assert db.query(Role).filter(Role.tenant_id == school.tenant.id, Role.deleted == False).count() == 4


class TestEmailUniqueness:

    def test_email_is_unique_across_tenants(self, db, school, other_school):
        role = role_by_name(db, other_school.tenant.id, "TEACHER")

        with pytest.raises(BadRequestException):
            create_tenant_user(db, other_school.tenant.id, "Copy", "Cat", "Admin@Springfield.edu", roles=[role])

    def test_deleted_users_release_their_email(self, db, school, other_school):
        admin = db.query(User).filter(User.id == school.admin_user.id).one()
        admin.soft_delete()
        db.commit()

        user, temp_password = create_tenant_user(db, other_school.tenant.id, "New", "Owner", "admin@springfield.edu")

        assert user.tenant_id == other_school.tenant.id
        assert temp_password is not None


class TestCurrentTerm:

    def _term(self, db, tenant_id, name, is_current=False):
        term = Term(
            tenant_id=tenant_id,
            name=name,
            academic_year="2024/2025",
            start_date=datetime.date(2024, 9, 1),
            end_date=datetime.date(2024, 12, 20),
            is_current=is_current,
        )
        db.add(term)
        db.commit()
        return term

    def test_single_winner(self, db, school, other_school):
        term_a = self._term(db, school.tenant.id, "Term A", is_current=True)
        term_b = self._term(db, school.tenant.id, "Term B")
        foreign = self._term(db, other_school.tenant.id, "Term A", is_current=True)

        set_current_term(db, school.tenant.id, term_b)

        db.refresh(term_a)
        db.refresh(foreign)
        assert term_b.is_current
        assert not term_a.is_current
        assert foreign.is_current
        assert db.query(Term).filter(Term.tenant_id == school.tenant.id, Term.is_current == True).count() == 1
