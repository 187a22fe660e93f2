import pytest

from vaccine_scheduler.core.exceptions import (
    DuplicateUsername, Forbidden, InvalidInput, Unauthorized
)
from vaccine_scheduler.core.security import UserRole
from vaccine_scheduler.core.session import SessionState
from vaccine_scheduler.models import Caregiver, Patient
from vaccine_scheduler.services.auth_service import AuthService

from .conftest import STRONG_PASSWORD

class TestRegistration:

    def test_register_patient(self, db):
        """Registration stores a salt and hash, never the password."""
        AuthService(db).register(UserRole.PATIENT, "pat", STRONG_PASSWORD)

        stored = db.query(Patient).filter(Patient.username == "pat").one()
        assert stored.salt and stored.hash
        assert stored.hash != STRONG_PASSWORD.encode()

    def test_username_cannot_be_reused_in_same_role(self, db):
        auth = AuthService(db)
        auth.register(UserRole.PATIENT, "pat", STRONG_PASSWORD)

        for _ in range(2):
            with pytest.raises(DuplicateUsername):
                auth.register(UserRole.PATIENT, "pat", "Zyxwvu9?")

        assert db.query(Patient).count() == 1

    def test_username_may_repeat_across_roles(self, db):
        auth = AuthService(db)
        auth.register(UserRole.PATIENT, "sam", STRONG_PASSWORD)
        auth.register(UserRole.CAREGIVER, "sam", STRONG_PASSWORD)

        assert auth.username_exists(UserRole.PATIENT, "sam")
        assert auth.username_exists(UserRole.CAREGIVER, "sam")

    def test_usernames_are_case_sensitive(self, db):
        auth = AuthService(db)
        auth.register(UserRole.CAREGIVER, "Carol", STRONG_PASSWORD)

        assert not auth.username_exists(UserRole.CAREGIVER, "carol")

    def test_weak_password_is_rejected(self, db):
        with pytest.raises(InvalidInput) as exc_info:
            AuthService(db).register(UserRole.CAREGIVER, "carol", "Abcdefg1")

        assert "not strong enough" in exc_info.value.detail
        assert db.query(Caregiver).count() == 0

class TestLogin:

    def test_login_success(self, db):
        auth = AuthService(db)
        auth.register(UserRole.CAREGIVER, "carol", STRONG_PASSWORD)

        session = auth.login(SessionState(), UserRole.CAREGIVER, "carol", STRONG_PASSWORD)

        assert session.is_caregiver
        assert session.username == "carol"

    def test_wrong_password(self, db):
        auth = AuthService(db)
        auth.register(UserRole.PATIENT, "pat", STRONG_PASSWORD)
        session = SessionState()

        with pytest.raises(Unauthorized):
            auth.login(session, UserRole.PATIENT, "pat", "Wrong123!")
        assert not session.is_authenticated

    def test_unknown_user(self, db):
        with pytest.raises(Unauthorized):
            AuthService(db).login(SessionState(), UserRole.PATIENT, "ghost", STRONG_PASSWORD)

    def test_role_namespaces_are_separate(self, db):
        auth = AuthService(db)
        auth.register(UserRole.PATIENT, "pat", STRONG_PASSWORD)

        with pytest.raises(Unauthorized):
            auth.login(SessionState(), UserRole.CAREGIVER, "pat", STRONG_PASSWORD)

    def test_login_while_logged_in(self, db, patient):
        """A caregiver login on a patient session fails and changes nothing."""
        auth = AuthService(db)
        auth.register(UserRole.CAREGIVER, "carol", STRONG_PASSWORD)

        with pytest.raises(Forbidden):
            auth.login(patient, UserRole.CAREGIVER, "carol", STRONG_PASSWORD)

        assert patient.is_patient
        assert patient.username == "pat"

    def test_logout(self, db, patient):
        auth = AuthService(db)
        assert auth.logout(patient) == "pat"

        with pytest.raises(Unauthorized):
            auth.logout(patient)
