"""
Tests for the passwordless authentication service and its stores.
"""

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy.orm import Query

from digital_menu.core.database import utcnow
from digital_menu.core.errors import InternalError, NotFound, Unauthenticated
from digital_menu.models.session import UserSession
from digital_menu.models.user import User
from digital_menu.models.verification_code import VerificationCode
from digital_menu.services.auth_service import AuthService, placeholder_name
from digital_menu.services.session_store import SessionStore
from digital_menu.services.verification_code_store import VerificationCodeStore

from conftest import FakeEmailService


def issue_code(auth, email):
    return asyncio.run(auth.send_verification_code(email))["code"]


@pytest.fixture
def auth(db, email_service):
    return AuthService(db, email_service=email_service)


@pytest.fixture
def competing_delete(monkeypatch):
    """
    Let another caller consume the code first.

    The first Query.delete() issued runs twice: the first run stands in for a
    concurrent verifier, the second is the caller's own and finds nothing.
    """
    real_delete = Query.delete
    won = []

    def delete(query, *args, **kwargs):
        if not won:
            won.append(real_delete(query, *args, **kwargs))
        return real_delete(query, *args, **kwargs)

    monkeypatch.setattr(Query, "delete", delete)
    return won


class TestVerificationCodeStore:
    """Issuing and consuming one-time codes."""

    def test_generate_code_is_six_digits(self):
        for _ in range(200):
            code = VerificationCodeStore.generate_code()
            assert len(code) == 6
            assert 100000 <= int(code) <= 999999

    def test_create_sets_ten_minute_expiry(self, db):
        now = utcnow()
        verification = VerificationCodeStore(db).create("a@example.com", now=now)

        assert verification.expires_at - now == timedelta(minutes=10)

    def test_consume_succeeds_once(self, db):
        store = VerificationCodeStore(db)
        verification = store.create("a@example.com")

        assert store.consume("a@example.com", verification.code) is True
        assert store.consume("a@example.com", verification.code) is False

    def test_consume_rejects_wrong_email(self, db):
        store = VerificationCodeStore(db)
        verification = store.create("a@example.com")

        assert store.consume("b@example.com", verification.code) is False

    def test_consume_rejects_expired_code(self, db):
        store = VerificationCodeStore(db)
        issued = utcnow() - timedelta(minutes=11)
        verification = store.create("a@example.com", now=issued)

        assert store.consume("a@example.com", verification.code) is False

    def test_older_codes_are_superseded_by_consumed_code(self, db):
        store = VerificationCodeStore(db)
        now = utcnow()
        old = store.create("a@example.com", now=now - timedelta(minutes=2))
        new = store.create("a@example.com", now=now - timedelta(minutes=1))
        if old.code == new.code:
            new.code = "123456" if old.code != "123456" else "654321"
            db.flush()

        assert store.consume("a@example.com", new.code) is True
        assert store.consume("a@example.com", old.code) is False

    def test_consume_loses_race_to_concurrent_delete(self, db, competing_delete):
        store = VerificationCodeStore(db)
        verification = store.create("a@example.com")

        assert store.consume("a@example.com", verification.code) is False
        assert competing_delete == [1]
        assert db.query(VerificationCode).count() == 0

    def test_zero_ttl_expires_immediately(self, db):
        now = utcnow()
        verification = VerificationCodeStore(db, ttl_minutes=0).create("a@example.com", now=now)

        assert verification.expires_at == now

    def test_purge_expired_keeps_live_codes(self, db):
        store = VerificationCodeStore(db)
        store.create("a@example.com", now=utcnow() - timedelta(hours=1))
        live = store.create("a@example.com")

        assert store.purge_expired() == 1
        assert db.query(VerificationCode).one().id == live.id


class TestSessionStore:
    """Bearer-token sessions."""

    def test_token_is_256_bit_hex(self):
        token = SessionStore.generate_token()

        assert len(token) == 64
        int(token, 16)

    def test_session_valid_for_thirty_days(self, db):
        user = User(email="a@example.com", name="A", country="India")
        db.add(user)
        db.flush()

        now = utcnow()
        store = SessionStore(db)
        session = store.create(user.id, now=now)

        assert session.expires_at - now == timedelta(days=30)
        assert store.find_valid(session.token, now=now + timedelta(days=29)) is not None
        assert store.find_valid(session.token, now=now + timedelta(days=30)) is None

    def test_zero_ttl_session_is_never_valid(self, db):
        user = User(email="a@example.com", name="A", country="India")
        db.add(user)
        db.flush()

        now = utcnow()
        store = SessionStore(db, ttl_days=0)
        session = store.create(user.id, now=now)

        assert session.expires_at == now
        assert store.find_valid(session.token, now=now) is None

    def test_revoke_unknown_token_is_noop(self, db):
        assert SessionStore(db).revoke("nope") == 0


class TestSendVerificationCode:
    """Code issuance and the email collaborator."""

    def test_dev_mode_returns_code(self, auth, email_service):
        result = asyncio.run(auth.send_verification_code("admin@example.com"))

        assert result["success"] is True
        assert result["message"] == "Verification code sent"
        assert result["code"] == email_service.last_code("admin@example.com")
        assert len(result["code"]) == 6

    def test_emailed_code_is_not_disclosed(self, db):
        auth = AuthService(db, email_service=FakeEmailService({"success": True}))

        result = asyncio.run(auth.send_verification_code("admin@example.com"))

        assert "code" not in result

    def test_dispatch_failure_is_internal_error(self, db):
        failing = FakeEmailService({"success": False, "error": "boom"})
        auth = AuthService(db, email_service=failing)

        with pytest.raises(InternalError):
            asyncio.run(auth.send_verification_code("admin@example.com"))

    def test_multiple_codes_may_be_outstanding(self, auth, db):
        issue_code(auth, "admin@example.com")
        issue_code(auth, "admin@example.com")

        assert db.query(VerificationCode).filter(
            VerificationCode.email == "admin@example.com"
        ).count() == 2


class TestVerifyAndRegister:
    """Registration with a verification code."""

    def test_creates_user_and_session(self, auth, db):
        code = issue_code(auth, "admin@example.com")

        token, user = auth.verify_and_register("admin@example.com", code, "Admin User", "India")

        assert user.email == "admin@example.com"
        assert user.name == "Admin User"
        assert user.country == "India"
        assert db.query(UserSession).filter(UserSession.token == token).one().user_id == user.id

    def test_code_works_exactly_once(self, auth):
        code = issue_code(auth, "admin@example.com")
        auth.verify_and_register("admin@example.com", code, "Admin User", "India")

        with pytest.raises(Unauthenticated):
            auth.verify_and_register("admin@example.com", code, "Admin User", "India")

    def test_expired_code_is_rejected(self, auth, db):
        code = issue_code(auth, "admin@example.com")
        db.query(VerificationCode).update({"expires_at": utcnow() - timedelta(seconds=1)})
        db.commit()

        with pytest.raises(Unauthenticated):
            auth.verify_and_register("admin@example.com", code, "Admin User", "India")

    def test_existing_user_is_updated_not_duplicated(self, auth, db):
        first = issue_code(auth, "admin@example.com")
        _, registered = auth.verify_and_register("admin@example.com", first, "Admin", "India")

        second = issue_code(auth, "admin@example.com")
        _, updated = auth.verify_and_register("admin@example.com", second, "Admin User", "Nepal")

        assert updated.id == registered.id
        assert updated.name == "Admin User"
        assert updated.country == "Nepal"
        assert db.query(User).filter(User.email == "admin@example.com").count() == 1

    def test_failed_verification_writes_nothing(self, auth, db):
        issue_code(auth, "admin@example.com")

        with pytest.raises(Unauthenticated):
            auth.verify_and_register("admin@example.com", "000000", "Admin", "India")

        assert db.query(User).count() == 0
        assert db.query(UserSession).count() == 0
        assert db.query(VerificationCode).count() == 1


class TestVerifyAndLogin:
    """Login with a verification code."""

    def test_unknown_email_is_auto_provisioned(self, auth):
        code = issue_code(auth, "jane.doe@example.com")

        token, user = auth.verify_and_login("jane.doe@example.com", code)

        assert token
        assert user.name == "Jane.doe"
        assert user.country == "Unknown"

    def test_existing_user_keeps_profile(self, auth):
        code = issue_code(auth, "admin@example.com")
        _, registered = auth.verify_and_register("admin@example.com", code, "Admin User", "India")

        code = issue_code(auth, "admin@example.com")
        _, user = auth.verify_and_login("admin@example.com", code)

        assert user.id == registered.id
        assert user.name == "Admin User"
        assert user.country == "India"

    def test_each_login_gets_its_own_session(self, auth, db):
        tokens = set()
        for _ in range(2):
            code = issue_code(auth, "admin@example.com")
            token, _ = auth.verify_and_login("admin@example.com", code)
            tokens.add(token)

        assert len(tokens) == 2
        assert db.query(UserSession).count() == 2

    def test_code_taken_concurrently_creates_no_session(self, auth, db, competing_delete):
        code = issue_code(auth, "admin@example.com")

        with pytest.raises(Unauthenticated):
            auth.verify_and_login("admin@example.com", code)

        assert competing_delete == [1]
        assert db.query(UserSession).count() == 0
        assert db.query(User).count() == 0

    def test_wrong_code_is_rejected(self, auth):
        code = issue_code(auth, "admin@example.com")
        wrong = "100000" if code != "100000" else "100001"

        with pytest.raises(Unauthenticated):
            auth.verify_and_login("admin@example.com", wrong)

    @pytest.mark.parametrize("email, expected", [
        ("admin@example.com", "Admin"),
        ("bob@example.com", "Bob"),
        ("x@example.com", "X"),
        ("Already@example.com", "Already"),
    ])
    def test_placeholder_name(self, email, expected):
        assert placeholder_name(email) == expected


class TestLogoutAndCurrentUser:
    """Session revocation and user lookup."""

    def test_logout_revokes_token(self, auth):
        code = issue_code(auth, "admin@example.com")
        token, _ = auth.verify_and_login("admin@example.com", code)

        auth.logout(token)

        assert auth.sessions.find_valid(token) is None

    def test_logout_leaves_other_sessions(self, auth):
        first, _ = auth.verify_and_login("admin@example.com", issue_code(auth, "admin@example.com"))
        second, _ = auth.verify_and_login("admin@example.com", issue_code(auth, "admin@example.com"))

        auth.logout(first)

        assert auth.sessions.find_valid(second) is not None

    @pytest.mark.parametrize("token", [None, "", "not-a-token"])
    def test_logout_is_idempotent(self, auth, token):
        auth.logout(token)
        auth.logout(token)

    def test_get_current_user(self, auth):
        code = issue_code(auth, "admin@example.com")
        _, user = auth.verify_and_login("admin@example.com", code)

        assert auth.get_current_user(user.id).email == "admin@example.com"

    def test_get_current_user_missing(self, auth):
        with pytest.raises(NotFound):
            auth.get_current_user("00000000-0000-0000-0000-000000000000")


class TestPurgeExpired:
    """Reclaiming expired codes and sessions."""

    def test_purge_removes_only_expired_rows(self, auth, db):
        live_token, user = auth.verify_and_login("admin@example.com", issue_code(auth, "admin@example.com"))
        dead_token, _ = auth.verify_and_login("admin@example.com", issue_code(auth, "admin@example.com"))
        issue_code(auth, "admin@example.com")
        issue_code(auth, "other@example.com")

        past = utcnow() - timedelta(seconds=1)
        db.query(UserSession).filter(UserSession.token == dead_token).update({"expires_at": past})
        db.query(VerificationCode).filter(VerificationCode.email == "other@example.com").update({"expires_at": past})
        db.commit()

        removed = auth.purge_expired()

        assert removed == {"verification_codes": 1, "sessions": 1}
        assert db.query(UserSession).one().token == live_token
        assert db.query(VerificationCode).one().email == "admin@example.com"
