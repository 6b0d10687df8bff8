"""
Tests for email OTPs, including the in-memory fallback.
"""
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from fitness_gh.core.dates import utcnow
from fitness_gh.core.errors import BadRequestError
from fitness_gh.core.ttl_cache import TTLCache
from fitness_gh.db.models.account import Account
from fitness_gh.db.models.email_verification import EmailVerification
from fitness_gh.services import otp_service

from conftest import create_user


def test_new_code_replaces_previous(db_session):
    create_user(db_session, "esi@example.com", "esi", verified=False)

    first = otp_service.create_email_otp(db_session, "esi@example.com")
    second = otp_service.create_email_otp(db_session, "esi@example.com")

    rows = db_session.query(EmailVerification).filter(EmailVerification.email == "esi@example.com").all()
    assert [r.otp for r in rows] == [second]
    assert len(first) == 6


def test_verify_marks_account(db_session):
    create_user(db_session, "esi@example.com", "esi", verified=False)
    otp = otp_service.create_email_otp(db_session, "esi@example.com")

    assert otp_service.verify_email_otp(db_session, "ESI@example.com", otp) is True

    account = db_session.query(Account).filter(Account.email == "esi@example.com").one()
    assert account.email_verified is True
    record = db_session.query(EmailVerification).one()
    assert record.verified_at is not None


def test_expired_code_rejected(db_session):
    create_user(db_session, "esi@example.com", "esi", verified=False)
    otp = otp_service.create_email_otp(db_session, "esi@example.com")
    record = db_session.query(EmailVerification).one()
    record.expires_at = utcnow() - timedelta(seconds=1)
    db_session.commit()

    with pytest.raises(BadRequestError, match="expired"):
        otp_service.verify_email_otp(db_session, "esi@example.com", otp)


def test_unknown_email_rejected(db_session):
    with pytest.raises(BadRequestError):
        otp_service.verify_email_otp(db_session, "nobody@example.com", "123456", cache=TTLCache())


def test_falls_back_to_memory_when_database_write_fails(db_session, monkeypatch):
    create_user(db_session, "esi@example.com", "esi", verified=False)
    cache = TTLCache()

    def broken_commit():
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    with monkeypatch.context() as m:
        m.setattr(db_session, "commit", broken_commit)
        otp = otp_service.create_email_otp(db_session, "esi@example.com", cache=cache)

    assert db_session.query(EmailVerification).count() == 0
    assert cache.get("otp:esi@example.com")["otp"] == otp

    assert otp_service.verify_email_otp(db_session, "esi@example.com", otp, cache=cache) is True
    assert cache.get("otp:esi@example.com") is None
    db_session.expire_all()
    assert db_session.query(Account).filter(Account.email == "esi@example.com").one().email_verified is True
