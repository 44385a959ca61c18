"""
Tests for the credential store (airmon.services.users).
"""

import pytest

from airmon.core.errors import ValidationError
from airmon.services import users

from conftest import PASSWORD


# ============================================================================
# Creation
# ============================================================================

def test_created_user_password_is_hashed(db, user):
    db.expire_all()
    stored = users.get_user(db, user.id)

    assert stored.password != PASSWORD
    assert stored.password.startswith("$2b$")
    assert users.verify_user_password(stored, PASSWORD)


def test_duplicate_username_rejected(db, user):
    with pytest.raises(ValidationError) as exc:
        users.create_user(db, username="alice", email="other@example.com", password=PASSWORD)
    assert "Username" in exc.value.message


def test_duplicate_email_rejected(db, user):
    with pytest.raises(ValidationError) as exc:
        users.create_user(db, username="bob", email="alice@example.com", password=PASSWORD)
    assert "Email" in exc.value.message


def test_invalid_email_rejected(db):
    with pytest.raises(ValidationError):
        users.create_user(db, username="bob", email="not-an-email", password=PASSWORD)


def test_short_password_rejected(db):
    with pytest.raises(ValidationError):
        users.create_user(db, username="bob", email="bob@example.com", password="12345")


# ============================================================================
# Lookup
# ============================================================================

def test_missing_user_is_none(db):
    assert users.get_user(db, 9999) is None
    assert users.get_user_by_login(db, "nobody") is None


def test_login_lookup_by_username_or_email(db, user):
    assert users.get_user_by_login(db, "alice").id == user.id
    assert users.get_user_by_login(db, "alice@example.com").id == user.id


# ============================================================================
# Updates
# ============================================================================

def test_update_without_password_keeps_hash(db, user):
    before = user.password
    updated = users.update_user(db, user.id, {"firstName": "Al", "bio": "hello"})

    assert updated.first_name == "Al"
    assert updated.bio == "hello"
    assert updated.password == before


def test_password_update_rehashes_and_invalidates_old(db, user):
    updated = users.update_user(db, user.id, {"password": "brand-new-pw"})

    assert updated.password != "brand-new-pw"
    assert users.verify_user_password(updated, "brand-new-pw")
    assert not users.verify_user_password(updated, PASSWORD)


def test_update_missing_user_returns_none(db):
    assert users.update_user(db, 9999, {"firstName": "X"}) is None


def test_verify_user_password_never_raises(db, user):
    assert users.verify_user_password(user, "") is False
    assert users.verify_user_password(user, "wrong") is False


# ============================================================================
# Settings document
# ============================================================================

def test_settings_default_to_empty_mapping(db, user):
    assert users.get_settings(db, user.id) == {}


def test_save_settings_overwrites_whole_document(db, user):
    users.save_settings(db, user.id, {"theme": "dark", "units": "metric"})
    users.save_settings(db, user.id, {"refresh": 30})

    assert users.get_settings(db, user.id) == {"refresh": 30}


def test_profile_excludes_password(user):
    profile = users.to_profile(user)

    assert "password" not in profile
    assert profile["username"] == "alice"
    assert profile["memberSince"] == user.created_at
