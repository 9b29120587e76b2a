"""Tests for owner-id hashing and htpasswd authentication."""

import pytest

from fragments.auth import (
    authenticate,
    hash_owner_id,
    hash_password,
    load_htpasswd,
    verify_password
)
from fragments.exceptions import InvalidCredentialsError


class TestOwnerId:
    """Tests for owner id hashing."""

    def test_hash_is_sha256_hex(self):
        assert hash_owner_id("user1@example.com") == (
            "b36a83701f1c3191e19722d6f90274bc1b5501fe69ebf33313e440fe4b0fe210"
        )

    def test_hash_is_stable_and_distinct(self):
        assert hash_owner_id("a@example.com") == hash_owner_id("a@example.com")
        assert hash_owner_id("a@example.com") != hash_owner_id("b@example.com")


class TestPasswordHashing:
    """Tests for bcrypt helpers."""

    def test_verify_password(self):
        password_hash = hash_password("secret", rounds=4)
        assert password_hash.startswith("$2")
        assert verify_password("secret", password_hash)
        assert not verify_password("wrong", password_hash)

    def test_malformed_hash(self):
        assert not verify_password("secret", "not-a-bcrypt-hash")


class TestHtpasswd:
    """Tests for the password file."""

    def test_load_skips_comments_and_blank_lines(self, tmp_path):
        path = tmp_path / ".htpasswd"
        path.write_text("# comment\n\nuser:$2b$04$hash\nbroken-line\n")
        assert load_htpasswd(str(path)) == {"user": "$2b$04$hash"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidCredentialsError):
            load_htpasswd(str(tmp_path / "missing"))

    def test_authenticate_returns_owner_id(self, htpasswd_file, user1):
        email, password = user1
        assert authenticate(email, password) == hash_owner_id(email)

    def test_authenticate_wrong_password(self, htpasswd_file, user1):
        with pytest.raises(InvalidCredentialsError):
            authenticate(user1[0], "incorrect")

    def test_authenticate_unknown_user(self, htpasswd_file):
        with pytest.raises(InvalidCredentialsError):
            authenticate("nobody@email.com", "password1")

    def test_authenticate_without_configuration(self, monkeypatch):
        monkeypatch.setattr("fragments.config.HTPASSWD_FILE", None)
        with pytest.raises(InvalidCredentialsError):
            authenticate("user1@email.com", "password1")
