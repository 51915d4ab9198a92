"""Tests for hashing and token helpers."""

from app import security
from app.models.user import User


class TestDigest:
    """Tests for bcrypt digests."""

    def test_test_runs_use_minimum_cost(self):
        """Test runs hash with the cheapest bcrypt cost."""
        assert security.hashing_cost() == security.BCRYPT_MIN_COST
        assert User.digest("password").startswith("$2b$04$")

    def test_explicit_cost(self):
        """An explicit cost overrides the configured one."""
        assert User.digest("password", cost=5).startswith("$2b$05$")

    def test_digest_is_salted(self):
        """Hashing the same string twice gives different digests that both verify."""
        first = User.digest("password")
        second = User.digest("password")
        assert first != second
        assert security.verify_digest(first, "password")
        assert security.verify_digest(second, "password")

    def test_verify_rejects_other_plaintext(self):
        """A digest only verifies its own plaintext."""
        assert not security.verify_digest(User.digest("password"), "Password")

    def test_verify_malformed_digest(self):
        """Garbage digests never verify."""
        assert security.verify_digest("", "password") is False
        assert security.verify_digest("plain-text", "plain-text") is False


class TestNewToken:
    """Tests for random tokens."""

    def test_token_is_urlsafe(self):
        """Tokens only use URL-safe characters."""
        token = User.new_token()
        assert len(token) == 22
        assert all(c.isalnum() or c in "-_" for c in token)

    def test_tokens_do_not_repeat(self):
        """Tokens are effectively unique."""
        assert len({User.new_token() for _ in range(200)}) == 200
