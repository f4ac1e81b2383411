"""Unit tests for password hashing and verification."""

from stayhub.auth.passwords import hash_password, verify_password


class TestHashPassword:
    """Test password hashing."""

    def test_hash_returns_string(self):
        hashed = hash_password("secret1")
        assert isinstance(hashed, str)

    def test_hash_differs_from_plaintext(self):
        hashed = hash_password("secret1")
        assert hashed != "secret1"

    def test_same_password_different_salts(self):
        """Hashing the same password twice should produce different hashes."""
        assert hash_password("samepassword") != hash_password("samepassword")


class TestVerifyPassword:
    """Test password verification."""

    def test_correct_password_verifies(self):
        hashed = hash_password("testpass123")
        assert verify_password("testpass123", hashed) is True

    def test_wrong_password_fails(self):
        hashed = hash_password("testpass123")
        assert verify_password("wrongpassword", hashed) is False

    def test_unicode_password(self):
        hashed = hash_password("pässwördü")
        assert verify_password("pässwördü", hashed) is True
        assert verify_password("password", hashed) is False

    def test_malformed_hash_fails_instead_of_raising(self):
        assert verify_password("secret1", "not-a-bcrypt-hash") is False
