"""Tests for the bcrypt credential adapter."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from strata.domain.identity.user import User
from strata.foundation.domain.identifiers import TenantId
from strata.foundation.domain.ports import PasswordHasherPort
from strata.infra.auth import BcryptPasswordHasher, get_password_hashing_settings


@pytest.fixture()
def bcrypt_hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=4)


@pytest.mark.unit
class TestBcryptPasswordHasher:
    def test_implements_port(self, bcrypt_hasher: BcryptPasswordHasher) -> None:
        assert isinstance(bcrypt_hasher, PasswordHasherPort)

    def test_hash_and_verify(self, bcrypt_hasher: BcryptPasswordHasher) -> None:
        encoded = bcrypt_hasher.hash("Str0ng!Pass")
        assert encoded.startswith("$2b$04$")
        assert bcrypt_hasher.verify("Str0ng!Pass", encoded)
        assert not bcrypt_hasher.verify("Wr0ng!Pass", encoded)

    def test_hashes_are_salted(self, bcrypt_hasher: BcryptPasswordHasher) -> None:
        assert bcrypt_hasher.hash("Str0ng!Pass") != bcrypt_hasher.hash("Str0ng!Pass")

    @pytest.mark.parametrize("stored", ["", "not-a-bcrypt-hash"])
    def test_empty_or_malformed_hash_never_verifies(
        self, bcrypt_hasher: BcryptPasswordHasher, stored: str
    ) -> None:
        assert not bcrypt_hasher.verify("anything", stored)

    def test_rounds_from_settings(self) -> None:
        get_password_hashing_settings.cache_clear()
        try:
            with patch.dict("os.environ", {"PASSWORD_BCRYPT_ROUNDS": "5"}):
                assert BcryptPasswordHasher().rounds == 5
        finally:
            get_password_hashing_settings.cache_clear()

    def test_user_round_trip(self, bcrypt_hasher: BcryptPasswordHasher) -> None:
        user = User.create_platform_user(
            tenant_id=TenantId.generate(),
            username="bcrypt_user",
            email="bcrypt@example.com",
            password="Str0ng!Pass",
            hasher=bcrypt_hasher,
        )
        assert user.password_hash.startswith("$2b$")
        assert user.verify_password("Str0ng!Pass", bcrypt_hasher)
        user.change_password("Str0ng!Pass", "N3w!Passw0rd", bcrypt_hasher)
        assert user.verify_password("N3w!Passw0rd", bcrypt_hasher)
