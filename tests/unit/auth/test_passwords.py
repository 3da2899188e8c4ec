from __future__ import annotations

import pytest

from mediavault.exceptions import InvalidInputError
from mediavault.security.passwords import (
    PasswordPolicy,
    PasswordValidationError,
    hash_password,
    validate_password,
    verify_password,
)


def test_strong_password_passes():
    validate_password("Secret123")


@pytest.mark.parametrize(
    "password, reason",
    [
        ("Ab1", "at least 6 characters"),
        ("secret123", "uppercase"),
        ("SECRET123", "lowercase"),
        ("SecretPass", "number"),
    ],
)
def test_weak_passwords(password, reason):
    with pytest.raises(PasswordValidationError) as exc_info:
        validate_password(password)
    assert any(reason in r for r in exc_info.value.reasons)
    assert exc_info.value.errors[0]["field"] == "password"


def test_collects_every_reason():
    with pytest.raises(PasswordValidationError) as exc_info:
        validate_password("abc")
    assert len(exc_info.value.reasons) == 3


def test_is_an_input_error():
    with pytest.raises(InvalidInputError):
        validate_password("short")


def test_policy_can_relax_rules():
    validate_password("abcdefgh", PasswordPolicy(require_upper=False, require_digit=False))


def test_hash_and_verify():
    hashed = hash_password("Secret123")
    assert hashed != "Secret123"
    assert verify_password("Secret123", hashed)[0] is True
    assert verify_password("Wrong123", hashed)[0] is False


def test_verify_without_stored_hash():
    assert verify_password("Secret123", "") == (False, None)
