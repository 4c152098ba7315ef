"""Unit tests for request model validation."""

import pytest
from pydantic import ValidationError

from catering_admin.models.auth import RegisterRequest, UpdateUserRequest


def _register(**overrides) -> RegisterRequest:
    data = {
        "name": "Meera Nair",
        "email": "meera@example.com",
        "username": "meera",
        "mobile": "+919876500042",
        "password": "pantry-password",
        "confirmPassword": "pantry-password",
    }
    data.update(overrides)
    return RegisterRequest(**data)


class TestEmailValidation:
    """Tests for email fields."""

    def test_email_is_lowercased(self):
        assert _register(email="Meera.Nair@Example.COM").email == "meera.nair@example.com"

    @pytest.mark.parametrize(
        "email",
        ["not-an-email", "meera@", "@example.com", "meera@@example.com", "meera @example.com"],
    )
    def test_invalid_email_rejected(self, email):
        with pytest.raises(ValidationError):
            _register(email=email)

    def test_update_email_is_validated(self):
        with pytest.raises(ValidationError):
            UpdateUserRequest(email="nope")

    def test_update_email_is_lowercased(self):
        assert UpdateUserRequest(email="Chef@Example.com").email == "chef@example.com"

    def test_update_email_optional(self):
        assert UpdateUserRequest().email is None


class TestMobileValidation:
    """Tests for mobile number fields."""

    def test_twenty_characters_accepted(self):
        mobile = "+1" + "2" * 17 + "3"
        assert len(mobile) == 20
        assert _register(mobile=mobile).mobile == mobile

    def test_twenty_one_characters_rejected(self):
        """Numbers wider than the mobile column fail validation instead of the insert."""
        mobile = "+1" + "2" * 18 + "3"
        assert len(mobile) == 21
        with pytest.raises(ValidationError):
            _register(mobile=mobile)

    def test_update_mobile_length_capped(self):
        with pytest.raises(ValidationError):
            UpdateUserRequest(mobile="+1" + "2" * 18 + "3")

    @pytest.mark.parametrize("mobile", ["12345", "phone", "+91 98765 4321a"])
    def test_malformed_mobile_rejected(self, mobile):
        with pytest.raises(ValidationError):
            _register(mobile=mobile)
