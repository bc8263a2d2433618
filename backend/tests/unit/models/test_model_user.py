"""Tests for the User model."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError
from survey_basket.models import User


class TestUser:
    def test_password_hashing(self, session):
        u = User(email="Test@Example.com", first_name="Tess")
        u.password = "secret123"
        session.add(u)
        session.commit()
        assert u.password_hash != "secret123"
        assert u.verify_password("secret123") is True
        assert u.verify_password("wrong") is False

    def test_password_is_write_only(self):
        u = User(email="a@example.com")
        u.password = "x"
        with pytest.raises(AttributeError):
            _ = u.password

    def test_email_normalized_and_unique(self, session):
        u1 = User(email=" Alice@Example.com ")
        u1.password = "pw"
        session.add(u1)
        session.commit()
        assert u1.email == "alice@example.com"

        u2 = User(email="alice@example.com")
        u2.password = "pw"
        session.add(u2)
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_display_names_default_to_empty(self, session):
        u = User(email="plain@example.com")
        u.password = "pw"
        session.add(u)
        session.commit()
        assert u.first_name == ""
        assert u.last_name == ""
