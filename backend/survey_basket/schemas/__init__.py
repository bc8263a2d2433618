"""Marshmallow schemas validating and shaping HTTP payloads."""

from .auth import AuthResponseSchema, LoginSchema, RefreshSchema, RevokeSchema

__all__ = ["AuthResponseSchema", "LoginSchema", "RefreshSchema", "RevokeSchema"]
