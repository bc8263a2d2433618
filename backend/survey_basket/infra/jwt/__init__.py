"""JWT signing adapters."""

from .flask_jwt_token_signer import JWTTokenSigner

__all__ = ["JWTTokenSigner"]
