from .redis_refresh_token_ledger import RedisRefreshTokenLedger

__all__ = ["RedisRefreshTokenLedger"]
