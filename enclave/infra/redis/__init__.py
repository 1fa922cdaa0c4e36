from .redis_session_ledger import RedisSessionLedger

__all__ = ["RedisSessionLedger"]
