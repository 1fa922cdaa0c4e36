from .sqlalchemy_session_ledger import SQLAlchemySessionLedger

__all__ = ["SQLAlchemySessionLedger"]
