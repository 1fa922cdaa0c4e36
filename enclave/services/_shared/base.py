from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from http import HTTPStatus

from enclave.core import errors as api_errors
from enclave.repositories.base import Pagination
from enclave.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainValidationError,
    NotFoundError,
    ServiceError,
)
from enclave.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

# Service error family -> HTTP status, most specific first
_STATUS_BY_FAMILY: tuple[tuple[type[ServiceError], HTTPStatus], ...] = (
    (NotFoundError, HTTPStatus.NOT_FOUND),
    (ConflictError, HTTPStatus.CONFLICT),
    (AuthenticationError, HTTPStatus.UNAUTHORIZED),
    (AuthorizationError, HTTPStatus.FORBIDDEN),
    (DomainValidationError, HTTPStatus.BAD_REQUEST),
)


@dataclass(slots=True)
class ServiceContext:
    """
    Request-scoped data shared with services.

    :param actor_id: Authenticated user id, when known.
    :param request_id: Correlation id for logging.
    """

    actor_id: str | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    * Opens read-only and read-write units of work.
    * Translates service errors into API errors.
    * Offers shared helpers (pagination, clock).

    Services never touch the global session directly; all persistence goes
    through a unit of work.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Isolation level, e.g. ``"REPEATABLE READ"``.
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # ----------------------- Shared helpers ----------------------------------

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)

    def ensure_pagination(
        self, *, page: int, limit: int, sort: Iterable[str] | None = None, max_limit: int = 100
    ) -> Pagination:
        """
        Build a :class:`Pagination` with ``page >= 1`` and ``1 <= limit <= max_limit``.
        """
        page = max(1, int(page))
        limit = min(max(1, int(limit)), max_limit)
        return Pagination(page=page, limit=limit, sort=list(sort or []))

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map a service error to an :class:`~enclave.core.errors.APIError`.

        The error family decides the status; the concrete class supplies the
        ``code``. Anything that is not a service error is returned untouched.

        :param exc: Exception raised within a service.
        :returns: Exception ready to be rendered or re-raised.
        """
        if not isinstance(exc, ServiceError):
            return exc
        status = HTTPStatus.BAD_REQUEST
        for family, family_status in _STATUS_BY_FAMILY:
            if isinstance(exc, family):
                status = family_status
                break
        return api_errors.APIError(message=exc.message, status_code=status, code=exc.code)
