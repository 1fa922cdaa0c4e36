"""Generic repository base and query helpers for SQLAlchemy 2.x.

Repositories are persistence-only:

- They never commit or roll back; services own the unit of work.
- Sorting, filtering and updates go through per-repository whitelists.
- Rows of soft-deletable models flagged ``is_deleted`` are invisible to
  every generic read.
- Pagination always appends the primary key as a tiebreaker.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, and_, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from enclave.core.extensions import db
from enclave.models.base import SoftDeleteMixin, utcnow

E = TypeVar("E")


@dataclass(slots=True)
class Pagination:
    """Pagination input.

    :param page: 1-based page number.
    :param limit: Page size.
    :param sort: Public sort tokens such as ``["-created_at", "name"]``.
    """

    page: int
    limit: int
    sort: list[str]


@dataclass(slots=True)
class Page(Generic[E]):
    """One page of results plus the total row count."""

    items: Sequence[E]
    total: int
    page: int
    limit: int


def parse_sort_tokens(raw: Iterable[str]) -> list[tuple[str, bool]]:
    """Turn ``["-created_at", "name"]`` into ``[("created_at", True), ("name", False)]``."""
    parsed: list[tuple[str, bool]] = []
    for token in raw:
        is_desc = token.startswith("-")
        field = (token[1:] if is_desc else token).strip()
        if field:
            parsed.append((field, is_desc))
    return parsed


def apply_sorting(
    stmt: Select[Any],
    sortable_fields: Mapping[str, InstrumentedAttribute[Any]],
    tokens: Iterable[str],
    *,
    pk_attr: InstrumentedAttribute[Any] | None,
) -> Select[Any]:
    """Apply whitelisted ``ORDER BY`` clauses, ignoring unknown tokens.

    :param stmt: Base select.
    :param sortable_fields: Public key to ORM attribute mapping.
    :param tokens: Public sort tokens.
    :param pk_attr: Primary key appended as the final ascending tiebreaker.
    :returns: The ordered select.
    """
    orders: list[Any] = []
    for field, is_desc in parse_sort_tokens(tokens):
        col = sortable_fields.get(field)
        if isinstance(col, InstrumentedAttribute):
            orders.append(col.desc() if is_desc else col.asc())
    if orders:
        stmt = stmt.order_by(*orders)
    if pk_attr is not None:
        stmt = stmt.order_by(pk_attr.asc())
    return stmt


def count_rows(session: Session, stmt: Select[Any]) -> int:
    """Count the rows ``stmt`` would return, ignoring its ordering."""
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    return int(session.execute(count_stmt).scalar_one())


def paginate_select(
    session: Session,
    stmt: Select[Any],
    *,
    page: int,
    limit: int,
    with_total: bool = True,
    scalars: bool = True,
) -> tuple[list[Any], int]:
    """Execute ``stmt`` for one page and optionally count the full result.

    :param session: Active session.
    :param stmt: Filtered and ordered select.
    :param page: 1-based page number (clamped to ``>= 1``).
    :param limit: Page size (clamped to ``>= 1``).
    :param with_total: Whether to run the ``COUNT`` query.
    :param scalars: Return the first column of each row instead of full rows.
    :returns: ``(items, total)``; ``total`` is ``0`` when not computed.
    """
    page = max(int(page), 1)
    limit = max(int(limit), 1)
    total = count_rows(session, stmt) if with_total else 0
    sliced = stmt.limit(limit).offset((page - 1) * limit)
    result = session.execute(sliced)
    items = list(result.scalars().all()) if scalars else [tuple(row) for row in result.all()]
    return items, total


class BaseRepository(Generic[E]):
    """Persistence-only repository for a single aggregate.

    Subclasses set ``model`` and may override the whitelist hooks
    (``_sortable_fields``, ``_filterable_fields``, ``_updatable_fields``).
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Injected session, or the Flask-scoped one when none was given."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Hooks -----------------------------------

    def _is_soft_deletable(self) -> bool:
        return issubclass(self.model, SoftDeleteMixin)

    def _base_select(self) -> Select[Any]:
        """Select over the model, hiding soft-deleted rows."""
        stmt: Select[Any] = select(self.model)
        if self._is_soft_deletable():
            stmt = stmt.where(self.model.is_deleted.is_(False))  # type: ignore[attr-defined]
        return stmt

    def _soft_delete(self, instance: E) -> bool:
        """Flag ``instance`` as deleted when the model supports it.

        :returns: ``True`` when handled; ``False`` to hard-delete instead.
        """
        if isinstance(instance, SoftDeleteMixin):
            instance.mark_deleted(utcnow())
            return True
        return False

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _updatable_fields(self) -> set[str]:
        return set()

    # ------------------------------ Internals --------------------------------

    def _apply_equality_filters(
        self,
        stmt: Select[Any],
        filters: Mapping[str, Any] | None,
    ) -> Select[Any]:
        """Apply whitelisted equality filters; unknown keys are ignored."""
        if not filters:
            return stmt
        allowed = self._filterable_fields()
        clauses: list[Any] = []
        for key, value in filters.items():
            col = allowed.get(key)
            if isinstance(col, InstrumentedAttribute):
                clauses.append(col == value)
        return stmt.where(and_(*clauses)) if clauses else stmt

    def _sanitize_update_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Return ``fields`` restricted to the update whitelist.

        :raises ValueError: On keys outside the whitelist.
        """
        allowed = self._updatable_fields()
        unknown = [k for k in fields if k not in allowed]
        if unknown:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        return dict(fields)

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so defaults and the PK materialize."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Fetch a live entity by primary key."""
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get requires a detectable PK attribute.")
        stmt = self._base_select().where(pk_attr == entity_id)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def get_for_update(self, entity_id: Any) -> E | None:
        """Fetch a live entity by primary key with ``FOR UPDATE`` where supported."""
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get_for_update requires a detectable PK.")
        stmt = self._base_select().where(pk_attr == entity_id).with_for_update()
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def find_one(self, **filters: Any) -> E | None:
        stmt = self._apply_equality_filters(self._base_select(), filters)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def exists(self, **filters: Any) -> bool:
        stmt = self._apply_equality_filters(self._base_select(), filters)
        return self.session.execute(stmt.limit(1)).first() is not None

    def delete(self, instance: E) -> None:
        """Soft-delete when supported, otherwise delete; then flush."""
        if not self._soft_delete(instance):
            self.session.delete(instance)
        self.flush()

    def flush(self) -> None:
        self.session.flush()

    def refresh(self, instance: E, attribute_names: Iterable[str] | None = None) -> E:
        """Reload ``instance`` (or some of its attributes) from the database."""
        self.session.refresh(instance, list(attribute_names) if attribute_names else None)
        return instance

    def update(self, instance: E, **fields: Any) -> E:
        """Assign whitelisted ``fields`` through ``setattr`` and flush.

        ``setattr`` keeps ``@validates`` hooks on the model in play.
        """
        for key, value in self._sanitize_update_fields(fields).items():
            setattr(instance, key, value)
        self.flush()
        return instance

    # ------------------------------- Listing ---------------------------------

    def list(
        self,
        *,
        filters: Mapping[str, Any] | None = None,
        sort: Iterable[str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[E]:
        """List live entities with whitelisted filters and sorting."""
        stmt = self._apply_equality_filters(self._base_select(), filters)
        stmt = apply_sorting(stmt, self._sortable_fields(), sort or [], pk_attr=self._pk_attr())
        if limit is not None:
            stmt = stmt.limit(int(limit))
        if offset is not None:
            stmt = stmt.offset(int(offset))
        return cast(list[E], list(self.session.execute(stmt).scalars().all()))

    def paginate(
        self,
        pagination: Pagination,
        *,
        filters: Mapping[str, Any] | None = None,
        with_total: bool = True,
    ) -> Page[E]:
        """Paginate live entities with whitelisted filters and stable sorting."""
        stmt = self._apply_equality_filters(self._base_select(), filters)
        stmt = apply_sorting(stmt, self._sortable_fields(), pagination.sort, pk_attr=self._pk_attr())
        items, total = paginate_select(
            self.session,
            stmt,
            page=pagination.page,
            limit=pagination.limit,
            with_total=with_total,
        )
        return Page(items=cast(list[E], items), total=total, page=pagination.page, limit=pagination.limit)
