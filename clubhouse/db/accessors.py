"""Tenant-scoped data accessors.

Two variants, picked explicitly at every call site:

- `EnforcingDataAccessor` always applies the tenant row filter. It is the
  accessor for everything reachable from outside, and the last line of
  defense if the route gate is missing.
- `TrustedDataAccessor` applies the same filter but lets a call pass
  `ignore_filter=True`. Only code that performs its own authorization (club
  browsing, join requests, membership loading and mutation) may use it.
"""

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from sqlalchemy import Executable, Result, Select, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clubhouse.db.audit import AuditInterceptor
from clubhouse.db.context import RequestContext
from clubhouse.db.tenancy import tenant_criteria
from clubhouse.errors import ReadOnlyAccessorError


T = TypeVar("T")


class _DataAccessor:
    """Shared query/write plumbing; subclasses decide whether bypass exists."""

    def __init__(
        self,
        session: AsyncSession,
        ctx: RequestContext,
        *,
        interceptor: AuditInterceptor | None = None,
        read_only: bool = False,
    ) -> None:
        """Initialize accessor.

        Args:
            session: Async session owned by the caller
            ctx: Actor identity used for row filtering and audit stamping
            interceptor: Audit interceptor attached to the session for writes
            read_only: Reject add/delete/save when True
        """
        self._session = session
        self._ctx = ctx
        self._read_only = read_only
        if interceptor is not None and not read_only:
            interceptor.attach(session.sync_session, ctx)

    @property
    def context(self) -> RequestContext:
        return self._ctx

    @property
    def read_only(self) -> bool:
        return self._read_only

    def _scoped(self, statement: Executable, ignore_filter: bool) -> Executable:
        if ignore_filter:
            return statement
        return statement.options(*tenant_criteria(self._ctx))

    async def _execute(self, statement: Executable, ignore_filter: bool) -> Result[Any]:
        return await self._session.execute(self._scoped(statement, ignore_filter))

    async def _scalars(self, statement: Select[tuple[T]], ignore_filter: bool) -> Sequence[T]:
        result = await self._execute(statement, ignore_filter)
        return result.scalars().all()

    async def _first(self, statement: Select[tuple[T]], ignore_filter: bool) -> T | None:
        result = await self._execute(statement.limit(1), ignore_filter)
        return result.scalars().first()

    async def _get(self, entity: type[T], ident: Any, ignore_filter: bool) -> T | None:
        # Identity-map lookups skip SQL and therefore the filter; always query
        primary_key = entity.__mapper__.primary_key  # type: ignore[attr-defined]
        statement = select(entity).where(primary_key[0] == ident)
        return await self._first(statement, ignore_filter)

    def _ensure_writable(self) -> None:
        if self._read_only:
            raise ReadOnlyAccessorError("Read-only accessor")

    def add(self, instance: Any) -> None:
        self._ensure_writable()
        self._session.add(instance)

    async def delete(self, instance: Any) -> None:
        self._ensure_writable()
        await self._session.delete(instance)

    async def flush(self) -> None:
        self._ensure_writable()
        await self._session.flush()

    async def save(self) -> None:
        """Commit pending changes; audit stamping runs in the flush.

        Any failure, including a missing actor, rolls the whole unit of
        work back.
        """
        self._ensure_writable()
        try:
            await self._session.commit()
        except BaseException:
            await self._session.rollback()
            raise


class EnforcingDataAccessor(_DataAccessor):
    """Accessor whose row filter cannot be bypassed."""

    async def execute(self, statement: Executable) -> Result[Any]:
        return await self._execute(statement, ignore_filter=False)

    async def scalars(self, statement: Select[tuple[T]]) -> Sequence[T]:
        return await self._scalars(statement, ignore_filter=False)

    async def first(self, statement: Select[tuple[T]]) -> T | None:
        return await self._first(statement, ignore_filter=False)

    async def get(self, entity: type[T], ident: Any) -> T | None:
        return await self._get(entity, ident, ignore_filter=False)


class TrustedDataAccessor(_DataAccessor):
    """Accessor for internal paths that authorize on their own."""

    async def execute(self, statement: Executable, *, ignore_filter: bool = False) -> Result[Any]:
        return await self._execute(statement, ignore_filter)

    async def scalars(
        self, statement: Select[tuple[T]], *, ignore_filter: bool = False
    ) -> Sequence[T]:
        return await self._scalars(statement, ignore_filter)

    async def first(self, statement: Select[tuple[T]], *, ignore_filter: bool = False) -> T | None:
        return await self._first(statement, ignore_filter)

    async def get(self, entity: type[T], ident: Any, *, ignore_filter: bool = False) -> T | None:
        return await self._get(entity, ident, ignore_filter)


class DataAccessorFactory:
    """Opens accessors over fresh sessions, one unit of work each."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        interceptor: AuditInterceptor | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._interceptor = interceptor or AuditInterceptor()

    @asynccontextmanager
    async def enforcing(
        self, ctx: RequestContext, *, read_only: bool = False
    ) -> AsyncIterator[EnforcingDataAccessor]:
        async with self._session_factory() as session:
            yield EnforcingDataAccessor(
                session, ctx, interceptor=self._interceptor, read_only=read_only
            )

    @asynccontextmanager
    async def trusted(
        self, ctx: RequestContext, *, read_only: bool = False
    ) -> AsyncIterator[TrustedDataAccessor]:
        async with self._session_factory() as session:
            yield TrustedDataAccessor(
                session, ctx, interceptor=self._interceptor, read_only=read_only
            )
