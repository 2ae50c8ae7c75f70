"""Audit stamping for every flushed club-scoped entity."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session, UOWTransaction
from sqlalchemy.orm.attributes import set_committed_value

from clubhouse.db.context import RequestContext
from clubhouse.db.models import AuditMixin

logger = logging.getLogger(__name__)

WRITE_ONCE_FIELDS = ("created_at", "created_by")


def utc_now() -> datetime:
    """Default timestamp source."""
    return datetime.now(UTC)


class AuditInterceptor:
    """Stamps created/modified actor and timestamp right before a flush.

    The actor comes from the `RequestContext` the unit of work was opened
    with, never from values the caller put on the entity (except `created_by`
    on insert, which the business layer owns).
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        """Initialize interceptor.

        Args:
            clock: Timestamp source (injected for tests)
        """
        self._clock = clock

    def attach(self, session: Session, ctx: RequestContext) -> None:
        """Register a before_flush hook bound to `ctx` on a sync session."""

        def before_flush(
            flush_session: Session, flush_context: UOWTransaction, instances: Any
        ) -> None:
            self.stamp(flush_session, ctx)

        event.listen(session, "before_flush", before_flush)

    def stamp(self, session: Session, ctx: RequestContext) -> None:
        """Stamp pending inserts and updates in `session`.

        Raises:
            ActorNotResolvableError: If there is something to stamp but no actor.
        """
        inserted = [obj for obj in session.new if isinstance(obj, AuditMixin)]
        updated = [
            obj
            for obj in session.dirty
            if isinstance(obj, AuditMixin) and session.is_modified(obj, include_collections=False)
        ]

        if not inserted and not updated:
            return

        actor_id = ctx.require_user_id()
        now = self._clock()

        for obj in inserted:
            if obj.created_by is None:
                obj.created_by = actor_id
            obj.created_at = now
            obj.modified_at = now
            obj.modified_by = actor_id

        for obj in updated:
            self._discard_write_once_changes(session, obj)
            obj.modified_at = now
            obj.modified_by = actor_id

        logger.debug(
            f"[audit] stamped inserts={len(inserted)} updates={len(updated)} actor={actor_id}"
        )

    @staticmethod
    def _discard_write_once_changes(session: Session, obj: AuditMixin) -> None:
        state = inspect(obj)
        for field in WRITE_ONCE_FIELDS:
            history = state.attrs[field].history
            if not history.added:
                continue
            if history.deleted:
                # Restore the persisted value without flagging the column dirty
                set_committed_value(obj, field, history.deleted[0])
            else:
                # Persisted value was never loaded; drop the pending change
                session.expire(obj, [field])
            logger.warning(
                f"[audit] discarded change to write-once field {field} "
                f"on {type(obj).__name__}"
            )
