"""Tenant row filters for club-scoped entities.

Each protected entity is registered with the name of the column that holds
its owning club id. Accessors turn the registry into one
`with_loader_criteria` option per entity, so the predicate is ANDed into
every SELECT that touches the entity, including joins and relationship loads.
"""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import ColumnElement, Select, false, select
from sqlalchemy.orm import with_loader_criteria
from sqlalchemy.sql.base import ExecutableOption

from clubhouse.db.context import RequestContext
from clubhouse.db.models import Club, ClubMembership, Player, Season, Team

_TENANT_FILTERS: dict[type[Any], str] = {}


def register_tenant_filter(entity: type[Any], key: str = "club_id") -> None:
    """Protect an entity by the club id stored in `key`.

    Raises:
        AttributeError: If the entity has no such attribute.
    """
    if not hasattr(entity, key):
        raise AttributeError(f"{entity.__name__} has no tenant key {key!r}")
    _TENANT_FILTERS[entity] = key


def registered_tenant_filters() -> dict[type[Any], str]:
    """Copy of the registry, entity -> club id attribute name."""
    return dict(_TENANT_FILTERS)


def is_tenant_scoped(entity: type[Any]) -> bool:
    return entity in _TENANT_FILTERS


def accessible_club_ids(ctx: RequestContext) -> Select[tuple[int]]:
    """Live sub-query of the club ids the actor is a member of."""
    return select(ClubMembership.club_id).where(ClubMembership.user_id == ctx.user_id)


def tenant_predicate(entity: type[Any], ctx: RequestContext) -> ColumnElement[bool]:
    """Predicate restricting `entity` rows to the actor's clubs.

    Anonymous contexts get an always-false predicate: zero rows, no error.
    """
    column = getattr(entity, _TENANT_FILTERS[entity])
    if not ctx.is_authenticated:
        return column.is_not(None) & false()
    return column.in_(accessible_club_ids(ctx))


def tenant_criteria(
    ctx: RequestContext, entities: Iterable[type[Any]] | None = None
) -> list[ExecutableOption]:
    """Loader criteria options for every registered entity."""
    targets = list(entities) if entities is not None else list(_TENANT_FILTERS)
    return [
        with_loader_criteria(entity, tenant_predicate(entity, ctx), include_aliases=True)
        for entity in targets
    ]


register_tenant_filter(Club, "club_id")
register_tenant_filter(Season, "club_id")
register_tenant_filter(Team, "club_id")
register_tenant_filter(Player, "club_id")
