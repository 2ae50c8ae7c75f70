"""Request context for tenancy enforcement."""

from dataclasses import dataclass

from clubhouse.errors import ActorNotResolvableError


@dataclass(frozen=True)
class RequestContext:
    """Identity of the actor behind a request.

    Passed explicitly to every accessor, filter and interceptor. `user_id` is
    None for anonymous callers: filtered reads then return nothing and writes
    fail.
    """

    user_id: int | None

    @classmethod
    def anonymous(cls) -> "RequestContext":
        return cls(user_id=None)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def require_user_id(self) -> int:
        """Return the actor id or raise if there is none."""
        if self.user_id is None:
            raise ActorNotResolvableError("No actor resolved for this unit of work")
        return self.user_id
