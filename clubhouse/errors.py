"""Error taxonomy for tenancy, membership and audit failures."""


class ClubhouseError(Exception):
    """Base class for business errors raised by services."""

    status_code = 500

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.__class__.__doc__)
        self.detail = detail


class BadRequestError(ClubhouseError):
    """Request is malformed."""

    status_code = 400


class ForbiddenError(ClubhouseError):
    """Caller is authenticated but not entitled to the resource."""

    status_code = 403


class NotFoundError(ClubhouseError):
    """Resource does not exist or is not visible to the caller."""

    status_code = 404


class ConflictError(ClubhouseError):
    """Resource state conflicts with the request."""

    status_code = 409


class ActorNotResolvableError(RuntimeError):
    """A write was attempted without a resolved actor.

    This is an invariant violation: write paths only run inside an
    authenticated request, so it is never converted into a business error.
    """


class ReadOnlyAccessorError(RuntimeError):
    """A write was attempted through a read-only data accessor."""


class CacheInvalidationError(RuntimeError):
    """The shared cache tier could not drop a key."""
