"""Route-level club membership gate.

Runs before any handler whose path carries `{club_id}` and rejects callers
that are not members of that club. Data access is filtered again at the
accessor layer, so the gate is the first of two independent checks.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status

from clubhouse.api.auth import resolve_context
from clubhouse.cache.membership import MembershipCacheService
from clubhouse.db.context import RequestContext
from clubhouse.utils.logging import AccessAuditLogger
from clubhouse.utils.metrics import PrometheusMembershipMetrics

CLUB_ID_PARAM = "club_id"


class GateDecision(str, Enum):
    """Outcome of a gate check."""

    allowed = "allowed"
    bad_request = "bad_request"
    unauthorized = "unauthorized"
    forbidden = "forbidden"


@dataclass(frozen=True)
class GateResult:
    decision: GateDecision
    club_id: int | None = None

    @property
    def allowed(self) -> bool:
        return self.decision is GateDecision.allowed


def parse_club_id(raw: Any) -> int | None:
    """Parse a route club id; None when missing or not a positive integer."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw > 0 else None
    text = str(raw).strip()
    if not text.isdecimal():
        return None
    value = int(text)
    return value if value > 0 else None


class ClubMembershipGate:
    """Stateless membership check for club-scoped routes.

    Order of checks: club id shape (400), caller identity (401), membership
    (403).
    """

    def __init__(
        self,
        cache: MembershipCacheService,
        access_logger: AccessAuditLogger | None = None,
        metrics: PrometheusMembershipMetrics | None = None,
    ) -> None:
        """Initialize gate.

        Args:
            cache: Membership cache consulted for every check
            access_logger: Structured logger for rejected attempts
            metrics: Metrics sink
        """
        self._cache = cache
        self._access_logger = access_logger or AccessAuditLogger()
        self._metrics = metrics or PrometheusMembershipMetrics()

    async def check(self, raw_club_id: Any, ctx: RequestContext, path: str = "") -> GateResult:
        """Decide whether `ctx` may access the club named by `raw_club_id`.

        Args:
            raw_club_id: Route value for the club id (string or int)
            ctx: Caller context, possibly anonymous
            path: Request path, recorded on rejected attempts

        Returns:
            GateResult with the decision and the parsed club id
        """
        club_id = parse_club_id(raw_club_id)
        if club_id is None:
            result = GateResult(GateDecision.bad_request)
        elif ctx.user_id is None:
            result = GateResult(GateDecision.unauthorized, club_id)
        elif await self._cache.is_member(ctx.user_id, club_id):
            result = GateResult(GateDecision.allowed, club_id)
        else:
            self._access_logger.log_forbidden(ctx.user_id, club_id, path)
            result = GateResult(GateDecision.forbidden, club_id)

        self._metrics.inc_gate_decision(result.decision.value)
        return result

    async def authorize(self, raw_club_id: Any, ctx: RequestContext, path: str = "") -> int:
        """Run `check` and translate a rejection into an HTTP error.

        Returns:
            The validated club id

        Raises:
            HTTPException: 400, 401 or 403
        """
        result = await self.check(raw_club_id, ctx, path)

        if result.decision is GateDecision.bad_request:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid club id",
            )
        if result.decision is GateDecision.unauthorized:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if result.decision is GateDecision.forbidden:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not a member of this club",
            )

        if result.club_id is None:
            raise RuntimeError("Allowed gate decision without a club id")
        return result.club_id


def get_club_gate(request: Request) -> ClubMembershipGate:
    return request.app.state.club_gate


async def require_club_membership(
    request: Request,
    ctx: Annotated[RequestContext, Depends(resolve_context)],
    gate: Annotated[ClubMembershipGate, Depends(get_club_gate)],
) -> int:
    """FastAPI dependency guarding routes under `/clubs/{club_id}`.

    Returns:
        The club id the caller is a member of
    """
    return await gate.authorize(request.path_params.get(CLUB_ID_PARAM), ctx, request.url.path)
