"""FastAPI dependencies for injection.

Long-lived services are built once in the application lifespan and stored on
`app.state`; these accessors hand them to route handlers.
"""

from typing import Annotated

from fastapi import Depends, Request

from clubhouse.middleware.club_membership import require_club_membership
from clubhouse.services.club_data import ClubDataService
from clubhouse.services.join_requests import JoinRequestService
from clubhouse.services.memberships import MembershipService


def get_membership_service(request: Request) -> MembershipService:
    return request.app.state.membership_service


def get_join_request_service(request: Request) -> JoinRequestService:
    return request.app.state.join_request_service


def get_club_data_service(request: Request) -> ClubDataService:
    return request.app.state.club_data_service


# Club id from the route, validated by the membership gate
AuthorizedClubId = Annotated[int, Depends(require_club_membership)]
