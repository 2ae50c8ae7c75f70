"""Structured logging for access decisions and membership changes."""

import logging
from typing import Any

from clubhouse.config import Settings

logger = logging.getLogger("clubhouse.access")


def configure_logging(settings: Settings) -> None:
    """Apply the configured root log level."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


class AccessAuditLogger:
    """Structured logger for tenant access attempts and membership changes."""

    def log_forbidden(self, user_id: int, club_id: int, path: str) -> None:
        """Log a cross-tenant access attempt that was rejected."""
        log_data: dict[str, Any] = {
            "event": "forbidden_club_access",
            "user_id": user_id,
            "club_id": club_id,
            "path": path,
        }
        logger.warning(
            f"Forbidden access attempt to club {club_id} by user {user_id}",
            extra={"structured": log_data},
        )

    def log_membership_change(
        self, action: str, club_id: int, user_id: int, actor_id: int
    ) -> None:
        """Log a membership change together with the acting user."""
        log_data: dict[str, Any] = {
            "event": "membership_change",
            "action": action,
            "club_id": club_id,
            "user_id": user_id,
            "actor_id": actor_id,
        }
        logger.info(
            f"Membership {action}: user {user_id} club {club_id} by user {actor_id}",
            extra={"structured": log_data},
        )
