"""Settlement robot service."""

import logging
from typing import Any
from uuid import UUID

from src.core.supabase import get_supabase_client
from src.schemas.contract import SettlementRobotCreate

logger = logging.getLogger(__name__)


class RobotService:
    """Service for a corporation's settlement robots."""

    def __init__(self) -> None:
        """Initialize robot service with Supabase client."""
        self.client = get_supabase_client()

    async def list_robots(self, corporate_id: UUID) -> list[dict[str, Any]]:
        """List a corporation's settlement robots, newest first."""
        response = (
            self.client.table("settlement_robots")
            .select("*")
            .eq("corporate_id", str(corporate_id))
            .order("created_at", desc=True)
            .execute()
        )

        return response.data or []

    async def create_robot(
        self,
        corporate_id: UUID,
        data: SettlementRobotCreate,
        created_by: UUID,
    ) -> dict[str, Any]:
        """Create a settlement robot for one business year."""
        payload = {
            **data.model_dump(mode="json"),
            "corporate_id": str(corporate_id),
            "created_by": str(created_by),
        }

        response = self.client.table("settlement_robots").insert(payload).execute()

        robot = response.data[0]
        logger.info("Settlement robot %s created for corporation %s", robot["id"], corporate_id)
        return robot
