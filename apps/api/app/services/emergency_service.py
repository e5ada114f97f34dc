import logging
import uuid

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.emergency import EmergencyRequest, EmergencyStatus
from app.schemas.emergency import EmergencyCreate, EmergencyResponse
from app.services.change_feed import ChangeFeed, change_feed

logger = logging.getLogger(__name__)


class EmergencyService:
    def __init__(self, db: AsyncSession, feed: ChangeFeed = change_feed):
        self.db = db
        self.feed = feed

    async def broadcast(self, payload: EmergencyCreate, user_id: uuid.UUID) -> EmergencyRequest:
        request = EmergencyRequest(**payload.model_dump(), user_id=user_id, status=EmergencyStatus.Open)
        self.db.add(request)
        await self.db.commit()
        await self.db.refresh(request)
        logger.info(f"[Emergency] {request.id} broadcast ({request.severity.value})")
        self._publish("INSERT", request)
        return request

    async def list_for_user(self, user_id: uuid.UUID, limit: int = 50) -> list[EmergencyRequest]:
        result = await self.db.execute(
            select(EmergencyRequest)
            .where(EmergencyRequest.user_id == user_id)
            .order_by(EmergencyRequest.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_open(self, limit: int = 100) -> list[EmergencyRequest]:
        result = await self.db.execute(
            select(EmergencyRequest)
            .where(EmergencyRequest.status == EmergencyStatus.Open)
            .order_by(EmergencyRequest.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def resolve(self, request_id: uuid.UUID) -> EmergencyRequest:
        request = await self.db.get(EmergencyRequest, request_id)
        if not request:
            raise HTTPException(status_code=404, detail="Emergency request not found")
        if request.status == EmergencyStatus.Resolved:
            return request
        request.status = EmergencyStatus.Resolved
        await self.db.commit()
        await self.db.refresh(request)
        self._publish("UPDATE", request)
        return request

    def _publish(self, event: str, request: EmergencyRequest) -> None:
        row = EmergencyResponse.model_validate(request).model_dump(mode="json")
        self.feed.publish("emergency_requests", event, row)
