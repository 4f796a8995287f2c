from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel


class OnlineUsersResponse(BaseModel):
    user_ids: list[UUID]
    count: int


class PresenceResponse(BaseModel):
    user_id: UUID
    online: bool
