from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from chat_hub.api.deps import CurrentPrincipal, HubDep
from chat_hub.api.v1.schemas.presence import OnlineUsersResponse, PresenceResponse

router = APIRouter(prefix="/api/v1/presence", tags=["presence"])


@router.get("/online", response_model=OnlineUsersResponse)
async def list_online(principal: CurrentPrincipal, hub: HubDep) -> OnlineUsersResponse:
    user_ids = await hub.list_online()
    return OnlineUsersResponse(user_ids=user_ids, count=len(user_ids))


@router.get("/{user_id}", response_model=PresenceResponse)
async def get_presence(user_id: UUID, principal: CurrentPrincipal, hub: HubDep) -> PresenceResponse:
    return PresenceResponse(user_id=user_id, online=await hub.is_online(user_id))
