"""Membership cache sync, called by the group management service."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, status

from chat_hub.api.deps import CurrentAdmin, HubDep
from chat_hub.api.v1.schemas.group import GroupMembersRequest, GroupMembersResponse
from chat_hub.services import realtime_service

router = APIRouter(prefix="/api/v1/groups", tags=["groups"])


async def _members_response(hub: HubDep, group_id: UUID) -> GroupMembersResponse:
    members = await hub.group_members(group_id)
    return GroupMembersResponse(group_id=group_id, member_ids=sorted(members, key=str))


@router.get("/{group_id}/members", response_model=GroupMembersResponse)
async def get_members(group_id: UUID, admin: CurrentAdmin, hub: HubDep) -> GroupMembersResponse:
    return await _members_response(hub, group_id)


@router.put("/{group_id}/members", response_model=GroupMembersResponse)
async def sync_members(
    group_id: UUID,
    body: GroupMembersRequest,
    admin: CurrentAdmin,
    hub: HubDep,
) -> GroupMembersResponse:
    await realtime_service.sync_group_members(hub, group_id, body.member_ids)
    return await _members_response(hub, group_id)


@router.put("/{group_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_member(group_id: UUID, user_id: UUID, admin: CurrentAdmin, hub: HubDep) -> None:
    await hub.add_member(group_id, user_id)


@router.delete("/{group_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(group_id: UUID, user_id: UUID, admin: CurrentAdmin, hub: HubDep) -> None:
    await hub.remove_member(group_id, user_id)
