from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel


class GroupMembersRequest(BaseModel):
    member_ids: list[UUID]


class GroupMembersResponse(BaseModel):
    group_id: UUID
    member_ids: list[UUID]
