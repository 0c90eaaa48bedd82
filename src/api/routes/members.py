"""Member registration, lookup, status and balance endpoints."""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.database import get_session
from src.domains.members.service import (
    create_member,
    get_balance,
    get_member,
    list_members,
    member_stats,
    member_to_dict,
    update_member_status,
)
from src.shared.enums import MemberStatus

router = APIRouter(prefix="/api/v1/members", tags=["members"])


class MemberCreate(BaseModel):
    full_name: str
    email: str
    phone_number: str


class MemberStatusUpdate(BaseModel):
    # Validated by the service so an unknown value is a 400, not a 422
    status: str | None = None


@router.post("", status_code=201)
async def register_member(
    body: MemberCreate,
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    member = await create_member(session, body.full_name, body.email, body.phone_number)
    return {"message": "Member created successfully", "member": member_to_dict(member)}


@router.get("")
async def members(
    session: AsyncSession = Depends(get_session),  # noqa: B008
    search: str | None = None,
    status: MemberStatus | None = None,
    page: int = Query(default=1, ge=1),
) -> dict:
    return await list_members(session, search=search, status=status, page=page)


@router.get("/stats")
async def stats(
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    return await member_stats(session)


@router.get("/{member_id}")
async def member_detail(
    member_id: str,
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    member = await get_member(session, member_id)
    return {"member": member_to_dict(member)}


@router.patch("/{member_id}/status")
async def change_status(
    member_id: str,
    body: MemberStatusUpdate,
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    member = await update_member_status(session, member_id, body.status)
    return {"message": "Status updated successfully", "member": member_to_dict(member)}


@router.get("/{member_id}/balance")
async def member_balance(
    member_id: str,
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    return await get_balance(session, member_id)
