# =======================================================================================
# doorcheck/api/routes/members.py - Member Administration Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends, File, Query, UploadFile
from ...database import DatabaseManager
from ...models.schemas import (
    CardOut,
    CardResponse,
    CreateMembershipRequest,
    IssueCardRequest,
    MemberImportResponse,
    MemberSearchResponse,
    MembershipOut,
    MembershipResponse,
    SimpleMember,
)
from ...services.member_service import MemberService
from ..dependencies import get_db, require_admin_key

router = APIRouter(dependencies=[Depends(require_admin_key)])
member_service = MemberService()


@router.get("/admin/members/search", response_model=MemberSearchResponse)
def search_members(
    query: str = Query(..., description="Email, legacy barcode, card secret or part of a name"),
    db: DatabaseManager = Depends(get_db),
):
    with db.get_connection() as conn:
        members = member_service.search_members(conn, query)
    return MemberSearchResponse(members=[SimpleMember(**m) for m in members])


@router.post("/admin/members/import", response_model=MemberImportResponse)
def import_members(
    file: UploadFile = File(...),
    db: DatabaseManager = Depends(get_db),
):
    """CSV import: headers = barcode,first_name,last_name,email,phone,legacy"""
    data = file.file.read()
    with db.get_connection() as conn:
        counts = member_service.import_members_from_csv(conn, data)
    return MemberImportResponse(**counts)


@router.post("/admin/members/{member_id}/cards", response_model=CardResponse)
def issue_card(
    member_id: str,
    request: IssueCardRequest,
    db: DatabaseManager = Depends(get_db),
):
    with db.get_connection() as conn:
        card = member_service.issue_card(conn, member_id, request)
    return CardResponse(card=CardOut(**card))


@router.post("/admin/cards/{card_id}/revoke", response_model=CardResponse)
def revoke_card(card_id: str, db: DatabaseManager = Depends(get_db)):
    with db.get_connection() as conn:
        card = member_service.revoke_card(conn, card_id)
    return CardResponse(card=CardOut(**card))


@router.post("/admin/members/{member_id}/memberships", response_model=MembershipResponse)
def create_membership(
    member_id: str,
    request: CreateMembershipRequest,
    db: DatabaseManager = Depends(get_db),
):
    with db.get_connection() as conn:
        membership = member_service.create_membership(conn, member_id, request)
    return MembershipResponse(membership=MembershipOut(**membership))
