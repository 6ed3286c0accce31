from fastapi import APIRouter, Depends, Query

from app.database import Database, get_database
from app.models.auth.user import normalize_email
from app.models.contest.contest import (
    ContestCreate,
    ContestStatusUpdate,
    ContestUpdate,
    WinnerSelection,
)
from app.routes.auth.dependencies import authorize
from app.services.auth.policy import Caller
from app.services.contest.contest import ContestService
from app.services.contest.submission import SubmissionService
from app.utils.response import success_response, write_result_to_json
from app.utils.serializers import serialize_document, serialize_documents

router = APIRouter(prefix="/contests", tags=["Contests"])


@router.post("")
async def create_contest(
    contest_data: ContestCreate,
    caller: Caller = Depends(authorize("contests:create")),
    db: Database = Depends(get_database)
):
    """
    Create a new contest (creators and admins).

    - Contest starts in PENDING status and is hidden from public listings
    - An admin must accept it before participants can see it
    - The caller becomes the contest owner (``creatorEmail``)
    """
    result = await ContestService(db).create_contest(contest_data, caller.email)

    return success_response(
        message="Contest created successfully. Waiting for admin approval.",
        data=write_result_to_json(result),
        status_code=201
    )


@router.get("")
async def get_contests(
    page: int = Query(0, ge=0, description="Zero-based page number"),
    size: int = Query(10, ge=1, le=100, description="Contests per page"),
    search: str = Query("", description="Case-insensitive match on name or type"),
    contest_type: str = Query("", alias="type", description="Exact contest type; 'All' disables the filter"),
    db: Database = Depends(get_database)
):
    """
    Public contest listing.

    Only ACCEPTED contests are returned.  Response carries the requested
    page in ``result`` and the number of matching contests in ``total``.
    """
    contests, total = await ContestService(db).get_public_contests(
        search=search,
        contest_type=contest_type,
        page=page,
        size=size
    )

    return success_response(
        message="Contests retrieved successfully",
        data={
            "result": serialize_documents(contests),
            "total": total
        }
    )


@router.get("/popular")
async def get_popular_contests(db: Database = Depends(get_database)):
    """Six accepted contests with the most participants."""
    contests = await ContestService(db).get_popular_contests()

    return success_response(
        message="Popular contests retrieved successfully",
        data={"contests": serialize_documents(contests)}
    )


@router.get("/admin/all")
async def get_all_contests(
    caller: Caller = Depends(authorize("contests:list_all")),
    db: Database = Depends(get_database)
):
    """Every contest in every status (admin moderation queue)."""
    contests = await ContestService(db).get_all_contests()

    return success_response(
        message="Contests retrieved successfully",
        data={"contests": serialize_documents(contests)}
    )


@router.get("/creator/{email}")
async def get_creator_contests(
    email: str,
    caller: Caller = Depends(authorize("contests:list_own")),
    db: Database = Depends(get_database)
):
    """Contests created by the caller, in every status."""
    contests = await ContestService(db).get_contests_by_creator(normalize_email(email))

    return success_response(
        message="Contests retrieved successfully",
        data={"contests": serialize_documents(contests)}
    )


@router.get("/{contest_id}")
async def get_contest(
    contest_id: str,
    db: Database = Depends(get_database)
):
    """Get contest details by ID."""
    contest = await ContestService(db).get_contest(contest_id)

    return success_response(
        message="Contest retrieved successfully",
        data={"contest": serialize_document(contest)}
    )


@router.put("/update/{contest_id}")
async def update_contest(
    contest_id: str,
    update: ContestUpdate,
    caller: Caller = Depends(authorize("contests:update")),
    db: Database = Depends(get_database)
):
    """
    Edit a contest (owner or admin).

    Only name, image, type, description, price, prize money, task
    instruction and deadline can change; omitted fields keep their value.
    """
    contest_service = ContestService(db)
    contest = await contest_service.get_contest(contest_id)
    caller.ensure_owner(contest)

    result = await contest_service.update_contest(contest_id, update)

    return success_response(
        message="Contest updated successfully",
        data=write_result_to_json(result)
    )


@router.delete("/{contest_id}")
async def delete_contest(
    contest_id: str,
    caller: Caller = Depends(authorize("contests:delete")),
    db: Database = Depends(get_database)
):
    """Delete a contest (owner or admin)."""
    contest_service = ContestService(db)
    contest = await contest_service.get_contest(contest_id)
    caller.ensure_owner(contest)

    result = await contest_service.delete_contest(contest_id)

    return success_response(
        message="Contest deleted successfully",
        data=write_result_to_json(result)
    )


@router.patch("/status/{contest_id}")
async def update_contest_status(
    contest_id: str,
    status_data: ContestStatusUpdate,
    caller: Caller = Depends(authorize("contests:set_status")),
    db: Database = Depends(get_database)
):
    """
    Moderate a contest (admin only).

    Allowed transitions: pending -> accepted, pending -> rejected.
    Unknown status values fail validation (422); other transitions are
    rejected with 409.
    """
    result = await ContestService(db).set_status(contest_id, status_data.status)

    return success_response(
        message=f"Contest {status_data.status.value}",
        data=write_result_to_json(result)
    )


@router.patch("/winner/{contest_id}")
async def select_contest_winner(
    contest_id: str,
    winner: WinnerSelection,
    caller: Caller = Depends(authorize("contests:select_winner")),
    db: Database = Depends(get_database)
):
    """
    Declare the contest winner (owner or admin).

    With ``paymentId`` the matching entry is flagged as the winner as well.
    """
    contest = await ContestService(db).get_contest(contest_id)
    caller.ensure_owner(contest)

    result = await SubmissionService(db).select_winner(
        contest,
        winner_email=winner.winnerEmail,
        winner_name=winner.winnerName,
        winner_photo=winner.winnerPhoto,
        payment_id=winner.paymentId
    )

    return success_response(
        message="Winner declared successfully",
        data=write_result_to_json(result)
    )
