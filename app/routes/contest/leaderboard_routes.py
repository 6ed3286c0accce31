from fastapi import APIRouter, Query, Depends

from app.database import Database, get_database
from app.models.auth.user import normalize_email
from app.routes.auth.dependencies import authorize
from app.services.auth.policy import Caller
from app.services.contest.leaderboard import LeaderboardService
from app.utils.response import success_response
from app.utils.serializers import serialize_documents

router = APIRouter(tags=["Leaderboard"])


@router.get("/leaderboard")
async def get_leaderboard(
    limit: int = Query(10, ge=1, le=100, description="Number of top winners to return"),
    db: Database = Depends(get_database)
):
    """
    Top contest winners.

    Each row: ``_id`` (participant email), ``winCount``, ``name``, ``photo``.
    Sorted by wins, highest first; ties ordered by email.
    """
    leaderboard = await LeaderboardService(db).get_leaderboard(limit=limit)

    return success_response(
        message="Leaderboard retrieved successfully",
        data={"leaderboard": serialize_documents(leaderboard)}
    )


@router.get("/my-winning-stats/{email}")
async def get_my_winning_stats(
    email: str,
    caller: Caller = Depends(authorize("stats:winning")),
    db: Database = Depends(get_database)
):
    """
    Caller's win record for the profile page.

    Returns total entries (``totalParticipated``) and wins (``totalWins``).
    """
    stats = await LeaderboardService(db).get_winning_stats(normalize_email(email))

    return success_response(
        message="Winning stats retrieved successfully",
        data=stats
    )


@router.get("/admin-stats")
async def get_admin_stats(
    caller: Caller = Depends(authorize("stats:admin")),
    db: Database = Depends(get_database)
):
    """Users, contests, paid entries and total revenue (admin only)."""
    stats = await LeaderboardService(db).get_admin_stats()

    return success_response(
        message="Statistics retrieved successfully",
        data=stats
    )
