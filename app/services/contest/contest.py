import logging
import re
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from app.database import Database
from app.models.contest.contest import (
    ContestCreate,
    ContestStatus,
    ContestUpdate,
    can_transition,
)
from app.utils.exceptions import AppError, ConflictError, NotFoundError
from app.utils.serializers import parse_object_id

logger = logging.getLogger(__name__)


class ContestService:
    """Service for contest publishing, moderation and listings"""

    POPULAR_LIMIT = 6
    ALL_TYPES = "All"

    # Set by the server only, never taken from a create payload
    SERVER_FIELDS = (
        "_id",
        "winnerEmail",
        "winnerName",
        "winnerPhoto",
        "winnerPaymentId",
    )

    def __init__(self, database: Database):
        self.contests = database.contests

    async def get_contest(self, contest_id: str) -> Dict:
        """Get contest by ID, raising ``NotFoundError`` when missing"""
        contest = await self.contests.find_one({"_id": parse_object_id(contest_id, "contest id")})
        if not contest:
            raise NotFoundError("Contest not found")
        return contest

    async def create_contest(self, contest_data: ContestCreate, creator_email: str):
        """Create a contest in PENDING status, owned by ``creator_email``"""
        contest = contest_data.model_dump(mode="json")
        for field in self.SERVER_FIELDS:
            contest.pop(field, None)
        contest.update({
            "creatorEmail": creator_email,
            "status": ContestStatus.PENDING.value,
            "participationCount": 0,
            "createdAt": datetime.utcnow(),
        })
        result = await self.contests.insert_one(contest)
        logger.info("Contest %s created by %s", result.inserted_id, creator_email)
        return result

    @classmethod
    def build_public_query(cls, search: str = "", contest_type: str = "") -> Dict:
        """
        Filter for public listings.

        Only ACCEPTED contests are ever public.  ``search`` matches name or
        type case-insensitively; ``contest_type`` is exact unless "All".
        """
        query: Dict = {"status": ContestStatus.ACCEPTED.value}

        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [
                {"contestName": pattern},
                {"contestType": pattern},
            ]

        if contest_type and contest_type != cls.ALL_TYPES:
            query["contestType"] = contest_type

        return query

    async def get_public_contests(
        self,
        search: str = "",
        contest_type: str = "",
        page: int = 0,
        size: int = 10
    ) -> Tuple[List[Dict], int]:
        """Page of accepted contests plus the total number matching the filter"""
        query = self.build_public_query(search, contest_type)

        total = await self.contests.count_documents(query)
        contests = await self.contests.find(query).sort(
            "_id", -1
        ).skip(page * size).limit(size).to_list(length=None)

        return contests, total

    async def get_popular_contests(self) -> List[Dict]:
        """Top accepted contests by participation count"""
        return await self.contests.find(
            {"status": ContestStatus.ACCEPTED.value}
        ).sort(
            [("participationCount", -1), ("_id", 1)]
        ).limit(self.POPULAR_LIMIT).to_list(length=None)

    async def get_contests_by_creator(self, creator_email: str) -> List[Dict]:
        return await self.contests.find({"creatorEmail": creator_email}).to_list(length=None)

    async def get_all_contests(self) -> List[Dict]:
        """Every contest regardless of status (admin moderation queue)"""
        return await self.contests.find().sort("_id", -1).to_list(length=None)

    async def update_contest(self, contest_id: str, update: ContestUpdate):
        """Replace the editable fields the creator supplied"""
        fields = update.model_dump(mode="json", exclude_unset=True)
        if not fields:
            raise AppError("No editable fields supplied")

        return await self.contests.update_one(
            {"_id": parse_object_id(contest_id, "contest id")},
            {"$set": fields}
        )

    async def delete_contest(self, contest_id: str):
        result = await self.contests.delete_one({"_id": parse_object_id(contest_id, "contest id")})
        logger.info("Contest %s deleted (deleted=%s)", contest_id, result.deleted_count)
        return result

    async def set_status(self, contest_id: str, target: ContestStatus):
        """
        Move a contest through moderation.

        The write is conditional on the status read beforehand, so two admins
        racing on the same contest cannot both succeed.
        """
        contest = await self.get_contest(contest_id)
        try:
            current = ContestStatus(contest.get("status", ContestStatus.PENDING.value))
        except ValueError:
            raise ConflictError(f"Contest has an unrecognized status: {contest.get('status')}")

        if not can_transition(current, target):
            raise ConflictError(
                f"Cannot change contest status from {current.value} to {target.value}"
            )

        result = await self.contests.update_one(
            {"_id": contest["_id"], "status": current.value},
            {"$set": {"status": target.value}}
        )
        if result.modified_count == 0:
            raise ConflictError("Contest status changed concurrently, reload and retry")

        logger.info("Contest %s moved %s -> %s", contest_id, current.value, target.value)
        return result

    async def set_winner(
        self,
        contest: Dict,
        winner_email: str,
        winner_name: Optional[str],
        winner_photo: Optional[str],
        payment_id: Optional[str] = None,
        session=None
    ):
        """Record the contest winner; a contest is judged only once"""
        result = await self.contests.update_one(
            {"_id": contest["_id"], "winnerEmail": {"$exists": False}},
            {"$set": {
                "winnerEmail": winner_email,
                "winnerName": winner_name,
                "winnerPhoto": winner_photo,
                "winnerPaymentId": payment_id,
            }},
            session=session
        )
        if result.modified_count == 0:
            raise ConflictError("Contest already has a winner")
        return result
