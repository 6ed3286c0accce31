import logging
from datetime import datetime
from typing import Dict, List, Optional

from app.database import Database
from app.models.payment.payment import ENTRY_STATUS_TRANSITIONS, EntryStatus
from app.services.contest.contest import ContestService
from app.services.payment.payment_service import PaymentService
from app.utils.exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class SubmissionService:
    """Service for task submissions on paid entries and winner selection"""

    def __init__(self, database: Database):
        self.database = database
        self.payments = database.payments
        self.contests = database.contests
        self.users = database.users
        self.contest_service = ContestService(database)
        self.payment_service = PaymentService(database)

    @staticmethod
    def _ensure_transition(payment: Dict, target: EntryStatus):
        try:
            current = EntryStatus(payment.get("status", EntryStatus.PAID.value))
        except ValueError:
            current = EntryStatus.PAID

        if target not in ENTRY_STATUS_TRANSITIONS[current]:
            raise ConflictError(f"Entry is {current.value} and cannot become {target.value}")

    async def submit_task(self, payment: Dict, task_submission: str):
        """Attach the participant's work to their entry"""
        self._ensure_transition(payment, EntryStatus.SUBMITTED)

        return await self.payments.update_one(
            {"_id": payment["_id"]},
            {"$set": {
                "taskSubmission": task_submission,
                "submittedAt": datetime.utcnow(),
                "status": EntryStatus.SUBMITTED.value,
            }}
        )

    async def get_contest_submissions(self, contest_id: str) -> List[Dict]:
        return await self.payments.find({
            "contestId": contest_id,
            "status": EntryStatus.SUBMITTED.value
        }).to_list(length=None)

    async def get_creator_submissions(self, creator_email: str) -> List[Dict]:
        """Submitted entries across every contest owned by ``creator_email``"""
        contests = await self.contests.find(
            {"creatorEmail": creator_email},
            {"_id": 1, "contestName": 1}
        ).to_list(length=None)
        if not contests:
            return []

        names = {str(c["_id"]): c.get("contestName") for c in contests}
        submissions = await self.payments.find({
            "contestId": {"$in": list(names)},
            "status": EntryStatus.SUBMITTED.value
        }).to_list(length=None)

        for submission in submissions:
            submission["contestName"] = names.get(submission.get("contestId"))
        return submissions

    async def get_entry_contest(self, payment: Dict) -> Dict:
        """Contest an entry was paid for"""
        try:
            return await self.contest_service.get_contest(payment.get("contestId", ""))
        except NotFoundError:
            raise NotFoundError("Contest for this entry no longer exists")

    async def mark_winner(self, payment: Dict, contest: Dict):
        """
        Flag ``payment`` as the winning entry of ``contest``.

        The entry status and the contest's winner fields change together.
        """
        self._ensure_transition(payment, EntryStatus.WINNER)

        user = await self.users.find_one({"email": payment.get("email")}) or {}

        async with self.database.transaction() as session:
            await self.contest_service.set_winner(
                contest,
                winner_email=payment.get("email"),
                winner_name=user.get("name"),
                winner_photo=user.get("photo"),
                payment_id=str(payment["_id"]),
                session=session
            )
            result = await self.payments.update_one(
                {"_id": payment["_id"]},
                {"$set": {"status": EntryStatus.WINNER.value}},
                session=session
            )

        logger.info("Entry %s won contest %s", payment["_id"], contest["_id"])
        return result

    async def select_winner(
        self,
        contest: Dict,
        winner_email: str,
        winner_name: Optional[str] = None,
        winner_photo: Optional[str] = None,
        payment_id: Optional[str] = None
    ):
        """
        Declare a winner from the contest side.

        When ``payment_id`` is given, that entry must belong to the contest
        and the winner, and it is flagged in the same transaction.
        """
        payment = None
        if payment_id:
            payment = await self.payment_service.get_payment(payment_id)
            if payment.get("contestId") != str(contest["_id"]):
                raise ConflictError("Entry does not belong to this contest")
            if payment.get("email") != winner_email:
                raise ConflictError("Entry does not belong to the selected winner")
            self._ensure_transition(payment, EntryStatus.WINNER)

        async with self.database.transaction() as session:
            result = await self.contest_service.set_winner(
                contest,
                winner_email=winner_email,
                winner_name=winner_name,
                winner_photo=winner_photo,
                payment_id=payment_id,
                session=session
            )
            if payment:
                await self.payments.update_one(
                    {"_id": payment["_id"]},
                    {"$set": {"status": EntryStatus.WINNER.value}},
                    session=session
                )

        logger.info("Contest %s winner set to %s", contest["_id"], winner_email)
        return result
