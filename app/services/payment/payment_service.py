"""
Payment Service
Records paid contest entries and lists a participant's entries
"""
import logging
from datetime import datetime
from typing import Dict, List

from bson import ObjectId

from app.database import Database
from app.models.payment.payment import EntryStatus, PaymentCreate
from app.utils.exceptions import NotFoundError
from app.utils.serializers import parse_object_id

logger = logging.getLogger(__name__)


class PaymentService:
    """Service for contest entry payments"""

    # Payment fields returned in a participant's payment history
    PAYMENT_FIELDS = (
        "_id",
        "email",
        "contestId",
        "price",
        "transactionId",
        "date",
        "status",
        "taskSubmission",
    )

    # Contest fields copied onto each entry in a participant's payment history
    CONTEST_DISPLAY_FIELDS = ("contestName", "contestType", "image", "prizeMoney", "deadline")

    def __init__(self, database: Database):
        self.database = database
        self.payments = database.payments
        self.contests = database.contests

    async def get_payment(self, payment_id: str) -> Dict:
        """Get payment by ID, raising ``NotFoundError`` when missing"""
        payment = await self.payments.find_one({"_id": parse_object_id(payment_id, "payment id")})
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    async def record_payment(self, payment_data: PaymentCreate, email: str) -> Dict:
        """
        Record a paid entry and bump the contest's participation count.

        Both writes share one transaction (when enabled) so the counter
        keeps matching the number of payment rows.
        """
        contest_oid = parse_object_id(payment_data.contestId, "contest id")

        payment = {
            "email": email,
            "contestId": str(contest_oid),
            "price": payment_data.price,
            "transactionId": payment_data.transactionId,
            "date": payment_data.date or datetime.utcnow(),
            "status": EntryStatus.PAID.value,
        }

        async with self.database.transaction() as session:
            contest = await self.contests.find_one({"_id": contest_oid}, session=session)
            if not contest:
                raise NotFoundError("Contest not found")

            payment_result = await self.payments.insert_one(payment, session=session)
            contest_result = await self.contests.update_one(
                {"_id": contest_oid},
                {"$inc": {"participationCount": 1}},
                session=session
            )

        logger.info(
            "Payment %s recorded for %s in contest %s",
            payment_result.inserted_id, email, contest_oid
        )
        return {"payment_result": payment_result, "contest_result": contest_result}

    async def get_user_payments(self, email: str) -> List[Dict]:
        """
        ``email``'s entries, newest first, with contest display fields.

        ``contestId`` is stored as a string, so the contests are fetched
        with one ``$in`` query and merged here.  Entries whose contest no
        longer exists are dropped.
        """
        payments = await self.payments.find({"email": email}).sort("_id", -1).to_list(length=None)

        contest_ids = [
            ObjectId(contest_id)
            for contest_id in {payment.get("contestId") for payment in payments}
            if ObjectId.is_valid(contest_id)
        ]
        projection = {field: 1 for field in self.CONTEST_DISPLAY_FIELDS}
        contests = await self.contests.find(
            {"_id": {"$in": contest_ids}},
            projection
        ).to_list(length=None)
        contests_by_id = {str(contest["_id"]): contest for contest in contests}

        entries = []
        for payment in payments:
            contest = contests_by_id.get(payment.get("contestId"))
            if contest is None:
                continue

            entry = {field: payment[field] for field in self.PAYMENT_FIELDS if field in payment}
            entry.update({field: contest.get(field) for field in self.CONTEST_DISPLAY_FIELDS})
            entries.append(entry)

        return entries
