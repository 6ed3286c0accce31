from typing import Dict, List

from app.database import Database
from app.models.payment.payment import EntryStatus


class LeaderboardService:
    """Service for the winners leaderboard and platform statistics"""

    def __init__(self, database: Database):
        self.users = database.users
        self.contests = database.contests
        self.payments = database.payments

    @staticmethod
    def build_leaderboard_pipeline(limit: int = 10) -> List[Dict]:
        """
        Winners ranked by number of winning entries.

        Ties are ordered by email so identical data always ranks the same.
        """
        return [
            {"$match": {"status": EntryStatus.WINNER.value}},
            {"$group": {"_id": "$email", "winCount": {"$sum": 1}}},
            {
                "$lookup": {
                    "from": "users",
                    "localField": "_id",
                    "foreignField": "email",
                    "as": "userInfo"
                }
            },
            {"$unwind": {"path": "$userInfo", "preserveNullAndEmptyArrays": True}},
            {
                "$project": {
                    "_id": 1,
                    "winCount": 1,
                    "name": "$userInfo.name",
                    "photo": "$userInfo.photo"
                }
            },
            {"$sort": {"winCount": -1, "_id": 1}},
            {"$limit": limit},
        ]

    async def get_leaderboard(self, limit: int = 10) -> List[Dict]:
        pipeline = self.build_leaderboard_pipeline(limit)
        return await self.payments.aggregate(pipeline).to_list(length=None)

    async def get_winning_stats(self, email: str) -> Dict:
        """Entries and wins of one participant"""
        total_participated = await self.payments.count_documents({"email": email})
        total_wins = await self.payments.count_documents({
            "email": email,
            "status": EntryStatus.WINNER.value
        })
        return {"totalWins": total_wins, "totalParticipated": total_participated}

    async def get_admin_stats(self) -> Dict:
        """Platform totals for the admin dashboard"""
        users = await self.users.estimated_document_count()
        contests = await self.contests.estimated_document_count()
        orders = await self.payments.estimated_document_count()

        revenue_result = await self.payments.aggregate([
            {"$group": {"_id": None, "totalRevenue": {"$sum": "$price"}}}
        ]).to_list(length=1)
        revenue = revenue_result[0]["totalRevenue"] if revenue_result else 0

        return {
            "users": users,
            "contests": contests,
            "orders": orders,
            "revenue": revenue
        }
