import asyncio
import sys
from datetime import datetime

from app.core.config import Settings
from app.database import Database
from app.models.contest.contest import ContestStatus


ADMIN_EMAIL = "admin@contesthub.io"
CREATOR_EMAIL = "creator@contesthub.io"

# Users data
USERS_DATA = [
    {
        "email": ADMIN_EMAIL,
        "name": "ContestHub Admin",
        "photo": "https://i.ibb.co/admin.png",
        "role": "admin",
    },
    {
        "email": CREATOR_EMAIL,
        "name": "Demo Creator",
        "photo": "https://i.ibb.co/creator.png",
        "role": "creator",
    },
]

# Contests data (status given per contest; the rest is filled in below)
CONTESTS_DATA = [
    {
        "contestName": "Minimal Logo Challenge",
        "contestType": "Image Design",
        "description": "Design a minimal logo for a neighbourhood coffee shop.",
        "image": "https://i.ibb.co/logo-challenge.png",
        "price": 10,
        "prizeMoney": 250,
        "taskInstruction": "Submit a public link to a 1024x1024 PNG.",
        "deadline": "2030-06-30T23:59:59Z",
        "status": ContestStatus.ACCEPTED,
    },
    {
        "contestName": "Flash Fiction Sprint",
        "contestType": "Article Writing",
        "description": "Tell a complete story in 300 words or fewer.",
        "image": "https://i.ibb.co/flash-fiction.png",
        "price": 5,
        "prizeMoney": 100,
        "taskInstruction": "Submit a link to a shared document.",
        "deadline": "2030-05-15T23:59:59Z",
        "status": ContestStatus.ACCEPTED,
    },
    {
        "contestName": "Startup Name Storm",
        "contestType": "Business Idea",
        "description": "Name a startup that rents camping gear by the day.",
        "image": "https://i.ibb.co/startup-name.png",
        "price": 3,
        "prizeMoney": 50,
        "taskInstruction": "Submit the name and a one-line pitch.",
        "deadline": "2030-04-01T23:59:59Z",
        "status": ContestStatus.PENDING,
    },
]


async def seed_users(database: Database):
    """Seed admin and creator accounts (existing emails are left untouched)"""
    print("\n[*] Seeding users...")

    for user in USERS_DATA:
        result = await database.users.update_one(
            {"email": user["email"]},
            {"$setOnInsert": user},
            upsert=True
        )
        if result.upserted_id:
            print(f"  [OK] Created {user['role']}: {user['email']}")
        else:
            print(f"  [SKIP] {user['email']} already exists")


async def seed_contests(database: Database):
    """Seed sample contests owned by the demo creator"""
    print("\n[*] Seeding contests...")

    for contest_data in CONTESTS_DATA:
        existing = await database.contests.find_one({"contestName": contest_data["contestName"]})
        if existing:
            print(f"  [SKIP] {contest_data['contestName']} already exists")
            continue

        contest = dict(contest_data)
        contest.update({
            "status": contest_data["status"].value,
            "creatorEmail": CREATOR_EMAIL,
            "creatorName": "Demo Creator",
            "participationCount": 0,
            "createdAt": datetime.utcnow(),
        })
        await database.contests.insert_one(contest)
        print(f"  [OK] Created {contest['status']} contest: {contest['contestName']}")


async def main(reset: bool = False):
    """Main seed function"""
    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    settings = Settings.from_env()
    database = Database.from_settings(settings)

    try:
        if reset:
            print("\n[INFO] Dropping users, contests and payments")
            await database.users.drop()
            await database.contests.drop()
            await database.payments.drop()

        await database.create_indexes()
        await seed_users(database)
        await seed_contests(database)

        print()
        print("=" * 60)
        print("Database seeding completed successfully!")
        print("=" * 60)
    finally:
        database.close()


if __name__ == "__main__":
    # --reset wipes the collections first
    asyncio.run(main(reset="--reset" in sys.argv))
