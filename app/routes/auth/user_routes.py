from fastapi import APIRouter, Depends

from app.database import Database, get_database
from app.models.auth.user import RoleUpdate, UserCreate, UserProfileUpdate, normalize_email
from app.routes.auth.dependencies import authorize
from app.services.auth.policy import Caller
from app.services.auth.user_service import UserService
from app.utils.exceptions import NotFoundError
from app.utils.response import success_response, write_result_to_json
from app.utils.serializers import serialize_document, serialize_documents

router = APIRouter(tags=["Users"])


@router.post("/users")
async def register_user(
    user_data: UserCreate,
    db: Database = Depends(get_database)
):
    """
    Register a user on first sign-in.

    Calling it again for a known email is a no-op: the response carries
    ``insertedId: null`` and nothing is written.
    """
    result = await UserService(db).register(user_data)

    if result is None:
        return success_response(
            message="user already exists",
            data={"insertedId": None}
        )

    return success_response(
        message="User registered successfully",
        data=write_result_to_json(result),
        status_code=201
    )


@router.get("/users")
async def list_users(
    caller: Caller = Depends(authorize("users:list")),
    db: Database = Depends(get_database)
):
    """List every user (admin only)."""
    users = await UserService(db).list_users()

    return success_response(
        message="Users retrieved successfully",
        data={"users": serialize_documents(users)}
    )


@router.get("/best-creators")
async def get_best_creators(db: Database = Depends(get_database)):
    """Up to six creator accounts for the home page."""
    creators = await UserService(db).get_best_creators()

    return success_response(
        message="Creators retrieved successfully",
        data={"creators": serialize_documents(creators)}
    )


@router.get("/users/role/{email}")
async def get_user_role(
    email: str,
    caller: Caller = Depends(authorize("users:read_role")),
    db: Database = Depends(get_database)
):
    """Role of the calling user; unknown users are reported as ``user``."""
    role = await UserService(db).get_role(normalize_email(email))

    return success_response(
        message="Role retrieved successfully",
        data={"role": role}
    )


@router.patch("/users/role/{user_id}")
async def update_user_role(
    user_id: str,
    role_data: RoleUpdate,
    caller: Caller = Depends(authorize("users:update_role")),
    db: Database = Depends(get_database)
):
    """
    Change a user's role (admin only).

    Takes effect on that user's next request; roles are not cached.
    """
    result = await UserService(db).set_role(user_id, role_data.role)

    return success_response(
        message="Role updated successfully",
        data=write_result_to_json(result)
    )


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    caller: Caller = Depends(authorize("users:delete")),
    db: Database = Depends(get_database)
):
    """Delete a user (admin only)."""
    result = await UserService(db).delete_user(user_id)

    return success_response(
        message="User deleted successfully",
        data=write_result_to_json(result)
    )


@router.put("/users/{email}")
async def update_profile(
    email: str,
    profile: UserProfileUpdate,
    caller: Caller = Depends(authorize("users:update_profile")),
    db: Database = Depends(get_database)
):
    """
    Update the caller's own profile (upsert).

    ``role`` and ``email`` in the body are ignored.
    """
    result = await UserService(db).update_profile(normalize_email(email), profile)

    return success_response(
        message="Profile updated successfully",
        data=write_result_to_json(result)
    )


@router.get("/user-profile/{email}")
async def get_user_profile(
    email: str,
    caller: Caller = Depends(authorize("users:read_profile")),
    db: Database = Depends(get_database)
):
    """Full profile of the caller."""
    user = await UserService(db).get_user_by_email(normalize_email(email))
    if not user:
        raise NotFoundError("User not found")

    return success_response(
        message="Profile retrieved successfully",
        data={"user": serialize_document(user)}
    )
