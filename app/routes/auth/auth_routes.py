from fastapi import APIRouter, Depends

from app.models.auth.token import TokenRequest
from app.routes.auth.dependencies import get_token_service
from app.services.auth.security import TokenService
from app.utils.response import success_response

router = APIRouter(tags=["Authentication"])


@router.post("/jwt")
async def issue_token(
    claims: TokenRequest,
    token_service: TokenService = Depends(get_token_service)
):
    """
    Issue a bearer token for the signed-in user.

    The client posts the claims it got from its identity provider (at
    least ``email``); the token is valid for one hour and is sent back as
    ``Authorization: Bearer <token>``.
    """
    token = token_service.issue(claims.model_dump(mode="json"))

    return success_response(
        message="Token issued successfully",
        data={"token": token}
    )
