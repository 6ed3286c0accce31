from typing import Annotated, Any, Dict, Optional
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from app.database import Database, get_database
from app.models.auth.user import UserRole, normalize_email
from app.services.auth.policy import POLICIES, Caller
from app.services.auth.security import TokenService
from app.services.auth.user_service import UserService
from app.services.payment.gateways.base import BasePaymentGateway

# Bearer scheme; missing headers are reported by TokenService.verify as 401
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/jwt", auto_error=False)


async def get_token_service(request: Request) -> TokenService:
    """Token service dependency"""
    return request.app.state.token_service


async def get_payment_gateway(request: Request) -> BasePaymentGateway:
    """Payment gateway dependency"""
    return request.app.state.payment_gateway


async def get_current_claims(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    token_service: TokenService = Depends(get_token_service)
) -> Dict[str, Any]:
    """Verified claims of the bearer token (401 when absent or invalid)"""
    return token_service.verify(token)


def authorize(operation: str):
    """
    Build the dependency guarding ``operation``.

    The caller's role is read from the users collection on every request,
    so a role change applies from the caller's next request.  Email-targeted
    ownership rules are checked here; document-targeted ones are checked by
    the route through ``Caller.ensure_owner`` once the document is loaded.
    """
    policy = POLICIES[operation]

    async def dependency(
        request: Request,
        claims: Dict[str, Any] = Depends(get_current_claims),
        db: Database = Depends(get_database)
    ) -> Caller:
        email = claims["email"]
        user = await UserService(db).get_user_by_email(email)
        role = UserRole.from_stored(user.get("role") if user else None)

        caller = Caller(email=email, role=role, policy=policy)
        caller.ensure_role()

        if policy.email_param:
            target = (
                request.path_params.get(policy.email_param)
                or request.query_params.get(policy.email_param)
            )
            caller.ensure_owner(normalize_email(target))

        return caller

    return dependency
