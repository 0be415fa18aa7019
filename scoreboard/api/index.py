"""
Index page actions: team registration and login
"""
import logging

from fastapi import APIRouter, Request, Response

from scoreboard import state
from scoreboard.models import ActionRequest, ActionResponse, ErrorKind, Result
from scoreboard.services.sessions import SessionContext


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/index", tags=["index"])

SESSION_COOKIE = "session_id"


async def dispatch(body: ActionRequest, context: SessionContext) -> Result[str]:
    """Route one action to the registrar or the login resolver"""
    if body.action in ("register_team", "register_names"):
        with_roster = body.action == "register_names"
        if body.teamname is None or body.password is None:
            return Result.failure(ErrorKind.REGISTRATION_DISABLED)
        if with_roster and len(body.names) != len(body.emails):
            logger.info("Registration refused: names and emails differ in length")
            return Result.failure(ErrorKind.REGISTRATION_DISABLED)

        return await state.REGISTRAR.register(
            context,
            body.teamname,
            body.password,
            token=body.token,
            logo=body.logo,
            is_custom_logo=body.is_custom_logo,
            logo_type=body.logo_type,
            with_roster=with_roster,
            names=body.names,
            emails=body.emails,
        )

    if body.action == "login_team":
        if body.password is None:
            return Result.failure(ErrorKind.LOGIN_FAILED)
        return await state.LOGIN.login_team(context, body.team_id, body.teamname, body.password)

    return Result.failure(ErrorKind.INVALID_ACTION)


@router.post("/ajax", response_model=ActionResponse)
async def index_action(body: ActionRequest, request: Request, response: Response):
    """
    Run a register_team, register_names or login_team action

    Request:
        {
            "action": "register_team",
            "teamname": "Team",
            "password": "...",
            "logo": "bat",            # or base64 data with isCustomLogo
            "isCustomLogo": false,
            "token": "abc123"         # when registration is tokenized
        }

    Response:
        {"status": "ok", "message": "Login successful", "redirect": "game"}
    """
    client_ip = request.client.host if request.client else "unknown"
    context = SessionContext(state.SESSIONS, request.cookies.get(SESSION_COOKIE), client_ip)

    logger.info(f"Action '{body.action}' from {client_ip}")
    result = await dispatch(body, context)

    # Only requests that stored something get a session
    if context.session_id:
        response.set_cookie(SESSION_COOKIE, context.session_id, httponly=True, samesite="strict")

    if result.ok:
        return ActionResponse.ok_response("Login successful", result.value)
    logger.info(f"Action '{body.action}' from {client_ip} failed: {result.error.value}")
    return ActionResponse.from_error(result.error)
