"""FastAPI route for the browser web-chat."""
from __future__ import annotations

from typing import Union

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from agents.dialog_manager import APOLOGY, DialogManager
from api.schemas import ErrorResp, SuggestedActions, WebChatRequest, WebChatResponse
from config import Settings
from observability import log_error
from services import menus

EMPTY_MESSAGE_ERROR = "Le message ne peut pas être vide"

router = APIRouter(prefix="/api/webchat")


def _dialog(request: Request) -> DialogManager:
    return request.app.state.dialog


@router.post(
    "/messages",
    response_model=WebChatResponse,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResp}},
)
async def post_message(req: WebChatRequest, request: Request) -> Union[WebChatResponse, JSONResponse]:
    if not req.text or not req.text.strip():
        return JSONResponse(status_code=400, content=ErrorResp(error=EMPTY_MESSAGE_ERROR).model_dump())

    config: Settings = request.app.state.settings
    user_id = req.user_id or config.WEBCHAT_DEFAULT_USER
    try:
        reply = await _dialog(request).handle_message(user_id, req.text)
        return WebChatResponse(text=reply.text, suggested_actions=SuggestedActions.from_menu(reply.menu))
    except Exception as exc:  # noqa: BLE001
        log_error("webchat", "Erreur lors du traitement du message", exc)
        return WebChatResponse(text=APOLOGY, suggested_actions=SuggestedActions.from_menu(menus.HOME_ONLY))


__all__ = ["router"]
