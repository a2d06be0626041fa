"""Bot Framework channel endpoint.

Inbound activities are answered inline with an ExpectedReplies body: one text
activity per reply, followed by a suggested-actions activity when the reply
carries a menu.
"""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Request

from agents.dialog_manager import DialogManager, Reply
from api.schemas import Activity, ChannelAccount, ExpectedReplies, SuggestedActions

router = APIRouter(prefix="/api")


def _reply_activities(inbound: Activity, reply: Reply, recipient: Optional[ChannelAccount]) -> List[Activity]:
    base = {
        "from": inbound.recipient,
        "recipient": recipient,
        "conversation": inbound.conversation,
        "channelId": inbound.channel_id,
        "replyToId": inbound.id,
    }
    activities = [Activity(type="message", text=reply.text, **base)]
    if reply.menu is not None:
        activities.append(
            Activity(
                type="message",
                text=reply.menu.prompt,
                suggestedActions=SuggestedActions.from_menu(reply.menu),
                **base,
            )
        )
    return activities


def _new_members(activity: Activity) -> List[ChannelAccount]:
    recipient_id = activity.recipient.id if activity.recipient else None
    return [member for member in activity.members_added if member.id != recipient_id]


@router.post("/messages", response_model=ExpectedReplies, response_model_by_alias=True, response_model_exclude_none=True)
async def post_activity(activity: Activity, request: Request) -> ExpectedReplies:
    dialog: DialogManager = request.app.state.dialog
    replies: List[Activity] = []

    if activity.type == "conversationUpdate":
        for member in _new_members(activity):
            replies.extend(_reply_activities(activity, dialog.welcome(member.id), member))
    elif activity.type == "message" and activity.from_ is not None and activity.text:
        reply = await dialog.handle_message(activity.from_.id, activity.text)
        replies.extend(_reply_activities(activity, reply, activity.from_))

    return ExpectedReplies(activities=replies)


__all__ = ["router"]
