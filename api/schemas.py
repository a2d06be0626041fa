"""Pydantic schemas for the web-chat and bot-channel endpoints."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from services.menus import Menu


class CardAction(BaseModel):
    title: str
    type: Literal["imBack"] = "imBack"
    value: str


class SuggestedActions(BaseModel):
    actions: List[CardAction] = Field(default_factory=list)

    @classmethod
    def from_options(cls, options: List[str]) -> "SuggestedActions":
        return cls(actions=[CardAction(title=option, value=option) for option in options])

    @classmethod
    def from_menu(cls, menu: Optional[Menu]) -> "SuggestedActions":
        return cls.from_options(list(menu.options) if menu else [])


class WebChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="userId")


class WebChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    suggested_actions: SuggestedActions = Field(default_factory=SuggestedActions, alias="suggestedActions")


class ErrorResp(BaseModel):
    error: str


class ChannelAccount(BaseModel):
    id: str
    name: Optional[str] = None


class ConversationAccount(BaseModel):
    id: str = ""


class Activity(BaseModel):
    """Subset of a Bot Framework activity used by the bot channel."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: str = "message"
    id: Optional[str] = None
    text: Optional[str] = None
    channel_id: Optional[str] = Field(default=None, alias="channelId")
    from_: Optional[ChannelAccount] = Field(default=None, alias="from")
    recipient: Optional[ChannelAccount] = None
    conversation: Optional[ConversationAccount] = None
    members_added: List[ChannelAccount] = Field(default_factory=list, alias="membersAdded")
    reply_to_id: Optional[str] = Field(default=None, alias="replyToId")
    suggested_actions: Optional[SuggestedActions] = Field(default=None, alias="suggestedActions")


class ExpectedReplies(BaseModel):
    activities: List[Activity] = Field(default_factory=list)


__all__ = [
    "Activity",
    "CardAction",
    "ChannelAccount",
    "ConversationAccount",
    "ErrorResp",
    "ExpectedReplies",
    "SuggestedActions",
    "WebChatRequest",
    "WebChatResponse",
]
