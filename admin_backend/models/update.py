from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class InboundChat(BaseModel):
    id: Union[int, str]


class InboundUser(BaseModel):
    id: Union[int, str]


class InboundMessage(BaseModel):
    """The subset of a Telegram message the webhook handler reads."""

    model_config = ConfigDict(populate_by_name=True)

    chat: InboundChat
    from_user: InboundUser = Field(alias="from")
    text: Optional[str] = None


class InboundUpdate(BaseModel):
    update_id: Optional[int] = None
    message: Optional[InboundMessage] = None
