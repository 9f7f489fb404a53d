"""Schemas for realtime chat frames."""

from pydantic import BaseModel, ConfigDict, Field


class InboundMessage(BaseModel):
    """Frame sent by a client. The timestamp is client supplied and not validated."""

    message: str = ""
    timestamp: str = ""


class ChatMessage(BaseModel):
    """Frame relayed to every client and kept in the session history."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    user_id: str = Field(alias="userId")
    message: str = ""
    timestamp: str = ""

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
