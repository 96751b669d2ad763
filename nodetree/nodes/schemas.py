"""Request and response schemas for node endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

from nodetree.models import MAX_NODE_ID

# -- Requests --


class CreateNodeRequest(BaseModel):
    parent: int | None = Field(default=None, gt=0, le=MAX_NODE_ID)


# -- Responses --


class NodeView(BaseModel):
    """A node as presented to API clients: localized title, formatted timestamp."""

    id: int
    parent: int | None = None
    title: str
    created_at: str


class NodeResponse(BaseModel):
    status: Literal["success"] = "success"
    data: NodeView


class NodeListResponse(BaseModel):
    status: Literal["success"] = "success"
    results: int
    data: list[NodeView] = Field(default_factory=list)


class MessageResponse(BaseModel):
    status: Literal["success"] = "success"
    message: str
