"""FastAPI routes for node CRUD and tree queries."""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Path, Query, status

from nodetree.models import MAX_NODE_ID
from nodetree.nodes.schemas import (
    CreateNodeRequest,
    MessageResponse,
    NodeListResponse,
    NodeResponse,
)
from nodetree.nodes.service import NodeService
from nodetree.nodes.store import (
    NodeConflictError,
    NodeNotFoundError,
    NodeValidationError,
    StorageFailureError,
)
from nodetree.utils.titles import parse_language

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/nodes", tags=["nodes"])


def get_node_service() -> NodeService:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("NodeService not initialized")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_node(
    request: CreateNodeRequest | None = None,
    accept_language: str | None = Header(None),
    timezone: str | None = Header(None),
    service: NodeService = Depends(get_node_service),
) -> NodeResponse:
    """Create a node. The id is assigned sequentially; the title is the id in words."""
    parent = request.parent if request is not None else None
    try:
        node = await service.create_node(
            parent, language=parse_language(accept_language), timezone=timezone,
        )
    except NodeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except NodeConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except NodeValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageFailureError as e:
        logger.error("Create failed: %s", e)
        raise HTTPException(status_code=500, detail="Storage failure")
    return NodeResponse(data=node)


@router.get("/parents")
async def list_parents(
    accept_language: str | None = Header(None),
    timezone: str | None = Header(None),
    service: NodeService = Depends(get_node_service),
) -> NodeListResponse:
    """List every root node (nodes without a parent)."""
    try:
        nodes = await service.list_parents(
            language=parse_language(accept_language), timezone=timezone,
        )
    except StorageFailureError as e:
        logger.error("Root listing failed: %s", e)
        raise HTTPException(status_code=500, detail="Storage failure")
    return NodeListResponse(results=len(nodes), data=nodes)


@router.get("/children")
async def list_children(
    parent_id: int = Query(..., alias="parentId", ge=1, le=MAX_NODE_ID),
    depth: int = Query(1, ge=1),
    accept_language: str | None = Header(None),
    timezone: str | None = Header(None),
    service: NodeService = Depends(get_node_service),
) -> NodeListResponse:
    """List descendants of ``parentId`` down to ``depth`` levels."""
    try:
        nodes = await service.list_children(
            parent_id,
            depth,
            language=parse_language(accept_language),
            timezone=timezone,
        )
    except NodeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except NodeValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageFailureError as e:
        logger.error("Descendant listing failed: %s", e)
        raise HTTPException(status_code=500, detail="Storage failure")
    return NodeListResponse(results=len(nodes), data=nodes)


@router.delete("/{node_id}")
async def delete_node(
    node_id: int = Path(..., ge=1, le=MAX_NODE_ID),
    service: NodeService = Depends(get_node_service),
) -> MessageResponse:
    """Delete a node. Fails with 409 while the node still has children."""
    try:
        await service.delete_node(node_id)
    except NodeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except NodeConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except NodeValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageFailureError as e:
        logger.error("Delete failed: %s", e)
        raise HTTPException(status_code=500, detail="Storage failure")
    return MessageResponse(message="Node deleted")
