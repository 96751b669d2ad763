"""Node forest: storage engine, application service and HTTP routes."""

from nodetree.nodes.service import NodeService
from nodetree.nodes.store import NodeStore

__all__ = ["NodeService", "NodeStore"]
