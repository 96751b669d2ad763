"""Node service: validates input, renders titles and timestamps around the store."""

from nodetree.models import MAX_NODE_ID, Node
from nodetree.nodes.schemas import NodeView
from nodetree.nodes.store import NodeStore, NodeValidationError
from nodetree.utils.timezones import format_timestamp
from nodetree.utils.titles import DEFAULT_LANGUAGE, normalize_language, render_title


class NodeService:
    """Application layer between the HTTP routes and the NodeStore."""

    def __init__(self, store: NodeStore, default_language: str = DEFAULT_LANGUAGE) -> None:
        self._store = store
        self._default_language = normalize_language(default_language)

    async def create_node(
        self,
        parent: int | None = None,
        language: str | None = None,
        timezone: str | None = None,
    ) -> NodeView:
        """Create a node whose title is its id spelled out in ``language``."""
        if parent is not None:
            _validate_id(parent, "parent")
        language = normalize_language(language or self._default_language)
        node = await self._store.create(parent, lambda node_id: render_title(node_id, language))
        return self._view(node, language=language, timezone=timezone)

    async def list_parents(
        self, language: str | None = None, timezone: str | None = None,
    ) -> list[NodeView]:
        """All root nodes."""
        nodes = await self._store.list_roots()
        return [self._view(n, language=language, timezone=timezone) for n in nodes]

    async def list_children(
        self,
        parent_id: int,
        depth: int = 1,
        language: str | None = None,
        timezone: str | None = None,
    ) -> list[NodeView]:
        """Descendants of ``parent_id`` down to ``depth`` levels (minimum 1)."""
        _validate_id(parent_id, "parentId")
        nodes = await self._store.list_descendants(parent_id, max(1, depth))
        return [self._view(n, language=language, timezone=timezone) for n in nodes]

    async def delete_node(self, node_id: int) -> None:
        _validate_id(node_id, "id")
        await self._store.delete(node_id)

    @staticmethod
    def _view(node: Node, language: str | None, timezone: str | None) -> NodeView:
        # Stored titles are kept as written; a requested language re-renders.
        title = render_title(node.id, language) if language else node.title
        return NodeView(
            id=node.id,
            parent=node.parent,
            title=title,
            created_at=format_timestamp(node.created_at, timezone),
        )


def _validate_id(value: object, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise NodeValidationError(f"'{name}' must be a positive integer")
    if value > MAX_NODE_ID:
        raise NodeValidationError(f"'{name}' must not exceed {MAX_NODE_ID}")
