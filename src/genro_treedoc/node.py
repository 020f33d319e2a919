# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeDoc node class."""

from __future__ import annotations

from typing import Any, Iterator

#: Tag pattern matching every element in find_all().
ANY_TAG = '*'


class TreeDocNode:
    """An element in a TreeDocument tree.

    Each node has:
    - tag: The node's kind (non-empty, not unique among siblings)
    - attr: Dictionary of string attributes
    - text: Optional text content
    - children: Ordered list of child nodes, exclusively owned

    Nodes hold no reference to their parent: traversal is always
    root-down.

    Example:
        >>> node = TreeDocNode('user', {'id': '1'}, 'Alice')
        >>> node.tag
        'user'
        >>> node.text
        'Alice'
    """

    __slots__ = ('tag', 'attr', 'text', 'children')

    def __init__(
        self,
        tag: str,
        attr: dict[str, str] | None = None,
        text: str | None = None,
        children: list[TreeDocNode] | None = None,
    ) -> None:
        """Initialize a TreeDocNode.

        Args:
            tag: The node's tag name. Must be a non-empty string.
            attr: Optional dictionary of attributes. Values are stored
                as strings.
            text: Optional text content.
            children: Optional initial list of child nodes.

        Raises:
            ValueError: If tag is empty.
        """
        if not tag:
            raise ValueError("Node tag must be a non-empty string")
        self.tag = tag
        self.attr = {str(k): str(v) for k, v in (attr or {}).items()}
        self.text = text
        self.children = list(children) if children else []

    def __repr__(self) -> str:
        return (
            f"TreeDocNode({self.tag!r}, attr={self.attr!r}, "
            f"text={self.text!r}, children={len(self.children)})"
        )

    def __eq__(self, other: object) -> bool:
        """Structural equality: tag, attributes, text and child order.

        Empty text and no text compare equal, as markup cannot tell them apart.
        """
        if not isinstance(other, TreeDocNode):
            return NotImplemented
        return (
            self.tag == other.tag
            and self.attr == other.attr
            and (self.text or None) == (other.text or None)
            and self.children == other.children
        )

    __hash__ = None  # type: ignore[assignment]

    def __len__(self) -> int:
        """Return the number of direct children."""
        return len(self.children)

    def __iter__(self) -> Iterator[TreeDocNode]:
        """Iterate over direct children in insertion order."""
        return iter(self.children)

    @property
    def is_leaf(self) -> bool:
        """True if this node has no children."""
        return not self.children

    # ==================== Attributes ====================

    def get_attr(self, attr: str | None = None, default: Any = None) -> Any:
        """Get attribute value or all attributes.

        Args:
            attr: Attribute name. If None, returns all attributes.
            default: Default value if attribute not found.

        Returns:
            Attribute value, default, or dict of all attributes.
        """
        if attr is None:
            return self.attr
        return self.attr.get(attr, default)

    def set_attr(self, _attr: dict[str, Any] | None = None, **kwargs: Any) -> None:
        """Set attributes on the node, converting values to strings.

        Args:
            _attr: Dictionary of attributes to set.
            **kwargs: Additional attributes as keyword arguments.
        """
        if _attr:
            self.attr.update((str(k), str(v)) for k, v in _attr.items())
        self.attr.update((k, str(v)) for k, v in kwargs.items())

    # ==================== Children ====================

    def append(self, tag: str, _attr: dict[str, Any] | None = None,
               text: str | None = None, **kwargs: Any) -> TreeDocNode:
        """Create a child node, append it after existing children and return it.

        Example:
            >>> root = TreeDocNode('config')
            >>> root.append('server', host='localhost').append('port', text='80')
        """
        child = TreeDocNode(tag, text=text)
        child.set_attr(_attr, **kwargs)
        self.children.append(child)
        return child

    def iter_descendants(self) -> Iterator[TreeDocNode]:
        """Yield all descendants in document order, excluding this node."""
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def find_all(self, tag: str) -> list[TreeDocNode]:
        """Return every descendant with the given tag, in document order.

        The search covers the whole subtree, not only direct children.
        The tag '*' matches every element.
        """
        if tag == ANY_TAG:
            return list(self.iter_descendants())
        return [n for n in self.iter_descendants() if n.tag == tag]

    @property
    def text_content(self) -> str:
        """Own text followed by the text content of all descendants."""
        parts = [self.text or '']
        parts.extend(child.text_content for child in self.children)
        return ''.join(parts)
