"""Defines the nodes of the AVL tree and the primitives that mutate the links between them."""
from __future__ import annotations

import logging
from typing import Any, Optional

from avlmap.dependency.helper import InvalidPositionError
from avlmap.dependency.types import KVPair

logger = logging.getLogger(__name__)


class AVLTreeNode:
    def __init__(self, kv_pair: KVPair, owner: Optional[NodeStore] = None):
        """
        Given a key-value pair, create a new AVL tree node.

        Each node holds the following fields:
            - Key and value, copied from the input key-value pair.
            - Height of the subtree rooted at this node; a leaf has height 0.
            - Left and right children, which the node owns.
            - Parent, a back-reference used only for walking upwards.
            - Owner, the store that created the node, and a removed flag set once the node leaves the tree.
        :param kv_pair: A KVPair containing key and value.
        :param owner: The node store this node belongs to.
        """
        self.key: Any = kv_pair.key
        self.value: Any = kv_pair.value
        self.height: int = 0
        self.left_node: Optional[AVLTreeNode] = None
        self.right_node: Optional[AVLTreeNode] = None
        self.parent: Optional[AVLTreeNode] = None
        self.owner: Optional[NodeStore] = owner
        self.removed: bool = False

    def to_kv_pair(self) -> KVPair:
        """Snapshot the entry held by this node."""
        return KVPair(key=self.key, value=self.value)

    def __repr__(self) -> str:
        return f"AVLTreeNode(key={self.key!r}, height={self.height}, removed={self.removed})"


class NodeStore:
    """
    Holds the root of a tree and the number of nodes reachable from it.

    The store only edits links and cached heights; it never checks the ordering or the balance of the tree, which is
    the job of the tree built on top of it.
    """

    def __init__(self):
        self.root: Optional[AVLTreeNode] = None
        self.size: int = 0

    @staticmethod
    def height(node: Optional[AVLTreeNode]) -> int:
        """Get the cached height of the input node; an absent node has height -1."""
        return node.height if node is not None else -1

    @staticmethod
    def recompute_height(node: AVLTreeNode) -> None:
        """Set the height of the node from the cached heights of its children."""
        node.height = 1 + max(NodeStore.height(node.left_node), NodeStore.height(node.right_node))

    @staticmethod
    def set_left(node: AVLTreeNode, child: Optional[AVLTreeNode]) -> None:
        """Attach child as the left child of node; heights are left untouched."""
        node.left_node = child
        if child is not None:
            child.parent = node

    @staticmethod
    def set_right(node: AVLTreeNode, child: Optional[AVLTreeNode]) -> None:
        """Attach child as the right child of node; heights are left untouched."""
        node.right_node = child
        if child is not None:
            child.parent = node

    def set_root(self, node: Optional[AVLTreeNode]) -> None:
        """Make node the root of the tree."""
        self.root = node
        if node is not None:
            node.parent = None

    def replace_child(self, parent: Optional[AVLTreeNode], old: AVLTreeNode, new: Optional[AVLTreeNode]) -> None:
        """
        Put new into the slot that old used to hold.

        :param parent: The parent of old; None when old was the root.
        :param old: The node being replaced.
        :param new: The node taking over the slot, possibly None.
        """
        if parent is None:
            self.set_root(new)
        elif parent.left_node is old:
            self.set_left(parent, new)
        elif parent.right_node is old:
            self.set_right(parent, new)
        else:
            raise ValueError("The provided node is not a child of the provided parent.")

    def create_node(self, kv_pair: KVPair) -> AVLTreeNode:
        """Create a new leaf owned by this store and count it."""
        self.size += 1
        return AVLTreeNode(kv_pair=kv_pair, owner=self)

    def retire_node(self, node: AVLTreeNode) -> None:
        """Mark a node that was spliced out of the tree as removed and drop its links."""
        node.removed = True
        node.parent = None
        node.left_node = None
        node.right_node = None
        self.size -= 1
        logger.debug("Retired the node holding key %r.", node.key)

    def clear(self) -> None:
        """Retire every node and empty the store."""
        stack = [self.root] if self.root is not None else []

        while stack:
            node = stack.pop()
            if node.left_node is not None:
                stack.append(node.left_node)
            if node.right_node is not None:
                stack.append(node.right_node)
            node.removed = True
            node.parent = node.left_node = node.right_node = None

        self.root = None
        self.size = 0

    def validate(self, position: Any) -> AVLTreeNode:
        """
        Check that the position is a live node of this store.

        :param position: A node previously handed out by the tree.
        :return: The same node.
        """
        if not isinstance(position, AVLTreeNode):
            raise InvalidPositionError("The provided position is not a tree node.")
        if position.owner is not self:
            raise InvalidPositionError("The provided position does not belong to this tree.")
        if position.removed:
            raise InvalidPositionError("The provided position was already removed.")
        return position
