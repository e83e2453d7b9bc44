"""Defines the AVL tree, an ordered map whose search, insertion, and deletion all take logarithmic time."""
from __future__ import annotations

import logging
from collections import deque
from typing import Any, Iterator, Optional, Tuple

from avlmap.dependency.helper import Helper, IncompatibleKeyError, InvariantViolationError
from avlmap.dependency.node_store import AVLTreeNode, NodeStore
from avlmap.dependency.types import (
    IN_ORDER, KVPair, LEVEL_ORDER, POST_ORDER, PRE_ORDER, TRAVERSAL_ORDERS, Comparator
)

logger = logging.getLogger(__name__)


class AVLTree:
    """
    Defines the AVL tree for our application.

    Keys are unique and ordered by a three-way comparator; the tree stays height balanced after every insertion and
    removal, so its height never exceeds roughly 1.44 * log2(n + 2).
    """

    def __init__(self, compare: Optional[Comparator] = None, check_invariants: bool = False):
        """
        Create an empty AVL tree.

        :param compare: A three-way comparator for keys; by default keys are compared with < and >.
        :param check_invariants: When True, every mutation checks all tree invariants before returning.
        """
        self.__compare = compare if compare is not None else Helper.compare
        self.__check_invariants = check_invariants
        self.__store = NodeStore()

    def __compare_keys(self, key_one: Any, key_two: Any) -> int:
        """
        Compare two keys, reporting keys the comparator can't order as IncompatibleKeyError.

        A comparator signals such keys by raising TypeError or AttributeError, e.g. calling a string method on an int.
        """
        try:
            return self.__compare(key_one, key_two)
        except (TypeError, AttributeError) as error:
            raise IncompatibleKeyError(f"Key {key_one!r} can't be compared with key {key_two!r}.") from error

    def __find_node(self, key: Any) -> Tuple[Optional[AVLTreeNode], Optional[AVLTreeNode], int]:
        """
        Descend from the root towards the provided key.

        :param key: The key to search for.
        :return: The node holding the key (None when absent), the last node visited before it, and the result of the
            last comparison, which tells on which side of that node the key belongs.
        """
        parent, node, result = None, self.__store.root, 0

        while node is not None:
            result = self.__compare_keys(key, node.key)
            # The key is found.
            if result == 0:
                return node, parent, result
            # Otherwise go left when the key is smaller and right when it is larger.
            parent = node
            node = node.left_node if result < 0 else node.right_node

        return None, parent, result

    @staticmethod
    def __leftmost(node: AVLTreeNode) -> AVLTreeNode:
        """Follow the left links from the node to exhaustion."""
        while node.left_node is not None:
            node = node.left_node
        return node

    @staticmethod
    def __rightmost(node: AVLTreeNode) -> AVLTreeNode:
        """Follow the right links from the node to exhaustion."""
        while node.right_node is not None:
            node = node.right_node
        return node

    @staticmethod
    def __get_balance(node: AVLTreeNode) -> int:
        """Get balance of the input node."""
        return NodeStore.height(node.left_node) - NodeStore.height(node.right_node)

    @staticmethod
    def __rotate_left(in_node: AVLTreeNode) -> AVLTreeNode:
        """
        Perform a left rotation at the provided input node.

        The caller has to splice the returned node into the slot the input node used to hold.
        :param in_node: Some AVLTreeNode to rotate.
        :return: The parent node of the rotated node.
        """
        # Save the right child of the input node as the parent node.
        p_node = in_node.right_node
        # The left child of the parent node moves to the right of the input node.
        NodeStore.set_right(in_node, p_node.left_node)
        # Now we set the input node as the left child of the parent node.
        NodeStore.set_left(p_node, in_node)

        # The input node is now the child, so its height is updated first.
        NodeStore.recompute_height(in_node)
        NodeStore.recompute_height(p_node)

        logger.debug("Rotated left at key %r.", in_node.key)
        return p_node

    @staticmethod
    def __rotate_right(in_node: AVLTreeNode) -> AVLTreeNode:
        """
        Perform a right rotation at the provided input node.

        The caller has to splice the returned node into the slot the input node used to hold.
        :param in_node: Some AVLTreeNode to rotate.
        :return: The parent node of the rotated node.
        """
        # Save the left child of the input node as the parent node.
        p_node = in_node.left_node
        # The right child of the parent node moves to the left of the input node.
        NodeStore.set_left(in_node, p_node.right_node)
        # Now we set the input node as the right child of the parent node.
        NodeStore.set_right(p_node, in_node)

        # The input node is now the child, so its height is updated first.
        NodeStore.recompute_height(in_node)
        NodeStore.recompute_height(p_node)

        logger.debug("Rotated right at key %r.", in_node.key)
        return p_node

    def __balance(self, node: AVLTreeNode) -> AVLTreeNode:
        """Re-balance a node if it is unbalanced and return the root of its subtree."""
        # Update the height of the node.
        NodeStore.recompute_height(node)
        # Get the balance factor.
        balance = self.__get_balance(node)

        # Left heavy subtree rotation.
        if balance > 1:
            left = node.left_node
            # The left-right case.
            if NodeStore.height(left.left_node) < NodeStore.height(left.right_node):
                NodeStore.set_left(node, self.__rotate_left(left))
            # The left-left case.
            return self.__rotate_right(node)

        # Right heavy subtree rotation.
        if balance < -1:
            right = node.right_node
            # The right-left case.
            if NodeStore.height(right.right_node) < NodeStore.height(right.left_node):
                NodeStore.set_right(node, self.__rotate_right(right))
            # The right-right case.
            return self.__rotate_left(node)

        return node

    def __rebalance_upwards(self, node: Optional[AVLTreeNode]) -> None:
        """Balance every node from the provided one up to the root."""
        while node is not None:
            # Save the parent before rotations move the node down.
            parent = node.parent
            balanced_node = self.__balance(node)

            # Let the parent (or the root) point to the new root of the subtree.
            if balanced_node is not node:
                self.__store.replace_child(parent, node, balanced_node)

            node = parent

    def __remove_node(self, node: AVLTreeNode) -> KVPair:
        """
        Remove the entry held by the node from the tree.

        :param node: A live node of this tree.
        :return: The removed entry.
        """
        removed = node.to_kv_pair()

        # With two children, take over the entry of the in-order predecessor and remove that node instead.
        if node.left_node is not None and node.right_node is not None:
            predecessor = self.__rightmost(node.left_node)
            node.key, node.value = predecessor.key, predecessor.value
            node = predecessor

        # The node to splice out has at most one child now.
        child = node.left_node if node.left_node is not None else node.right_node
        parent = node.parent
        self.__store.replace_child(parent, node, child)
        self.__store.retire_node(node)

        # Restore the balance from the former parent of the spliced node.
        self.__rebalance_upwards(parent)
        self.__after_mutation()

        return removed

    def __after_mutation(self) -> None:
        if self.__check_invariants:
            self.check_invariants()

    def size(self) -> int:
        """Get the number of entries in the tree."""
        return self.__store.size

    def is_empty(self) -> bool:
        """Check whether the tree holds no entry."""
        return self.__store.size == 0

    def height(self) -> int:
        """Get the height of the tree; an empty tree has height -1."""
        return NodeStore.height(self.__store.root)

    def search(self, key: Any) -> Any:
        """
        Performs a search on the provided key.

        :param key: The key to search for.
        :return: The value corresponding to the provided search key, or None when the key is absent.
        """
        node, _, _ = self.__find_node(key)
        return node.value if node is not None else None

    def get(self, key: Any, default: Any = None) -> Any:
        """Get the value of the key, or default when the key is absent."""
        node, _, _ = self.__find_node(key)
        return node.value if node is not None else default

    def insert(self, key: Any, value: Any) -> Any:
        """
        Insert a key-value pair into the tree.

        When the key already exists, only its value is replaced and the shape of the tree doesn't change.
        :param key: The key to insert.
        :param value: The value to store with the key.
        :return: The previous value of the key, or None when the key is new.
        """
        node, parent, result = self.__find_node(key)

        # Replace the value in place.
        if node is not None:
            old_value, node.value = node.value, value
            return old_value

        # The first key of an empty tree meets no other key, so check it can be ordered against itself.
        if parent is None:
            self.__compare_keys(key, key)

        # Attach a new leaf at the empty slot where the search ended.
        new_node = self.__store.create_node(KVPair(key=key, value=value))
        if parent is None:
            self.__store.set_root(new_node)
        elif result < 0:
            NodeStore.set_left(parent, new_node)
        else:
            NodeStore.set_right(parent, new_node)

        # Rebalance the tree from the parent of the new leaf up to the root.
        self.__rebalance_upwards(parent)
        self.__after_mutation()

        return None

    def remove(self, key: Any) -> Any:
        """
        Remove a key from the tree; removing an absent key does nothing.

        :param key: The key to remove.
        :return: The value the key held, or None when the key is absent.
        """
        node, _, _ = self.__find_node(key)

        if node is None:
            return None

        return self.__remove_node(node).value

    def min(self) -> Optional[KVPair]:
        """Get the entry with the smallest key, or None when the tree is empty."""
        if self.__store.root is None:
            return None
        return self.__leftmost(self.__store.root).to_kv_pair()

    def max(self) -> Optional[KVPair]:
        """Get the entry with the largest key, or None when the tree is empty."""
        if self.__store.root is None:
            return None
        return self.__rightmost(self.__store.root).to_kv_pair()

    def clear(self) -> None:
        """Remove every entry; positions handed out before become invalid."""
        self.__store.clear()

    def iterate(self, order: str = IN_ORDER) -> Iterator[KVPair]:
        """
        Walk the tree lazily in the provided order.

        Only the in-order walk yields keys in sorted order. Each call starts a new walk; the tree must not be modified
        while a walk is in progress.
        :param order: One of PRE_ORDER, IN_ORDER, POST_ORDER, and LEVEL_ORDER.
        :return: An iterator of KVPairs.
        """
        if order not in TRAVERSAL_ORDERS:
            raise ValueError("The provided order is not valid.")

        if order == LEVEL_ORDER:
            return self.__walk_levels(self.__store.root)
        return self.__walk(self.__store.root, order)

    @staticmethod
    def __walk(root: Optional[AVLTreeNode], order: str) -> Iterator[KVPair]:
        # Each entry holds a node and whether it is due to be visited, rather than expanded into its children.
        stack = [(root, False)] if root is not None else []

        while stack:
            node, visit = stack.pop()
            if visit:
                yield node.to_kv_pair()
                continue

            # Push in the reverse of the visiting order.
            if order == POST_ORDER:
                stack.append((node, True))
            if node.right_node is not None:
                stack.append((node.right_node, False))
            if order == IN_ORDER:
                stack.append((node, True))
            if node.left_node is not None:
                stack.append((node.left_node, False))
            if order == PRE_ORDER:
                stack.append((node, True))

    @staticmethod
    def __walk_levels(root: Optional[AVLTreeNode]) -> Iterator[KVPair]:
        # Nodes waiting to be visited, in first-in-first-out order.
        queue = deque([root] if root is not None else [])

        while queue:
            node = queue.popleft()
            yield node.to_kv_pair()
            if node.left_node is not None:
                queue.append(node.left_node)
            if node.right_node is not None:
                queue.append(node.right_node)

    def keys(self) -> Iterator[Any]:
        """Iterate over the keys in sorted order."""
        return (kv_pair.key for kv_pair in self.iterate(IN_ORDER))

    def values(self) -> Iterator[Any]:
        """Iterate over the values in the sorted order of their keys."""
        return (kv_pair.value for kv_pair in self.iterate(IN_ORDER))

    def items(self) -> Iterator[Tuple[Any, Any]]:
        """Iterate over the (key, value) tuples in sorted order."""
        return (kv_pair.to_tuple() for kv_pair in self.iterate(IN_ORDER))

    def find_position(self, key: Any) -> Optional[AVLTreeNode]:
        """Get the node holding the key, or None when the key is absent."""
        node, _, _ = self.__find_node(key)
        return node

    def first_position(self) -> Optional[AVLTreeNode]:
        """Get the node holding the smallest key."""
        return self.__leftmost(self.__store.root) if self.__store.root is not None else None

    def last_position(self) -> Optional[AVLTreeNode]:
        """Get the node holding the largest key."""
        return self.__rightmost(self.__store.root) if self.__store.root is not None else None

    def entry_at(self, position: AVLTreeNode) -> KVPair:
        """Get the entry held at the position."""
        return self.__store.validate(position).to_kv_pair()

    def replace_at(self, position: AVLTreeNode, value: Any) -> Any:
        """
        Replace the value held at the position.

        :param position: A node of this tree.
        :param value: The new value.
        :return: The old value.
        """
        node = self.__store.validate(position)
        old_value, node.value = node.value, value
        return old_value

    def remove_at(self, position: AVLTreeNode) -> KVPair:
        """
        Remove the entry held at the position.

        When the node has two children, the entry of its in-order predecessor moves into it and the predecessor's
        node is the one that becomes invalid.
        :param position: A node of this tree.
        :return: The removed entry.
        """
        return self.__remove_node(self.__store.validate(position))

    def successor(self, position: AVLTreeNode) -> Optional[AVLTreeNode]:
        """Get the node holding the next larger key, or None when the position holds the largest key."""
        node = self.__store.validate(position)

        if node.right_node is not None:
            return self.__leftmost(node.right_node)

        # Climb until we leave a left subtree.
        while node.parent is not None and node.parent.right_node is node:
            node = node.parent
        return node.parent

    def predecessor(self, position: AVLTreeNode) -> Optional[AVLTreeNode]:
        """Get the node holding the next smaller key, or None when the position holds the smallest key."""
        node = self.__store.validate(position)

        if node.left_node is not None:
            return self.__rightmost(node.left_node)

        # Climb until we leave a right subtree.
        while node.parent is not None and node.parent.left_node is node:
            node = node.parent
        return node.parent

    def check_invariants(self) -> None:
        """
        Walk the whole tree and raise InvariantViolationError if any of the following is broken:
            - Every key in a left subtree is smaller, and every key in a right subtree larger, than the node's key.
            - Heights of the two children of every node differ by at most one.
            - Every cached height equals one more than the larger height of the children.
            - The counted size equals the number of reachable nodes.
            - Every child points back at its parent and the root has no parent.
        """
        root = self.__store.root

        if root is not None and root.parent is not None:
            self.__fail("The root has a parent.")

        _, count = self.__check_subtree(root, None, None)

        if count != self.__store.size:
            self.__fail(f"The tree counts {self.__store.size} entries but {count} nodes are reachable.")

    def __check_subtree(
            self, node: Optional[AVLTreeNode], low: Optional[AVLTreeNode], high: Optional[AVLTreeNode]
    ) -> Tuple[int, int]:
        """Check the subtree rooted at node, whose keys must lie strictly between low and high; return its height
        and its number of nodes."""
        if node is None:
            return -1, 0

        if node.removed or node.owner is not self.__store:
            self.__fail(f"The node holding key {node.key!r} is not a live node of this tree.")
        if low is not None and self.__compare_keys(node.key, low.key) <= 0:
            self.__fail(f"Key {node.key!r} is not larger than key {low.key!r}.")
        if high is not None and self.__compare_keys(node.key, high.key) >= 0:
            self.__fail(f"Key {node.key!r} is not smaller than key {high.key!r}.")

        for child in (node.left_node, node.right_node):
            if child is not None and child.parent is not node:
                self.__fail(f"The child holding key {child.key!r} doesn't point back at its parent.")

        left_height, left_count = self.__check_subtree(node.left_node, low, node)
        right_height, right_count = self.__check_subtree(node.right_node, node, high)

        if node.height != 1 + max(left_height, right_height):
            self.__fail(f"The node holding key {node.key!r} caches a wrong height {node.height}.")
        if abs(left_height - right_height) > 1:
            self.__fail(f"The node holding key {node.key!r} is unbalanced.")

        return node.height, left_count + right_count + 1

    @staticmethod
    def __fail(message: str) -> None:
        logger.error(message)
        raise InvariantViolationError(message)

    def __len__(self) -> int:
        return self.__store.size

    def __contains__(self, key: Any) -> bool:
        return self.find_position(key) is not None

    def __iter__(self) -> Iterator[Any]:
        return self.keys()

    def __getitem__(self, key: Any) -> Any:
        node = self.find_position(key)
        if node is None:
            raise KeyError(f"Key {key} not found.")
        return node.value

    def __setitem__(self, key: Any, value: Any) -> None:
        self.insert(key=key, value=value)

    def __delitem__(self, key: Any) -> None:
        node = self.find_position(key)
        if node is None:
            raise KeyError(f"Key {key} not found.")
        self.__remove_node(node)

    def __repr__(self) -> str:
        return f"AVLTree(size={self.size()}, height={self.height()})"
