from avlmap.dependency.avl_tree import AVLTree
from avlmap.dependency.helper import Helper, IncompatibleKeyError, InvalidPositionError, InvariantViolationError
from avlmap.dependency.node_store import AVLTreeNode, NodeStore
from avlmap.dependency.types import IN_ORDER, KVPair, LEVEL_ORDER, POST_ORDER, PRE_ORDER, TRAVERSAL_ORDERS, Comparator
