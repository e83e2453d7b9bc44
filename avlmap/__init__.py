from avlmap.dependency import (
    IN_ORDER, LEVEL_ORDER, POST_ORDER, PRE_ORDER, AVLTree, IncompatibleKeyError, InvalidPositionError,
    InvariantViolationError, KVPair
)
