"""
Image processing: the undo/redo operation history and the filters it drives
"""

from .history import Operation, OperationState, OperationHistory, LEVEL_OPERATIONS
from .image_ops import apply_operations, to_bgr, to_gray, adaptive_block_size

__all__ = [
    'Operation',
    'OperationState',
    'OperationHistory',
    'LEVEL_OPERATIONS',
    'apply_operations',
    'to_bgr',
    'to_gray',
    'adaptive_block_size'
]
