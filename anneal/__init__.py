from __future__ import annotations

"""
路径优化算法的通用基础设施。

约定：
- 具体算法放在二级子目录下，例如 anneal/sa/core.py 实现模拟退火；
- 本包只提供点、移动、最优记录、会话等公共数据结构，
  完全不依赖任何界面或调度逻辑。
"""

from .base import AnnealSession, BestRecord, InvalidInputError, Move, Point
from .sa import AnnealingSolver

__all__ = [
    "AnnealSession",
    "AnnealingSolver",
    "BestRecord",
    "InvalidInputError",
    "Move",
    "Point",
]
