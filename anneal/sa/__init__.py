from __future__ import annotations

"""
模拟退火（Simulated Annealing, SA）路径求解。

本模块只负责 SA 的数学细节：
- 代价函数（开放路径长度 + 优先起点惩罚）；
- 邻域移动（随机交换两个位置）与回滚；
- 接受准则、几何降温与改进回调。

不涉及点集生成、绘制或后台调度。
"""

from .core import (
    AnnealingSolver,
    create_session,
    mutate,
    path_cost,
    rollback,
    run_session,
    transition_probability,
)

__all__ = [
    "AnnealingSolver",
    "create_session",
    "mutate",
    "path_cost",
    "rollback",
    "run_session",
    "transition_probability",
]
