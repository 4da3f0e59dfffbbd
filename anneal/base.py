from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from typing import List, Optional, Tuple


class InvalidInputError(ValueError):
    """求解输入不合法（例如点集为空）。"""


@dataclass(frozen=True)
class Point:
    """二维整数坐标点，按值比较相等。"""

    x: int
    y: int

    def distance(self, other: "Point") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)


@dataclass(frozen=True)
class Move:
    """一次邻域移动：交换了路径中 i、j 两个位置的内容。"""

    i: int
    j: int


@dataclass(frozen=True)
class BestRecord:
    """
    当前已知的最优路径及其代价。

    说明：
    - path 为元组，是独立于工作状态的快照；
    - 每发现一次更优解就整体替换，不会原地修改。
    """

    path: Tuple[Point, ...]
    cost: float


@dataclass
class AnnealSession:
    """
    一次退火求解的“会话”状态。

    说明：
    - current_path：工作状态（PathState），在迭代中原地交换；
    - current_cost：当前被接受状态的代价；
    - best：历史最优记录（只会单调下降）；
    - T / T_floor / alpha：温度、终止温度与降温系数；
    - priority：希望排在第一个位置的点，None 表示不设优先点。
    """

    session_id: str
    current_path: List[Point]
    current_cost: float
    best: BestRecord
    priority: Optional[Point]
    width: int
    height: int
    T: float
    T_floor: float = 1.0
    alpha: float = 0.99999
    iter: int = 0
    improvements: int = 0
    cancelled: bool = False

    @property
    def size(self) -> int:
        return len(self.current_path)

    @property
    def penalty(self) -> int:
        """优先点不在首位时的惩罚值：比任何可能的路径长度都大。"""
        return self.width + self.height


def new_session_id() -> str:
    """生成简短的会话 ID。"""
    return uuid.uuid4().hex[:8]


def as_point(value) -> Point:
    """把 Point / (x, y) / [x, y] 统一转换为 Point。"""
    if isinstance(value, Point):
        return value
    x, y = value
    return Point(int(x), int(y))


def as_points(values) -> List[Point]:
    return [as_point(v) for v in values]
