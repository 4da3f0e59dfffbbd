from __future__ import annotations

import logging
import math
import random
import threading
import time
from typing import Callable, List, MutableSequence, Optional, Sequence, Tuple

from anneal.base import (
    AnnealSession,
    BestRecord,
    InvalidInputError,
    Move,
    Point,
    as_point,
    as_points,
    new_session_id,
)
from anneal.schema import validate_solver_params


logger = logging.getLogger("anneal.sa")

ImprovementCallback = Callable[[Tuple[Point, ...]], None]


def path_cost(path: Sequence[Point], priority: Optional[Point], penalty: float) -> float:
    """
    计算开放路径的代价。

    代价 = 惩罚项 + 相邻点之间欧氏距离之和；
    - 首个点等于 priority 时惩罚为 0，否则为 penalty；
    - 不计算最后一个点回到起点的那条边。
    """
    previous = path[0]
    cost = 0.0 if priority is not None and previous == priority else float(penalty)
    for current in path[1:]:
        cost += current.distance(previous)
        previous = current
    return cost


def mutate(path: MutableSequence[Point], rng: Optional[random.Random] = None) -> Move:
    """随机选择两个不同位置并原地交换，返回对应的 Move。"""
    rng = rng or random
    size = len(path)
    i = rng.randrange(size)
    j = rng.randrange(size)
    while j == i:
        j = rng.randrange(size)
    path[i], path[j] = path[j], path[i]
    return Move(i, j)


def rollback(path: MutableSequence[Point], move: Move) -> None:
    """撤销一次移动。交换是自逆的，所以再交换一次即可。"""
    path[move.i], path[move.j] = path[move.j], path[move.i]


def transition_probability(delta: float, T: float) -> float:
    """Metropolis 接受概率 exp(-delta / T)。"""
    return math.exp(-delta / T)


def create_session(
    points: Sequence,
    priority,
    width: int,
    height: int,
    decay: float = 0.99999,
    floor: float = 1.0,
    rng: Optional[random.Random] = None,
) -> AnnealSession:
    """
    创建一次求解会话：复制并随机打乱输入点集，作为初始状态。

    说明：
    - 初始温度 T 直接取初始状态的代价，不是单独的参数；
    - 最优记录以初始状态为种子，此时不会触发回调；
    - priority 不在点集中时不报错，只记录警告（此时惩罚项始终存在）。
    """
    if not points:
        raise InvalidInputError("points 必须是非空的点序列。")

    params = validate_solver_params(
        {"width": width, "height": height, "decay": decay, "floor": floor}
    )
    rng = rng or random.Random()

    current: List[Point] = as_points(points)
    priority_point = as_point(priority) if priority is not None else None
    if priority_point is not None and priority_point not in current:
        logger.warning("优先点 %s 不在点集中，将始终计入惩罚项。", priority_point)

    rng.shuffle(current)
    penalty = params["width"] + params["height"]
    cost = path_cost(current, priority_point, penalty)

    sess = AnnealSession(
        session_id=new_session_id(),
        current_path=current,
        current_cost=cost,
        best=BestRecord(tuple(current), cost),
        priority=priority_point,
        width=params["width"],
        height=params["height"],
        T=cost,
        T_floor=params["floor"],
        alpha=params["decay"],
    )
    logger.info(
        "退火会话创建成功：session_id=%s, size=%d, T0=%.4g, alpha=%s, floor=%s",
        sess.session_id,
        sess.size,
        sess.T,
        sess.alpha,
        sess.T_floor,
    )
    return sess


def _report_improvement(sess: AnnealSession, on_improvement: ImprovementCallback) -> None:
    try:
        on_improvement(sess.best.path)
    except Exception:
        logger.exception(
            "改进回调执行失败，求解终止：session_id=%s, iter=%d",
            sess.session_id,
            sess.iter,
        )
        raise


def run_session(
    sess: AnnealSession,
    on_improvement: ImprovementCallback,
    rng: Optional[random.Random] = None,
    cancel: Optional[threading.Event] = None,
) -> AnnealSession:
    """
    在已创建的会话上执行退火主循环，直到温度降到 T_floor 及以下。

    说明：
    - 每次严格改进最优记录时，同步调用 on_improvement(快照)；
      回调在求解线程上执行，回调越慢，求解越慢；
    - 回调抛出的异常不会被吞掉，会直接传给调用方；
    - cancel 被置位后，在下一次迭代开始前立即返回，
      最后一次回调给出的路径即为可用结果。
    """
    rng = rng or random.Random()
    path = sess.current_path
    start = time.perf_counter()

    if sess.size < 2:
        logger.info("点数不足 2 个，无可用的邻域移动：session_id=%s", sess.session_id)
        return sess

    T = sess.T
    while T > sess.T_floor:
        if cancel is not None and cancel.is_set():
            sess.cancelled = True
            logger.info("退火求解已取消：session_id=%s, iter=%d", sess.session_id, sess.iter)
            break

        move = mutate(path, rng)
        candidate_cost = path_cost(path, sess.priority, sess.penalty)
        delta = candidate_cost - sess.current_cost
        if delta < 0:
            sess.current_cost = candidate_cost
            if candidate_cost < sess.best.cost:
                sess.best = BestRecord(tuple(path), candidate_cost)
                sess.improvements += 1
                logger.debug(
                    "发现更优路径：session_id=%s, iter=%d, cost=%.4f, T=%.4g",
                    sess.session_id,
                    sess.iter,
                    candidate_cost,
                    T,
                )
                _report_improvement(sess, on_improvement)
        elif transition_probability(delta, T) > rng.random():
            # 接受较差解作为当前解，期望借此跳出局部最优
            sess.current_cost = candidate_cost
        else:
            rollback(path, move)

        T *= sess.alpha
        sess.iter += 1

    sess.T = T
    logger.info(
        "退火求解结束：session_id=%s, %.3f secs, iter=%d, improvements=%d, best_cost=%.4f",
        sess.session_id,
        time.perf_counter() - start,
        sess.iter,
        sess.improvements,
        sess.best.cost,
    )
    return sess


class AnnealingSolver:
    """
    带“优先起点”偏好的开放路径模拟退火求解器。

    width / height 是生成点集所用坐标空间的边界尺寸，
    仅用于确定优先点不在首位时的惩罚大小（width + height）。
    """

    def __init__(
        self,
        width: int,
        height: int,
        decay: float = 0.99999,
        floor: float = 1.0,
    ) -> None:
        params = validate_solver_params(
            {"width": width, "height": height, "decay": decay, "floor": floor}
        )
        self.width = params["width"]
        self.height = params["height"]
        self.decay = params["decay"]
        self.floor = params["floor"]

    @property
    def penalty(self) -> int:
        return self.width + self.height

    def cost(self, path: Sequence[Point], priority: Optional[Point]) -> float:
        return path_cost(path, priority, self.penalty)

    def solve(
        self,
        points: Sequence,
        priority,
        on_improvement: ImprovementCallback,
        rng: Optional[random.Random] = None,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        """
        对 points 求解，结果只通过 on_improvement 回调给出。

        调用方需要自己保留最后一次回调的快照，它就是最终答案；
        初始状态已经最优时不会有任何回调。
        """
        rng = rng or random.Random()
        sess = create_session(
            points,
            priority,
            width=self.width,
            height=self.height,
            decay=self.decay,
            floor=self.floor,
            rng=rng,
        )
        run_session(sess, on_improvement, rng=rng, cancel=cancel)
