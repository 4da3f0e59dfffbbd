from __future__ import annotations

import logging
import random
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from anneal import AnnealingSolver, Point
from app.config import AnnealConfig, HarnessConfig, get_anneal_config, get_harness_config

from .schema import validate_scenario


logger = logging.getLogger("anneal.app.scenario")

_EXECUTOR: Optional[ThreadPoolExecutor] = None
_EXECUTOR_LOCK = threading.Lock()


def get_executor(max_workers: Optional[int] = None) -> ThreadPoolExecutor:
    """获取全局共享的后台线程池（首次调用时创建）。"""
    global _EXECUTOR
    with _EXECUTOR_LOCK:
        if _EXECUTOR is None:
            workers = max_workers or get_harness_config().max_workers
            _EXECUTOR = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="anneal")
            logger.info("已创建后台求解线程池：max_workers=%d", workers)
        return _EXECUTOR


def generate_scenario(
    point_count: int,
    width: int,
    height: int,
    margin: int = 20,
    rng: Optional[random.Random] = None,
) -> Tuple[List[Point], Point]:
    """
    随机生成一组点，并从中随机选一个作为优先点。

    坐标在 [margin, width - margin) × [margin, height - margin) 内均匀取整数。
    """
    if point_count < 1:
        raise ValueError("point_count 必须 >= 1。")
    if width <= 2 * margin or height <= 2 * margin:
        raise ValueError(
            f"坐标空间 {width}x{height} 放不下 margin={margin} 的留白。"
        )

    rng = rng or random.Random()
    points = [
        Point(
            margin + rng.randrange(width - 2 * margin),
            margin + rng.randrange(height - 2 * margin),
        )
        for _ in range(point_count)
    ]
    priority = points[rng.randrange(point_count)]
    return points, priority


class ProgressRecorder:
    """
    记录求解过程中最新一次“更优路径”快照的回调对象。

    注意：
    - 回调在求解线程上同步执行，其他线程读取时请用 latest()；
    - redraw_delay > 0 时每次回调都会停顿，用于限制下游重绘频率，
      代价是求解整体变慢；
    - listener 可选，用于把快照转交给界面等需要切换线程的组件，
      切换线程由 listener 自己负责。
    """

    def __init__(
        self,
        cost_fn: Optional[Callable[[Sequence[Point]], float]] = None,
        redraw_delay: float = 0.0,
        listener: Optional[Callable[[Tuple[Point, ...]], None]] = None,
    ) -> None:
        self._cost_fn = cost_fn
        self._redraw_delay = redraw_delay
        self._listener = listener
        self._lock = threading.Lock()
        self.snapshot: Optional[Tuple[Point, ...]] = None
        self.cost: Optional[float] = None
        self.count = 0

    def __call__(self, snapshot: Tuple[Point, ...]) -> None:
        cost = self._cost_fn(snapshot) if self._cost_fn is not None else None
        with self._lock:
            self.snapshot = tuple(snapshot)
            self.cost = cost
            self.count += 1
        if self._listener is not None:
            self._listener(self.snapshot)
        if self._redraw_delay > 0:
            time.sleep(self._redraw_delay)

    def latest(self) -> Tuple[Optional[Tuple[Point, ...]], Optional[float]]:
        with self._lock:
            return self.snapshot, self.cost


def submit_solve(
    solver: AnnealingSolver,
    points: Sequence[Point],
    priority: Optional[Point],
    on_improvement: Callable[[Tuple[Point, ...]], None],
    rng: Optional[random.Random] = None,
    executor: Optional[ThreadPoolExecutor] = None,
) -> Tuple[Future, threading.Event]:
    """
    把一次求解提交到后台线程池。

    返回 (future, cancel)：
    - future.result() 在求解结束后返回 None，回调异常也会从这里抛出；
    - cancel.set() 可以协作式地提前结束求解。
    """
    cancel = threading.Event()
    pool = executor or get_executor()
    # 复制一份点集，求解期间调用方对原列表的修改不会影响本次求解
    future = pool.submit(
        solver.solve,
        list(points),
        priority,
        on_improvement,
        rng=rng,
        cancel=cancel,
    )
    logger.info("已提交后台求解：size=%d, priority=%s", len(points), priority)
    return future, cancel


def run_scenario_safe(
    scenario: Dict[str, Any],
    anneal_config: Optional[AnnealConfig] = None,
    harness_config: Optional[HarnessConfig] = None,
    seed: Optional[int] = None,
    timeout: Optional[float] = None,
    listener: Optional[Callable[[Tuple[Point, ...]], None]] = None,
) -> Dict[str, Any]:
    """
    对调用方友好的求解接口：校验场景、后台求解并等待结束。

    返回
    ----
    - 成功：
        {
            "success": True,
            "best_path": [[x, y], ...] 或 None（初始状态即最优时没有回调）,
            "best_cost": float 或 None,
            "improvements": int,
            "cancelled": bool,      # 超过 timeout 被取消时为 True
        }
    - 失败：
        {"success": False, "error": "<人类可读的错误信息>"}
    """
    try:
        data = validate_scenario(scenario)
        cfg = anneal_config or get_anneal_config()
        hcfg = harness_config or get_harness_config()

        solver = AnnealingSolver(
            width=cfg.width, height=cfg.height, decay=cfg.decay, floor=cfg.floor
        )
        points = [Point(x, y) for x, y in data["points"]]
        priority = Point(*data["priority"]) if data["priority"] is not None else None

        recorder = ProgressRecorder(
            cost_fn=lambda path: solver.cost(path, priority),
            redraw_delay=hcfg.redraw_delay,
            listener=listener,
        )
        rng = random.Random(seed) if seed is not None else None
        future, cancel = submit_solve(solver, points, priority, recorder, rng=rng)

        cancelled = False
        try:
            future.result(timeout=timeout)
        except FutureTimeoutError:
            logger.info("求解超过 %.3g 秒，发送取消信号。", timeout)
            cancel.set()
            future.result()
            cancelled = True

        snapshot, cost = recorder.latest()
        return {
            "success": True,
            "best_path": [[p.x, p.y] for p in snapshot] if snapshot is not None else None,
            "best_cost": cost,
            "improvements": recorder.count,
            "cancelled": cancelled,
        }
    except Exception as exc:  # noqa: BLE001
        logger.exception("场景求解失败：%s", exc)
        return {
            "success": False,
            "error": f"场景求解失败: {exc}",
        }
