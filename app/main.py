import argparse
import logging
import random
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from anneal import AnnealingSolver
from app.config import get_anneal_config, get_harness_config
from app.tools.scenario import ProgressRecorder, generate_scenario, submit_solve


PROJECT_ROOT = Path(__file__).resolve().parents[1]
LOG_DIR = PROJECT_ROOT / "logs"
KEEP_LOGS = 10

logger = logging.getLogger("anneal.app.cli")


def setup_logging(log_dir: Path = LOG_DIR, verbose: bool = False) -> Path:
    """初始化日志：每次运行一个带时间戳的日志文件，只保留最近 10 个。"""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"anneal_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    old_logs = sorted(log_dir.glob("anneal_*.log"), key=lambda p: p.stat().st_mtime, reverse=True)
    for old_log in old_logs[KEEP_LOGS - 1:]:
        try:
            old_log.unlink()
        except OSError:
            logger.warning("删除旧日志失败：%s", old_log)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8", mode="w"),
            logging.StreamHandler(),
        ],
    )
    logger.info("=== 新会话启动，日志文件：%s ===", log_file.name)
    return log_file


def _format_path(path) -> str:
    return " -> ".join(f"({p.x},{p.y})" for p in path)


def run_cli(argv: Optional[List[str]] = None) -> int:
    """命令行入口：随机生成一组点，在后台线程上求解并打印每次改进。"""
    cfg = get_anneal_config()
    hcfg = get_harness_config()

    parser = argparse.ArgumentParser(description="带优先起点的开放路径模拟退火演示")
    parser.add_argument("--points", type=int, default=hcfg.point_count, help="点的数量")
    parser.add_argument("--seed", type=int, default=None, help="随机种子")
    parser.add_argument("--decay", type=float, default=cfg.decay, help="每次迭代的降温系数")
    parser.add_argument("--delay", type=float, default=0.0, help="每次改进后的停顿秒数")
    parser.add_argument("--verbose", action="store_true", help="输出 DEBUG 日志")
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose)

    rng = random.Random(args.seed)
    points, priority = generate_scenario(
        args.points, cfg.width, cfg.height, margin=hcfg.margin, rng=rng
    )
    logger.info("已生成 %d 个点，优先点：%s", len(points), priority)

    solver = AnnealingSolver(cfg.width, cfg.height, decay=args.decay, floor=cfg.floor)

    def _print_improvement(path) -> None:
        print(f"cost={solver.cost(path, priority):.2f}  {_format_path(path)}")

    recorder = ProgressRecorder(
        cost_fn=lambda path: solver.cost(path, priority),
        redraw_delay=args.delay,
        listener=_print_improvement,
    )
    future, cancel = submit_solve(solver, points, priority, recorder, rng=rng)

    try:
        future.result()
    except KeyboardInterrupt:
        print("\n已中断，等待求解线程退出...")
        cancel.set()
        future.result()

    snapshot, cost = recorder.latest()
    if snapshot is None:
        print("初始路径已是最优，没有改进。")
    else:
        first = snapshot[0]
        print(f"最终代价：{cost:.2f}，改进次数：{recorder.count}，优先点在首位：{first == priority}")
    return 0


if __name__ == "__main__":
    raise SystemExit(run_cli())
