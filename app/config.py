import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


# 加载 .env 文件中的环境变量
load_dotenv()


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


@dataclass
class AnnealConfig:
    """退火求解器相关配置。

    说明：
    - width / height 是生成点集的坐标空间尺寸，同时决定优先点惩罚 width + height；
    - decay 为每次迭代的降温系数，越接近 1 迭代越多；
    - floor 为终止温度。
    均可通过环境变量 ANNEAL_WIDTH / ANNEAL_HEIGHT / ANNEAL_DECAY / ANNEAL_FLOOR 覆盖。
    """

    width: int = field(default_factory=lambda: _env_int("ANNEAL_WIDTH", 900))
    height: int = field(default_factory=lambda: _env_int("ANNEAL_HEIGHT", 500))
    decay: float = field(default_factory=lambda: _env_float("ANNEAL_DECAY", 0.99999))
    floor: float = field(default_factory=lambda: _env_float("ANNEAL_FLOOR", 1.0))


@dataclass
class HarnessConfig:
    """场景生成与后台调度相关配置。"""

    point_count: int = field(default_factory=lambda: _env_int("ANNEAL_POINT_COUNT", 40))
    # 点距离边界的最小留白
    margin: int = field(default_factory=lambda: _env_int("ANNEAL_MARGIN", 20))
    # 每次收到更优路径后的停顿（秒），用于限制重绘频率，同时也会拖慢求解
    redraw_delay: float = field(default_factory=lambda: _env_float("ANNEAL_REDRAW_DELAY", 0.1))
    max_workers: int = field(default_factory=lambda: _env_int("ANNEAL_MAX_WORKERS", 4))


def get_anneal_config() -> AnnealConfig:
    return AnnealConfig()


def get_harness_config() -> HarnessConfig:
    return HarnessConfig()
