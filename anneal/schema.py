from __future__ import annotations

"""
使用 Pydantic 对退火求解参数做基本校验。

注意：
- width / height 只用于确定“优先点不在首位”时的惩罚大小；
- decay 控制降温快慢（也就决定了迭代次数），必须落在 (0, 1) 区间；
- floor 为终止温度，温度降到 floor 及以下时循环结束。
"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class SolverParams(BaseModel):
    """退火求解器的可配置参数。"""

    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    decay: float = Field(0.99999, gt=0.0, lt=1.0)
    floor: float = Field(1.0, gt=0.0)


def validate_solver_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    使用 SolverParams 校验原始参数 dict。

    返回规整后的 dict；参数缺失或越界时抛出 ValidationError。
    """

    model = SolverParams(**params)
    return model.model_dump()
