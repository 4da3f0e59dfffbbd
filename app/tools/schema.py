from __future__ import annotations

"""
使用 Pydantic 定义外部传入“场景”的结构约束。

场景格式：
    {
        "points": [[x1, y1], [x2, y2], ...],
        "priority": [x, y]   # 可选
    }
校验通过后返回规整后的 dict，坐标统一为 int。
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


Coord = Tuple[int, int]  # (x, y)


class ScenarioInput(BaseModel):
    """一次求解所需的点集与优先点。"""

    points: List[Coord] = Field(..., min_length=1)
    priority: Optional[Coord] = None


def validate_scenario(scenario: Dict[str, Any]) -> Dict[str, Any]:
    """
    使用 ScenarioInput 对原始 dict 做格式 / 类型校验。

    点集为空、坐标不是二元组时抛出 ValidationError。
    """

    model = ScenarioInput(**scenario)
    return model.model_dump()
