"""
工具模块

包含日志初始化函数 :func:`setup_logging` 与 :class:`ThermoCollector`。
后者在内存中记录模拟过程中的热力学观测量，并给出均值、标准差、RMSE 等统计。
"""

import logging
import os

import numpy as np

logger = logging.getLogger(__name__)


def setup_logging(output_dir: str | None = None, level: int = logging.INFO) -> None:
    """配置根日志记录器

    Parameters
    ----------
    output_dir : str | None, optional
        若提供，则在该目录下额外写入 ``run.log``（DEBUG 级别）
    level : int, optional
        控制台日志级别，默认 INFO
    """
    root = logging.getLogger()
    root.setLevel(level)
    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    # 控制台 handler：若不存在则添加，存在则调到期望级别
    has_stream = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in root.handlers
    )
    if not has_stream:
        sh = logging.StreamHandler()
        sh.setLevel(level)
        sh.setFormatter(fmt)
        root.addHandler(sh)
    else:
        for h in root.handlers:
            if isinstance(h, logging.StreamHandler) and not isinstance(
                h, logging.FileHandler
            ):
                h.setLevel(level)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        fh = logging.FileHandler(
            os.path.join(output_dir, "run.log"), mode="w", encoding="utf-8"
        )
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        root.addHandler(fh)


class ThermoCollector:
    """
    热力学观测量收集器

    每次 :meth:`collect` 记录一行 ``simulator.thermo_snapshot()``。

    Parameters
    ----------
    capacity : int, optional
        最多保留的行数，超出后丢弃最早的记录；None 表示无限制
    """

    def __init__(self, capacity: int | None = None):
        if capacity is not None and capacity < 1:
            raise ValueError(f"容量必须至少为 1，得到 {capacity}")
        self.rows: list[dict] = []
        self._capacity = capacity
        logger.debug(f"Initialized ThermoCollector with capacity={capacity}")

    def __len__(self) -> int:
        return len(self.rows)

    def collect(self, simulator) -> dict:
        """记录模拟器当前状态并返回该行"""
        row = simulator.thermo_snapshot()
        if self._capacity and len(self.rows) >= self._capacity:
            self.rows.pop(0)
        self.rows.append(row)
        return row

    def series(self, key: str) -> np.ndarray:
        """某一观测量的时间序列"""
        if self.rows and key not in self.rows[0]:
            raise KeyError(f"未知观测量: {key}")
        return np.array([row[key] for row in self.rows], dtype=np.float64)

    def statistics(self, key: str, skip: int = 0) -> dict:
        """均值与标准差

        Parameters
        ----------
        key : str
            观测量名称，如 ``"T_K"``
        skip : int, optional
            跳过前若干行（平衡段）

        Returns
        -------
        dict
            ``mean``、``std``、``count``
        """
        values = self.series(key)[skip:]
        if values.size == 0:
            return {"mean": float("nan"), "std": float("nan"), "count": 0}
        return {
            "mean": float(np.mean(values)),
            "std": float(np.std(values)),
            "count": int(values.size),
        }

    def rmse(self, key: str, target: float, skip: int = 0) -> float:
        """相对目标值的均方根误差"""
        values = self.series(key)[skip:]
        if values.size == 0:
            return float("nan")
        return float(np.sqrt(np.mean((values - target) ** 2)))

    def clear(self) -> None:
        self.rows.clear()
