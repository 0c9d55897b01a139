"""配置加载模块

提供轻量的 YAML 配置加载，以及模拟参数数据类：

- 递归合并多份 YAML（后者覆盖前者）
- 点路径访问（如 ``md.timestep``）
- 统一设置随机种子（numpy/random）
- 基于模板创建输出目录并保存配置快照
- :class:`SimulationConfig` 汇总一次模拟所需的全部参数

配置键
------
``lattice.nc``, ``lattice.scale``, ``md.temperature`` (K), ``md.ensemble``
(``"nve"``/``"nvt"``), ``md.timestep``, ``potential.cutoff``,
``potential.image_shells``, ``thermostat.alpha``, ``rng.global_seed``,
``parallel.num_threads``。缺省值取自 :data:`argonmd.core.constants.CONSTANTS`。
"""

from __future__ import annotations

import datetime as _dt
import json
import logging
import math
import os
import random as _random
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import numpy as np
import yaml

from argonmd.core.constants import CONSTANTS
from argonmd.core.structure import EnsembleType

logger = logging.getLogger(__name__)


def _deep_update(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_update(out[k], v)
        else:
            out[k] = v
    return out


def _get_by_path(d: dict, path: str, default: Any = None) -> Any:
    cur = d
    for key in path.split("."):
        if not isinstance(cur, dict) or key not in cur:
            return default
        cur = cur[key]
    return cur


@dataclass
class _Resolved:
    data: dict
    sources: list[str]


class ConfigManager:
    """配置管理器

    加载一组 YAML 配置文件并进行递归合并，提供点路径访问与常用工具。

    Parameters
    ----------
    files : Iterable[str] | None, optional
        需要加载的 YAML 文件列表，后者覆盖前者；不存在的文件被跳过并记录警告。
        若为 ``None`` 则只构建空配置。

    Attributes
    ----------
    data : dict
        合并后的配置数据（只读属性 ``.data`` 暴露内部字典）。
    """

    def __init__(self, files: Iterable[str] | None = None) -> None:
        self._resolved = self._load_all(files)

    # --------- 加载与解析 ---------
    def _load_all(self, files: Iterable[str] | None) -> _Resolved:
        data: dict[str, Any] = {}
        sources: list[str] = []
        for p in files or ():
            path = Path(p)
            if not path.exists():
                logger.warning(f"配置文件不存在，已跳过: {path}")
                continue
            with open(path, encoding="utf-8") as f:
                ov = yaml.safe_load(f) or {}
            if not isinstance(ov, dict):
                raise ValueError(f"配置文件顶层必须是映射: {path}")
            data = _deep_update(data, ov)
            sources.append(str(path))
        return _Resolved(data=data, sources=sources)

    @property
    def data(self) -> dict:
        """获取合并后的配置数据字典。"""
        return self._resolved.data

    @property
    def sources(self) -> list[str]:
        """实际加载的配置文件列表。"""
        return list(self._resolved.sources)

    # --------- 访问接口 ---------
    def get(self, path: str, default: Any | None = None) -> Any:
        """获取配置值（点路径）

        使用 ``a.b.c`` 形式访问嵌套字典，若不存在则返回 ``default``。

        Parameters
        ----------
        path : str
            点路径键名，例如 ``"md.timestep"``。
        default : Any, optional
            当键不存在时返回的默认值。

        Returns
        -------
        Any
            对应的配置值或 ``default``。
        """
        return _get_by_path(self._resolved.data, path, default)

    # --------- 实用工具 ---------
    def set_global_seed(self, seed: int | None = None) -> int:
        """统一设置随机种子

        同时设置 ``numpy.random`` 与 Python ``random`` 的种子，以增强可复现性。

        Parameters
        ----------
        seed : int | None, optional
            若为 ``None``，则读取 ``rng.global_seed``（默认 42）。

        Returns
        -------
        int
            实际使用的种子值。
        """
        if seed is None:
            seed = int(self.get("rng.global_seed", 42))
        np.random.seed(seed)
        _random.seed(seed)
        return seed

    def make_output_dir(self, name: str | None = None) -> str:
        """创建输出目录

        依据模板 ``run.output_dir`` 创建目录，支持 ``{name}`` 与 ``{timestamp}`` 占位符。
        若未配置，默认使用 ``logs/{name}_{timestamp}``。

        Parameters
        ----------
        name : str | None, optional
            运行名；若为 ``None``，则读取 ``run.name``（默认 ``"run"``）。

        Returns
        -------
        str
            创建的输出目录路径。
        """
        pattern = str(self.get("run.output_dir", "logs/{name}_{timestamp}"))
        name = name or str(self.get("run.name", "run"))
        ts = _dt.datetime.now().strftime("%Y%m%d_%H%M%S")
        out = pattern.format(name=name, timestamp=ts)
        os.makedirs(out, exist_ok=True)
        return out

    def snapshot(self, output_dir: str) -> None:
        """保存配置快照

        在输出目录写入 ``resolved_config.yaml`` 与轻量 ``manifest.json``，
        记录本次运行所使用的配置来源与时间戳。

        Parameters
        ----------
        output_dir : str
            输出目录路径。
        """
        path = Path(output_dir) / "resolved_config.yaml"
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self._resolved.data, f, allow_unicode=True, sort_keys=True)
        manifest = {
            "timestamp": _dt.datetime.now().isoformat(),
            "sources": self._resolved.sources,
        }
        with open(Path(output_dir) / "manifest.json", "w", encoding="utf-8") as f:
            json.dump(manifest, f, indent=2, ensure_ascii=False)


def parse_ensemble(value) -> EnsembleType:
    """将字符串或整数解析为 :class:`EnsembleType`

    Raises
    ------
    ValueError
        无法识别的系综
    """
    if isinstance(value, EnsembleType):
        return value
    if isinstance(value, str):
        key = value.strip().upper()
        if key in EnsembleType.__members__:
            return EnsembleType[key]
        raise ValueError(f"未知系综: {value!r}，可选 'nve' 或 'nvt'")
    try:
        return EnsembleType(value)
    except ValueError:
        raise ValueError(f"未知系综: {value!r}，可选 'nve' 或 'nvt'") from None


@dataclass(frozen=True)
class SimulationConfig:
    """一次模拟的参数集合

    Parameters
    ----------
    nc : int
        超胞重复数
    scale : float
        晶格常数缩放因子
    temperature : float
        目标温度 (K)
    ensemble : EnsembleType
        系综
    dt : float
        时间步长（约化单位）
    cutoff : float
        截断半径（约化单位）
    alpha : float
        Woodcock 阻尼系数
    image_shells : int
        周期镜像壳层数
    seed : int | None
        初速度随机种子
    num_threads : int | None
        numba 线程数，``None`` 为默认
    """

    nc: int = CONSTANTS.FIRSTNC
    scale: float = CONSTANTS.FIRSTSCALE
    temperature: float = CONSTANTS.FIRSTTEMP
    ensemble: EnsembleType = EnsembleType.NVT
    dt: float = CONSTANTS.DT
    cutoff: float = CONSTANTS.RC
    alpha: float = CONSTANTS.ALPHA
    image_shells: int = CONSTANTS.NCP
    seed: int | None = None
    num_threads: int | None = None

    def validate(self) -> None:
        """检查参数取值

        Raises
        ------
        ValueError
            任一参数超出合法范围
        """
        if isinstance(self.nc, bool) or not isinstance(self.nc, int) or self.nc <= 0:
            raise ValueError(f"超胞重复数必须为正整数，得到 {self.nc!r}")
        for name in ("scale", "dt", "cutoff"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} 必须为正的有限数，得到 {value!r}")
        if not math.isfinite(self.temperature) or self.temperature < 0:
            raise ValueError(f"目标温度不能为负，得到 {self.temperature!r}")
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError(f"alpha 必须位于 [0, 1]，得到 {self.alpha!r}")
        if not isinstance(self.image_shells, int) or self.image_shells < 0:
            raise ValueError(f"镜像壳层数必须为非负整数，得到 {self.image_shells!r}")
        parse_ensemble(self.ensemble)

    def to_dict(self) -> dict:
        out = asdict(self)
        out["ensemble"] = EnsembleType(self.ensemble).name.lower()
        return out

    @classmethod
    def from_manager(cls, cfg: ConfigManager) -> SimulationConfig:
        """由 :class:`ConfigManager` 构建参数集合"""
        seed = cfg.get("rng.global_seed", None)
        num_threads = cfg.get("parallel.num_threads", None)
        config = cls(
            nc=int(cfg.get("lattice.nc", CONSTANTS.FIRSTNC)),
            scale=float(cfg.get("lattice.scale", CONSTANTS.FIRSTSCALE)),
            temperature=float(cfg.get("md.temperature", CONSTANTS.FIRSTTEMP)),
            ensemble=parse_ensemble(cfg.get("md.ensemble", "nvt")),
            dt=float(cfg.get("md.timestep", CONSTANTS.DT)),
            cutoff=float(cfg.get("potential.cutoff", CONSTANTS.RC)),
            alpha=float(cfg.get("thermostat.alpha", CONSTANTS.ALPHA)),
            image_shells=int(cfg.get("potential.image_shells", CONSTANTS.NCP)),
            seed=None if seed is None else int(seed),
            num_threads=None if num_threads is None else int(num_threads),
        )
        config.validate()
        return config
