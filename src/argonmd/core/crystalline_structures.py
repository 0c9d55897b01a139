#!/usr/bin/env python3
r"""
FCC 晶格初始化模块

为氩原子生成初始构型：

1. 位置：:math:`N_c^3` 个立方单胞，每个单胞放置 4 个 FCC 基原子，
   随后将全体原子的几何中心平移到原点；
2. 速度：方向随机、大小固定为 :math:`\sqrt{3T^{*}}`，
   再扣除平均速度使总动量为零。

晶格常数与盒长（约化单位）：

.. math::
    a = 2^{2/3}\,s,\qquad L = a\,N_c

基本使用：
    >>> builder = FCCLatticeBuilder(num_cells=2, scale=1.0)
    >>> system = ParticleSystem(builder.num_atoms)
    >>> builder.init_positions(system)
    >>> system.num_atoms
    32
"""

import logging
import math

import numpy as np

from argonmd.core.constants import lattice_constant
from argonmd.core.random_source import RandomSource
from argonmd.core.structure import ParticleSystem

logger = logging.getLogger(__name__)


class FCCLatticeBuilder:
    """
    FCC 超胞构型生成器

    Parameters
    ----------
    num_cells : int
        每个方向的单胞重复数 :math:`N_c`
    scale : float
        晶格常数缩放因子

    Attributes
    ----------
    lattice_constant : float
        晶格常数 (约化单位)
    periodic_len : float
        超胞盒长 (约化单位)

    Examples
    --------
    >>> builder = FCCLatticeBuilder(4, 1.0)
    >>> builder.num_atoms
    256
    """

    # FCC 基原子位置 (以晶格常数为单位)，顺序固定
    FCC_BASIS = np.array(
        [
            [0.0, 0.0, 0.0],  # 角原子
            [0.5, 0.5, 0.0],  # xy面心
            [0.0, 0.5, 0.5],  # yz面心
            [0.5, 0.0, 0.5],  # xz面心
        ]
    )

    def __init__(self, num_cells: int, scale: float):
        self.set_geometry(num_cells, scale)

    @staticmethod
    def validate_geometry(num_cells: int, scale: float) -> None:
        """检查超胞参数

        Raises
        ------
        ValueError
            如果 num_cells 不是正整数或 scale 不是正的有限数
        """
        if isinstance(num_cells, bool) or not isinstance(num_cells, int | np.integer):
            raise ValueError(f"超胞重复数必须为整数，得到 {num_cells!r}")
        if num_cells <= 0:
            raise ValueError(f"超胞重复数必须为正数，得到 {num_cells}")
        if not isinstance(scale, int | float) or not math.isfinite(scale) or scale <= 0:
            raise ValueError(f"晶格缩放因子必须为正的有限数，得到 {scale!r}")

    def set_geometry(self, num_cells: int, scale: float) -> None:
        """更新超胞尺寸与缩放，并重算晶格常数与盒长"""
        self.validate_geometry(num_cells, scale)
        self.num_cells = int(num_cells)
        self.scale = float(scale)
        self.lattice_constant = lattice_constant(self.scale)
        self.periodic_len = self.lattice_constant * self.num_cells
        logger.debug(
            f"FCC geometry: Nc={self.num_cells}, scale={self.scale}, "
            f"a={self.lattice_constant:.6f}, L={self.periodic_len:.6f}"
        )

    @property
    def num_atoms(self) -> int:
        """原子数 :math:`4N_c^3`"""
        return 4 * self.num_cells**3

    def init_positions(self, system: ParticleSystem) -> None:
        """生成 FCC 初始位置并把几何中心移到原点

        原子按单胞下标 (i, j, k) 的嵌套顺序编号，每个单胞内依次为
        (0,0,0)、(½,½,0)、(0,½,½)、(½,0,½)。

        Parameters
        ----------
        system : ParticleSystem
            目标粒子体系；若粒子数不等于 :math:`4N_c^3` 则重新分配
        """
        if system.num_atoms != self.num_atoms:
            system.resize(self.num_atoms)

        lat = self.lattice_constant
        n = 0
        for i in range(self.num_cells):
            for j in range(self.num_cells):
                for k in range(self.num_cells):
                    origin = np.array([i, j, k], dtype=np.float64) * lat
                    for base_pos in self.FCC_BASIS:
                        pos = origin + base_pos * lat
                        system.x[n] = pos[0]
                        system.y[n] = pos[1]
                        system.z[n] = pos[2]
                        n += 1

        # 系统几何中心移到原点：先累加求中心，再统一平移
        sx = system.x.sum() / n
        sy = system.y.sum() / n
        sz = system.z.sum() / n
        system.x -= sx
        system.y -= sy
        system.z -= sz

    def init_velocities(
        self,
        system: ParticleSystem,
        temperature: float,
        random_source: RandomSource,
    ) -> None:
        r"""生成方向随机、模长固定的初速度

        每个原子从随机数源依次取 3 个 :math:`[-1, 1]` 上的样本，归一化为单位方向，
        乘以 :math:`v = \sqrt{3T^{*}}`；最后扣除平均速度，保证总动量为零。

        Parameters
        ----------
        system : ParticleSystem
            目标粒子体系
        temperature : float
            约化目标温度 :math:`T^{*}`
        random_source : RandomSource
            均匀分布随机数源

        Notes
        -----
        这不是 Maxwell–Boltzmann 抽样；只保证瞬时动能与目标温度在期望上一致。
        """
        if temperature < 0:
            raise ValueError(f"温度不能为负，得到 {temperature}")

        speed = math.sqrt(3.0 * temperature)
        num_atoms = system.num_atoms
        directions = np.asarray(
            random_source.uniform(-1.0, 1.0, (num_atoms, 3)), dtype=np.float64
        )
        norms = np.linalg.norm(directions, axis=1)

        system.velocities[:, :3] = speed * directions / norms[:, np.newaxis]
        system.velocities[:, 3] = 0.0

        # 避免质心平动：速度之和修正为零
        mean_velocity = system.velocities[:, :3].sum(axis=0) / num_atoms
        system.velocities[:, :3] -= mean_velocity
