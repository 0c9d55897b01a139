#!/usr/bin/env python3
r"""
粒子体系数据结构模块

保存 N 个全同氩原子的状态：

- 位置分量 ``x``, ``y``, ``z`` 存为三条平行的一维数组，便于按粒子下标并行遍历；
- 力、速度与上一步位置 (:math:`\mathbf{r}_1`) 存为 (N, 4) 数组，
  第 4 个分量仅作对齐填充，恒为 0。

周期性边界
----------
盒长为 :math:`L` 的立方主晶胞 :math:`[0, L]^3`。坐标越界时，当前坐标与
:math:`\mathbf{r}_1` 的对应分量同时平移 :math:`\pm L`，使 Verlet 递推中的
位移项 :math:`\mathbf{r} - \mathbf{r}_1` 始终是一个时间步内的真实位移。

Classes
-------
EnsembleType
    系综类型（NVE / NVT）
ParticleSnapshot
    粒子状态的不可变快照
ParticleSystem
    粒子体系，由模拟驱动器独占

Functions
---------
_apply_pbc_numba
    JIT 并行的周期性边界折回
"""

import logging
from dataclasses import dataclass
from enum import IntEnum

import numpy as np
from numba import jit, prange

logger = logging.getLogger(__name__)


class EnsembleType(IntEnum):
    """系综类型

    NVE
        粒子数、体积、能量守恒（无恒温器）
    NVT
        粒子数、体积、温度恒定（Woodcock 速度标度）
    """

    NVE = 0
    NVT = 1


@jit(nopython=True, parallel=True)
def _apply_pbc_numba(x, y, z, r1, periodic_len):
    """JIT 并行的周期性边界折回

    Parameters
    ----------
    x, y, z : numpy.ndarray
        位置分量 (N,)，就地修改
    r1 : numpy.ndarray
        上一步位置 (N, 4)，就地修改
    periodic_len : float
        盒长
    """
    n_atoms = x.shape[0]
    for n in prange(n_atoms):
        if x[n] > periodic_len:
            x[n] -= periodic_len
            r1[n, 0] -= periodic_len
        elif x[n] < 0.0:
            x[n] += periodic_len
            r1[n, 0] += periodic_len

        if y[n] > periodic_len:
            y[n] -= periodic_len
            r1[n, 1] -= periodic_len
        elif y[n] < 0.0:
            y[n] += periodic_len
            r1[n, 1] += periodic_len

        if z[n] > periodic_len:
            z[n] -= periodic_len
            r1[n, 2] -= periodic_len
        elif z[n] < 0.0:
            z[n] += periodic_len
            r1[n, 2] += periodic_len


def _readonly(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


@dataclass(frozen=True)
class ParticleSnapshot:
    """粒子状态的不可变快照

    所有数组均为拷贝且不可写。

    Attributes
    ----------
    positions : numpy.ndarray
        位置 (N, 3)
    velocities : numpy.ndarray
        速度 (N, 4)
    forces : numpy.ndarray
        受力 (N, 4)
    previous_positions : numpy.ndarray
        上一步位置 (N, 4)
    """

    positions: np.ndarray
    velocities: np.ndarray
    forces: np.ndarray
    previous_positions: np.ndarray

    @property
    def num_atoms(self) -> int:
        return self.positions.shape[0]


class ParticleSystem:
    r"""N 个全同粒子的状态容器

    Parameters
    ----------
    num_atoms : int
        粒子数 N

    Attributes
    ----------
    x, y, z : numpy.ndarray
        位置分量 (N,)
    forces : numpy.ndarray
        受力 (N, 4)
    velocities : numpy.ndarray
        速度 (N, 4)
    previous_positions : numpy.ndarray
        上一步位置 :math:`\mathbf{r}_1` (N, 4)

    Notes
    -----
    所有数组长度始终相同。外部调用方只应通过 ``get_*`` 只读视图或
    :meth:`snapshot` 读取状态。

    Examples
    --------
    >>> system = ParticleSystem(4)
    >>> system.num_atoms
    4
    >>> system.get_x().flags.writeable
    False
    """

    def __init__(self, num_atoms: int) -> None:
        self._allocate(num_atoms)

    def _allocate(self, num_atoms: int) -> None:
        if num_atoms < 0:
            raise ValueError(f"粒子数不能为负，得到 {num_atoms}")
        self.x = np.zeros(num_atoms, dtype=np.float64)
        self.y = np.zeros(num_atoms, dtype=np.float64)
        self.z = np.zeros(num_atoms, dtype=np.float64)
        self.forces = np.zeros((num_atoms, 4), dtype=np.float64)
        self.velocities = np.zeros((num_atoms, 4), dtype=np.float64)
        self.previous_positions = np.zeros((num_atoms, 4), dtype=np.float64)

    @property
    def num_atoms(self) -> int:
        """返回粒子数"""
        return self.x.shape[0]

    def resize(self, num_atoms: int) -> None:
        """重新分配全部数组

        不得与正在进行的时间步并发调用。原有状态被清零。
        """
        if num_atoms != self.num_atoms:
            logger.debug(f"粒子数组重新分配: {self.num_atoms} -> {num_atoms}")
        self._allocate(num_atoms)

    # --------- 只读访问 ---------
    def get_x(self) -> np.ndarray:
        return _readonly(self.x)

    def get_y(self) -> np.ndarray:
        return _readonly(self.y)

    def get_z(self) -> np.ndarray:
        return _readonly(self.z)

    def get_velocities(self) -> np.ndarray:
        return _readonly(self.velocities)

    def get_forces(self) -> np.ndarray:
        return _readonly(self.forces)

    def get_previous_positions(self) -> np.ndarray:
        return _readonly(self.previous_positions)

    def get_positions(self) -> np.ndarray:
        """获取位置数组 (N, 3) 的拷贝"""
        return np.column_stack((self.x, self.y, self.z))

    def snapshot(self) -> ParticleSnapshot:
        """生成当前状态的不可变快照"""
        positions = self.get_positions()
        velocities = self.velocities.copy()
        forces = self.forces.copy()
        previous = self.previous_positions.copy()
        for array in (positions, velocities, forces, previous):
            array.flags.writeable = False
        return ParticleSnapshot(positions, velocities, forces, previous)

    # --------- 派生量 ---------
    def force_magnitude(self, n: int) -> float:
        """第 n 个粒子所受合力的大小"""
        return float(np.linalg.norm(self.forces[n]))

    def kinetic_energy(self) -> float:
        r"""约化动能 :math:`\tfrac{1}{2}\sum_n |\mathbf{v}_n|^2`（单位质量）"""
        return 0.5 * float(np.sum(self.velocities * self.velocities))

    def total_momentum(self) -> np.ndarray:
        """总动量（单位质量下即速度之和），形状 (3,)"""
        return self.velocities[:, :3].sum(axis=0)

    def centroid(self) -> np.ndarray:
        """位置质心，形状 (3,)"""
        return np.array([self.x.mean(), self.y.mean(), self.z.mean()])

    # --------- 周期性边界 ---------
    def apply_periodic_boundary(self, periodic_len: float) -> None:
        """将越界坐标折回主晶胞 :math:`[0, L]^3`

        对每个粒子、每个坐标轴独立处理：超过 ``L`` 时当前坐标与上一步位置
        同时减去 ``L``，小于 0 时同时加上 ``L``。对已位于主晶胞内的坐标
        重复调用不产生任何变化。

        Parameters
        ----------
        periodic_len : float
            盒长（约化单位）
        """
        if periodic_len <= 0:
            raise ValueError(f"盒长必须为正数，得到 {periodic_len}")
        _apply_pbc_numba(
            self.x, self.y, self.z, self.previous_positions, float(periodic_len)
        )
