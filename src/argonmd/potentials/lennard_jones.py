#!/usr/bin/env python3
r"""
Lennard-Jones 势与力计算模块

约化单位下的 Lennard–Jones (12–6) 对势：

.. math::
   V(r) = 4\left(r^{-12} - r^{-6}\right),\qquad
   F(r) = -\frac{dV}{dr} = 48\,r^{-13} - 24\,r^{-7}

在截断半径 :math:`r_c` 处对势能作平移，使截断后的势连续（力不连续）：

.. math::
   V_s(r) = V(r) - V(r_c),\qquad r \le r_c

力计算对每个粒子 :math:`n`、每个粒子 :math:`m` 及每个周期镜像偏移
:math:`(i, j, k) \in [-n_{cp}, n_{cp}]^3` 求和（跳过 :math:`m = n` 且偏移为零的自作用）。
这不是最小镜像约定：每对粒子显式累加 :math:`(2n_{cp}+1)^3` 个镜像，
代价为 :math:`O(N^2 (2n_{cp}+1)^3)`，但允许盒长小于 :math:`2r_c`。
由于遍历的是有序对，每次贡献的势能与维里都乘以 1/2。

References
----------
- J. E. Jones (1924), On the Determination of Molecular Fields.
  I. From the Variation of the Viscosity of a Gas with Temperature.
  Proceedings of the Royal Society A, 106(738), 441–462. doi:10.1098/rspa.1924.0081
"""

import logging
from dataclasses import dataclass

import numpy as np
from numba import jit, prange

from argonmd.core.constants import CONSTANTS
from argonmd.core.structure import ParticleSystem
from argonmd.utils.parallel import block_bounds, combine_partials, default_partitions

logger = logging.getLogger(__name__)


class GeometryError(ValueError):
    """镜像壳层不足以覆盖截断半径内的全部周期镜像"""


def lj_potential(r):
    r"""未平移的 LJ 势 :math:`4(r^{-12} - r^{-6})`"""
    rm6 = r**-6.0
    return 4.0 * (rm6 * rm6 - rm6)


def lj_force_magnitude(r):
    r"""LJ 径向力 :math:`48 r^{-13} - 24 r^{-7}`，正值为排斥"""
    return 48.0 * r**-13.0 - 24.0 * r**-7.0


def potential_shift(cutoff: float) -> float:
    r"""势能平移常数 :math:`V(r_c) = 4(r_c^{-12} - r_c^{-6})`"""
    return float(lj_potential(cutoff))


def shifted_potential(r, cutoff: float):
    r"""平移后的 LJ 势 :math:`V(r) - V(r_c)`，在 :math:`r = r_c` 处为零"""
    return lj_potential(r) - potential_shift(cutoff)


@jit(nopython=True, parallel=True)
def _lj_forces_numba(
    x, y, z, forces, bounds, periodic_len, rc2, vrc, ncp, up_partials, virial_partials
):
    """全镜像求和的 LJ 力、势能与维里

    外层对区间 ``b`` 并行；每个区间只写自己下标范围内的 ``forces`` 行，
    以及 ``up_partials[b]`` 与 ``virial_partials[b]``。

    Parameters
    ----------
    x, y, z : numpy.ndarray
        位置分量 (N,)
    forces : numpy.ndarray
        输出力 (N, 4)，全部元素被覆盖
    bounds : numpy.ndarray
        区间边界 (B+1,)
    periodic_len : float
        盒长
    rc2 : float
        截断半径平方
    vrc : float
        势能平移常数
    ncp : int
        镜像壳层数
    up_partials, virial_partials : numpy.ndarray
        各区间的势能与维里局部和 (B,)
    """
    n_atoms = x.shape[0]
    n_blocks = bounds.shape[0] - 1
    for b in prange(n_blocks):
        up_local = 0.0
        virial_local = 0.0
        for n in range(bounds[b], bounds[b + 1]):
            fx = 0.0
            fy = 0.0
            fz = 0.0
            for m in range(n_atoms):
                for i in range(-ncp, ncp + 1):
                    sx = i * periodic_len
                    for j in range(-ncp, ncp + 1):
                        sy = j * periodic_len
                        for k in range(-ncp, ncp + 1):
                            sz = k * periodic_len
                            # 排除自身
                            if n != m or i != 0 or j != 0 or k != 0:
                                dx = x[n] - (x[m] + sx)
                                dy = y[n] - (y[m] + sy)
                                dz = z[n] - (z[m] + sz)
                                r2 = dx * dx + dy * dy + dz * dz
                                if r2 <= rc2:
                                    r = np.sqrt(r2)
                                    rm6 = 1.0 / (r2 * r2 * r2)
                                    rm7 = rm6 / r
                                    rm12 = rm6 * rm6
                                    rm13 = rm12 / r
                                    fr = 48.0 * rm13 - 24.0 * rm7
                                    fx += dx / r * fr
                                    fy += dy / r * fr
                                    fz += dz / r * fr
                                    # 有序对重复计数，乘 0.5
                                    up_local += 0.5 * (4.0 * (rm12 - rm6) - vrc)
                                    virial_local += 0.5 * r * fr
            forces[n, 0] = fx
            forces[n, 1] = fy
            forces[n, 2] = fz
            forces[n, 3] = 0.0
        up_partials[b] = up_local
        virial_partials[b] = virial_local


@dataclass(frozen=True)
class ForceResult:
    r"""一次力计算的标量结果（约化单位）

    Attributes
    ----------
    potential_energy : float
        总势能
    virial : float
        维里 :math:`\sum r F(r)`（已扣除重复计数）
    """

    potential_energy: float
    virial: float


class LennardJonesForceEngine:
    r"""平移截断 LJ 势的全镜像力计算器

    Parameters
    ----------
    cutoff : float, optional
        截断半径 :math:`r_c`（约化单位），默认 2.5
    image_shells : int, optional
        每个方向求和的镜像壳层数 :math:`n_{cp}`，默认 3
    num_partitions : int | None, optional
        外层粒子循环的划分数；``None`` 时取 numba 线程数

    Notes
    -----
    结果先写入临时力数组，并行区全部结束后才提交到粒子体系，
    外部不会观察到部分更新的力。

    Examples
    --------
    >>> engine = LennardJonesForceEngine(cutoff=2.5, image_shells=3)
    >>> result = engine.compute(system, periodic_len=6.35)
    >>> result.potential_energy < 0
    True
    """

    def __init__(
        self,
        cutoff: float = CONSTANTS.RC,
        image_shells: int = CONSTANTS.NCP,
        num_partitions: int | None = None,
    ):
        if cutoff <= 0:
            raise ValueError(f"截断半径必须为正数，得到 {cutoff}")
        if image_shells < 0:
            raise ValueError(f"镜像壳层数不能为负，得到 {image_shells}")
        if num_partitions is not None and num_partitions < 1:
            raise ValueError(f"划分数必须至少为 1，得到 {num_partitions}")
        self.cutoff = float(cutoff)
        self.image_shells = int(image_shells)
        self.num_partitions = num_partitions
        self.rc2 = self.cutoff * self.cutoff
        self.rcm6 = self.cutoff**-6.0
        self.rcm12 = self.cutoff**-12.0
        self.vrc = 4.0 * (self.rcm12 - self.rcm6)
        logger.debug(
            f"LJ force engine initialized with cutoff={self.cutoff}, "
            f"image_shells={self.image_shells}, Vrc={self.vrc:.6e}."
        )

    def check_geometry(self, periodic_len: float) -> None:
        r"""检查镜像壳层能否覆盖截断半径

        主晶胞内两粒子的坐标差不超过 :math:`L`，因此未求和的最近镜像
        距离至少为 :math:`n_{cp} L`。要求 :math:`n_{cp} L > r_c`。

        Raises
        ------
        GeometryError
            条件不满足
        """
        if self.image_shells * periodic_len <= self.cutoff:
            raise GeometryError(
                f"镜像壳层不足: n_cp * L = {self.image_shells} * {periodic_len:.4f} "
                f"<= r_c = {self.cutoff}"
            )

    def compute(self, system: ParticleSystem, periodic_len: float) -> ForceResult:
        """计算全部粒子的受力、总势能与维里

        Parameters
        ----------
        system : ParticleSystem
            粒子体系，其 ``forces`` 被整体覆盖
        periodic_len : float
            盒长（约化单位）

        Returns
        -------
        ForceResult
            势能与维里
        """
        num_atoms = system.num_atoms
        n_blocks = (
            self.num_partitions
            if self.num_partitions is not None
            else default_partitions(num_atoms)
        )
        bounds = block_bounds(num_atoms, n_blocks)
        forces = np.zeros((num_atoms, 4), dtype=np.float64)
        up_partials = np.zeros(n_blocks, dtype=np.float64)
        virial_partials = np.zeros(n_blocks, dtype=np.float64)

        _lj_forces_numba(
            system.x,
            system.y,
            system.z,
            forces,
            bounds,
            float(periodic_len),
            self.rc2,
            self.vrc,
            self.image_shells,
            up_partials,
            virial_partials,
        )

        # 并行区结束后合并局部和并提交力
        system.forces[:] = forces
        return ForceResult(
            potential_energy=combine_partials(up_partials),
            virial=combine_partials(virial_partials),
        )
