r"""Verlet 族积分器

两阶段时间推进：

第 1 步（自举）
    修正 Euler 法。记录 :math:`\mathbf{r}_1 \leftarrow \mathbf{r}`，速度先乘以
    Woodcock 因子 :math:`s`，然后

    .. math::
        \mathbf{r} \leftarrow \mathbf{r} + \Delta t\,\mathbf{v} + \tfrac{1}{2}\Delta t^2\,\mathbf{f},\qquad
        \mathbf{v} \leftarrow \mathbf{v} + \Delta t\,\mathbf{f}

第 2 步起（Verlet）
    NVE：

    .. math::
        \mathbf{r}' = 2\mathbf{r} - \mathbf{r}_1 + \Delta t^2\,\mathbf{f}

    NVT：只对 Verlet 递推中的"速度"部分 :math:`\mathbf{r} - \mathbf{r}_1` 作标度，
    加速度项保持不变

    .. math::
        \mathbf{r}' = \mathbf{r} + s\,(\mathbf{r} - \mathbf{r}_1) + \Delta t^2\,\mathbf{f}

    随后 :math:`\mathbf{v} = (\mathbf{r}' - \mathbf{r}_1)/(2\Delta t)`，
    :math:`\mathbf{r}_1 \leftarrow \mathbf{r}`。

Woodcock 标度因子：

.. math::
    s = \sqrt{\frac{T_g + \alpha\,(T_c - T_g)}{T_c}}

单位质量下动能 :math:`K = \tfrac12\sum|\mathbf{v}|^2`，瞬时温度
:math:`T_c = K / (1.5 N)`，二者都在位置更新之前由当前速度计算。

References
----------
L. V. Woodcock (1971), Isothermal molecular dynamics calculations for liquid salts.
Chemical Physics Letters, 10(3), 257–261. doi:10.1016/0009-2614(71)80281-6
"""

import logging
import math
from dataclasses import dataclass

from numba import jit, prange

from argonmd.core.constants import CONSTANTS
from argonmd.core.structure import EnsembleType, ParticleSystem

from .interfaces import IntegrationScheme

logger = logging.getLogger(__name__)


class EnsembleConsistencyError(RuntimeError):
    """积分器遇到无法识别的系综（程序内部一致性错误）"""


def woodcock_scaling_factor(
    temperature_target: float, temperature_current: float, alpha: float
) -> float:
    r"""Woodcock 速度标度因子

    Parameters
    ----------
    temperature_target : float
        约化目标温度 :math:`T_g`
    temperature_current : float
        约化瞬时温度 :math:`T_c`
    alpha : float
        阻尼系数 :math:`\alpha`

    Returns
    -------
    float
        标度因子 :math:`s`；:math:`T_c = 0` 时速度全为零，返回 1.0

    Raises
    ------
    ValueError
        温度为负
    """
    if temperature_current < 0 or temperature_target < 0:
        raise ValueError(
            f"温度不能为负: T_g={temperature_target}, T_c={temperature_current}"
        )
    if temperature_current == 0.0:
        return 1.0
    return math.sqrt(
        (temperature_target + alpha * (temperature_current - temperature_target))
        / temperature_current
    )


@jit(nopython=True, parallel=True)
def _euler_bootstrap_numba(x, y, z, v, f, r1, s, dt, dt2):
    for n in prange(x.shape[0]):
        r1[n, 0] = x[n]
        r1[n, 1] = y[n]
        r1[n, 2] = z[n]
        r1[n, 3] = 0.0

        for c in range(4):
            v[n, c] *= s

        x[n] += dt * v[n, 0] + 0.5 * f[n, 0] * dt2
        y[n] += dt * v[n, 1] + 0.5 * f[n, 1] * dt2
        z[n] += dt * v[n, 2] + 0.5 * f[n, 2] * dt2

        for c in range(4):
            v[n, c] += dt * f[n, c]


@jit(nopython=True, parallel=True)
def _verlet_nve_numba(x, y, z, v, f, r1, dt, dt2):
    for n in prange(x.shape[0]):
        rx = x[n]
        ry = y[n]
        rz = z[n]

        x[n] = 2.0 * rx - r1[n, 0] + f[n, 0] * dt2
        y[n] = 2.0 * ry - r1[n, 1] + f[n, 1] * dt2
        z[n] = 2.0 * rz - r1[n, 2] + f[n, 2] * dt2

        v[n, 0] = 0.5 * (x[n] - r1[n, 0]) / dt
        v[n, 1] = 0.5 * (y[n] - r1[n, 1]) / dt
        v[n, 2] = 0.5 * (z[n] - r1[n, 2]) / dt
        v[n, 3] = 0.0

        r1[n, 0] = rx
        r1[n, 1] = ry
        r1[n, 2] = rz


@jit(nopython=True, parallel=True)
def _verlet_nvt_numba(x, y, z, v, f, r1, s, dt, dt2):
    for n in prange(x.shape[0]):
        rx = x[n]
        ry = y[n]
        rz = z[n]

        # 只标度位移（速度）项
        x[n] = rx + s * (rx - r1[n, 0]) + f[n, 0] * dt2
        y[n] = ry + s * (ry - r1[n, 1]) + f[n, 1] * dt2
        z[n] = rz + s * (rz - r1[n, 2]) + f[n, 2] * dt2

        v[n, 0] = 0.5 * (x[n] - r1[n, 0]) / dt
        v[n, 1] = 0.5 * (y[n] - r1[n, 1]) / dt
        v[n, 2] = 0.5 * (z[n] - r1[n, 2]) / dt
        v[n, 3] = 0.0

        r1[n, 0] = rx
        r1[n, 1] = ry
        r1[n, 2] = rz


@dataclass(frozen=True)
class KineticState:
    """位置更新前由速度得到的标量（约化单位）

    Attributes
    ----------
    kinetic_energy : float
        动能
    temperature : float
        瞬时温度
    scaling_factor : float
        本步使用的 Woodcock 因子
    """

    kinetic_energy: float
    temperature: float
    scaling_factor: float


class VerletIntegrator(IntegrationScheme):
    """自举 Euler + Verlet 积分器

    Parameters
    ----------
    ensemble : EnsembleType
        系综
    dt : float, optional
        时间步长（约化单位），默认 0.001
    alpha : float, optional
        Woodcock 阻尼系数，默认 0.2

    Raises
    ------
    ValueError
        如果 dt <= 0 或系综无法识别
    """

    def __init__(
        self,
        ensemble: EnsembleType,
        dt: float = CONSTANTS.DT,
        alpha: float = CONSTANTS.ALPHA,
    ):
        if dt <= 0:
            raise ValueError(f"时间步长必须为正数，得到 dt={dt}")
        self.ensemble = EnsembleType(ensemble)
        self.dt = float(dt)
        self.dt2 = self.dt * self.dt
        self.alpha = float(alpha)

    def step(
        self, system: ParticleSystem, step_count: int, temperature_target: float
    ) -> KineticState:
        """推进一个时间步

        Parameters
        ----------
        system : ParticleSystem
            粒子体系，受力须已计算完毕
        step_count : int
            当前步计数；1 为自举步，大于 1 为 Verlet 步
        temperature_target : float
            约化目标温度

        Returns
        -------
        KineticState
            位置更新前的动能、温度与标度因子

        Raises
        ------
        ValueError
            step_count 小于 1
        EnsembleConsistencyError
            Verlet 步遇到无法识别的系综
        """
        if step_count < 1:
            raise ValueError(f"步计数从 1 开始，得到 {step_count}")

        num_atoms = system.num_atoms
        kinetic = system.kinetic_energy()
        temperature = kinetic / (1.5 * num_atoms)
        s = woodcock_scaling_factor(temperature_target, temperature, self.alpha)

        args = (
            system.x,
            system.y,
            system.z,
            system.velocities,
            system.forces,
            system.previous_positions,
        )
        if step_count == 1:
            _euler_bootstrap_numba(*args, s, self.dt, self.dt2)
        elif self.ensemble == EnsembleType.NVE:
            _verlet_nve_numba(*args, self.dt, self.dt2)
        elif self.ensemble == EnsembleType.NVT:
            _verlet_nvt_numba(*args, s, self.dt, self.dt2)
        else:
            raise EnsembleConsistencyError(f"无法识别的系综: {self.ensemble!r}")

        return KineticState(
            kinetic_energy=kinetic, temperature=temperature, scaling_factor=s
        )
