#!/usr/bin/env python3
r"""
氩原子分子动力学模拟驱动器

一步模拟的严格顺序：

1. 力计算（全部受力、势能与维里确定之后才进入下一阶段）
2. 积分（位置与速度更新）
3. 周期性边界折回
4. 时间 :math:`t = n\,\Delta t`（:math:`n` 为递增前的步计数），步计数加一

驱动器独占粒子体系；外部只能通过只读视图、快照及 ``get_*`` 方法读取状态。
能量以 Hartree、长度以 nm、时间以 ps、温度以 K、压强以 atm 对外给出。

Examples
--------
>>> sim = ArgonMDSimulator(SimulationConfig(nc=2, temperature=50.0, seed=1))
>>> sim.run_calc()
>>> sim.md_iter
2
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

import numpy as np

from argonmd.core.config import ConfigManager, SimulationConfig, parse_ensemble
from argonmd.core.constants import (
    dimensionless_to_hartree,
    kelvin_to_reduced,
    pressure_to_atm,
    reduced_length_to_nm,
    reduced_time_to_ps,
    reduced_to_kelvin,
)
from argonmd.core.crystalline_structures import FCCLatticeBuilder
from argonmd.core.random_source import NumpyRandomSource, RandomSource
from argonmd.core.structure import EnsembleType, ParticleSnapshot, ParticleSystem
from argonmd.potentials.lennard_jones import LennardJonesForceEngine
from argonmd.utils.parallel import set_num_threads

from .integrators import VerletIntegrator

logger = logging.getLogger(__name__)


class ArgonMDSimulator:
    """周期性 FCC 氩体系的 MD 模拟驱动器

    Parameters
    ----------
    config : SimulationConfig | None, optional
        模拟参数；``None`` 使用默认值（Nc=4, scale=1.0, 50 K, NVT）
    random_source : RandomSource | None, optional
        初速度方向的随机数源；``None`` 时以 ``config.seed`` 构建
        :class:`NumpyRandomSource`

    Raises
    ------
    ValueError
        参数不合法
    GeometryError
        镜像壳层不足以覆盖截断半径
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        random_source: RandomSource | None = None,
    ):
        self.config = config or SimulationConfig()
        self.config.validate()
        set_num_threads(self.config.num_threads)

        self._random_source = random_source or NumpyRandomSource(self.config.seed)
        self._ensemble = parse_ensemble(self.config.ensemble)
        self._tg = kelvin_to_reduced(self.config.temperature)

        self._force_engine = LennardJonesForceEngine(
            cutoff=self.config.cutoff, image_shells=self.config.image_shells
        )
        self._integrator = VerletIntegrator(
            self._ensemble, dt=self.config.dt, alpha=self.config.alpha
        )
        self._lattice = FCCLatticeBuilder(self.config.nc, self.config.scale)
        self._force_engine.check_geometry(self._lattice.periodic_len)
        self._system = ParticleSystem(self._lattice.num_atoms)

        self.recalc()
        logger.info(
            f"ArgonMD initialized: N={self.num_atom}, Nc={self.nc}, "
            f"scale={self.scale}, T_given={self.config.temperature} K, "
            f"ensemble={self._ensemble.name}"
        )

    @classmethod
    def from_config_files(
        cls, files: Iterable[str], random_source: RandomSource | None = None
    ) -> ArgonMDSimulator:
        """由 YAML 配置文件构建模拟器"""
        cfg = ConfigManager(files=files)
        return cls(SimulationConfig.from_manager(cfg), random_source=random_source)

    # --------- 初始化 ---------
    def recalc(self) -> None:
        """重新生成初始构型并重置步计数与全部标量"""
        self._t = 0.0
        self._md_iter = 1
        self._uk = 0.0
        self._up = 0.0
        self._utot = 0.0
        self._tc = 0.0
        self._virial = 0.0
        self._lattice.init_positions(self._system)
        self._lattice.init_velocities(self._system, self._tg, self._random_source)
        logger.debug(f"构型重新初始化: N={self._system.num_atoms}")

    def _mod_lattice(self, num_cells: int, scale: float) -> None:
        """更新几何参数并完全重新初始化；校验失败时不修改任何状态"""
        FCCLatticeBuilder.validate_geometry(num_cells, scale)
        candidate = FCCLatticeBuilder(num_cells, scale)
        self._force_engine.check_geometry(candidate.periodic_len)
        self._lattice = candidate
        if self._system.num_atoms != candidate.num_atoms:
            self._system.resize(candidate.num_atoms)
        self.recalc()

    # --------- 时间推进 ---------
    def run_calc(self) -> None:
        """推进一个时间步：力计算 → 积分 → 周期折回 → 时间与步计数"""
        result = self._force_engine.compute(self._system, self._lattice.periodic_len)
        self._up = result.potential_energy
        self._virial = result.virial

        kinetic = self._integrator.step(self._system, self._md_iter, self._tg)
        self._uk = kinetic.kinetic_energy
        self._tc = kinetic.temperature
        self._utot = self._uk + self._up

        self._system.apply_periodic_boundary(self._lattice.periodic_len)

        self._t = float(self._md_iter) * self.config.dt
        self._md_iter += 1

    advance_step = run_calc

    def run(
        self,
        steps: int,
        callback: Callable[[ArgonMDSimulator], None] | None = None,
    ) -> None:
        """连续推进 ``steps`` 步，每步结束后调用 ``callback(self)``"""
        if steps < 0:
            raise ValueError(f"步数不能为负，得到 {steps}")
        for _ in range(steps):
            self.run_calc()
            if callback is not None:
                callback(self)
        logger.debug(
            f"已推进 {steps} 步: step={self._md_iter}, T={self.get_tcalc():.2f} K"
        )

    # --------- 配置修改 ---------
    def set_ensemble(self, ensemble) -> None:
        """设置系综并完全重新初始化"""
        self._ensemble = parse_ensemble(ensemble)
        self._integrator.ensemble = self._ensemble
        logger.info(f"系综切换为 {self._ensemble.name}")
        self.recalc()

    def set_nc(self, nc: int) -> None:
        """设置超胞重复数，重新分配数组并完全重新初始化"""
        self._mod_lattice(nc, self._lattice.scale)
        logger.info(f"超胞重复数设为 {nc}，原子数 {self.num_atom}")

    def set_scale(self, scale: float) -> None:
        """设置晶格常数缩放并完全重新初始化"""
        self._mod_lattice(self._lattice.num_cells, scale)
        logger.info(f"晶格缩放设为 {scale}")

    def set_tgiven(self, temperature: float) -> None:
        """设置目标温度 (K)；只影响下一步的恒温器因子，不重新初始化"""
        if temperature < 0:
            raise ValueError(f"温度不能为负，得到 {temperature}")
        self._tg = kelvin_to_reduced(temperature)
        logger.debug(f"目标温度设为 {temperature} K")

    # --------- 只读观测量 ---------
    def get_deltat(self) -> float:
        """经过时间 (ps)"""
        return reduced_time_to_ps(self._t)

    def get_force(self, n: int) -> np.float32:
        """第 n 个原子所受合力大小（约化单位）"""
        return np.float32(self._system.force_magnitude(n))

    def get_latticeconst(self) -> float:
        """晶格常数 (nm)"""
        return reduced_length_to_nm(self._lattice.lattice_constant)

    def get_periodiclen(self) -> float:
        """盒长 (nm)"""
        return reduced_length_to_nm(self._lattice.periodic_len)

    def get_pressure(self) -> float:
        """瞬时压强 (atm)"""
        return pressure_to_atm(
            self.num_atom, self._tc, self._virial, self._lattice.periodic_len
        )

    def get_tcalc(self) -> float:
        """瞬时温度 (K)"""
        return reduced_to_kelvin(self._tc)

    def get_tgiven(self) -> float:
        """目标温度 (K)"""
        return reduced_to_kelvin(self._tg)

    @property
    def ensemble(self) -> EnsembleType:
        return self._ensemble

    @property
    def md_iter(self) -> int:
        """步计数，初始为 1"""
        return self._md_iter

    @property
    def nc(self) -> int:
        return self._lattice.num_cells

    @property
    def scale(self) -> float:
        return self._lattice.scale

    @property
    def num_atom(self) -> int:
        return self._system.num_atoms

    @property
    def periodiclen(self) -> float:
        """盒长（约化单位）"""
        return self._lattice.periodic_len

    @property
    def lattice_constant(self) -> float:
        """晶格常数（约化单位）"""
        return self._lattice.lattice_constant

    @property
    def elapsed_time(self) -> float:
        """经过时间（约化单位）"""
        return self._t

    @property
    def uk(self) -> float:
        """动能 (Hartree)"""
        return dimensionless_to_hartree(self._uk)

    @property
    def up(self) -> float:
        """势能 (Hartree)"""
        return dimensionless_to_hartree(self._up)

    @property
    def utot(self) -> float:
        """总能量 (Hartree)"""
        return dimensionless_to_hartree(self._utot)

    @property
    def virial(self) -> float:
        """维里（约化单位）"""
        return self._virial

    @property
    def x(self) -> np.ndarray:
        return self._system.get_x()

    @property
    def y(self) -> np.ndarray:
        return self._system.get_y()

    @property
    def z(self) -> np.ndarray:
        return self._system.get_z()

    @property
    def atoms(self) -> ParticleSnapshot:
        """粒子状态的不可变快照"""
        return self._system.snapshot()

    def reduced_observables(self) -> dict:
        """约化单位下的标量状态"""
        return {
            "kinetic_energy": self._uk,
            "potential_energy": self._up,
            "total_energy": self._utot,
            "temperature": self._tc,
            "temperature_given": self._tg,
            "virial": self._virial,
        }

    def thermo_snapshot(self) -> dict:
        """当前热力学观测量（物理单位）"""
        return {
            "step": self._md_iter,
            "time_ps": self.get_deltat(),
            "T_K": self.get_tcalc(),
            "T_given_K": self.get_tgiven(),
            "KE_Eh": self.uk,
            "PE_Eh": self.up,
            "E_Eh": self.utot,
            "P_atm": self.get_pressure(),
        }
