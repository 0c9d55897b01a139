#!/usr/bin/env python3
"""
Verlet 积分器测试

用单个原子、固定受力的最小体系逐项核对：
1. Woodcock 标度因子
2. 第 1 步 Euler 自举
3. 第 2 步起的 NVE / NVT Verlet 递推
"""

import math

import numpy as np
import pytest

from argonmd.core.structure import EnsembleType, ParticleSystem
from argonmd.md.integrators import (
    EnsembleConsistencyError,
    KineticState,
    VerletIntegrator,
    woodcock_scaling_factor,
)

DT = 0.1


@pytest.fixture
def single_atom():
    """原点处的单原子，速度 (1,0,0)，受力 (2,0,0)"""
    system = ParticleSystem(1)
    system.velocities[0, 0] = 1.0
    system.forces[0, 0] = 2.0
    return system


class TestWoodcockFactor:
    """Woodcock 因子测试"""

    def test_at_target_temperature(self):
        assert woodcock_scaling_factor(0.5, 0.5, 0.2) == pytest.approx(1.0)

    def test_full_damping_keeps_velocity(self):
        """测试 alpha = 1 时不做标度"""
        assert woodcock_scaling_factor(0.1, 0.7, 1.0) == pytest.approx(1.0)

    def test_immediate_rescale(self):
        """测试 alpha = 0 时直接标度到目标温度"""
        assert woodcock_scaling_factor(0.12, 0.48, 0.0) == pytest.approx(0.5)

    def test_partial_damping(self):
        expected = math.sqrt((0.2 + 0.2 * (0.6 - 0.2)) / 0.6)
        assert woodcock_scaling_factor(0.2, 0.6, 0.2) == pytest.approx(expected)
        assert expected < 1.0

    def test_zero_current_temperature(self):
        """测试全部静止时因子为 1"""
        assert woodcock_scaling_factor(0.4, 0.0, 0.2) == 1.0

    def test_negative_temperature(self):
        with pytest.raises(ValueError):
            woodcock_scaling_factor(-0.1, 0.5, 0.2)
        with pytest.raises(ValueError):
            woodcock_scaling_factor(0.1, -0.5, 0.2)


class TestBootstrapStep:
    """第 1 步自举测试"""

    @pytest.mark.parametrize("ensemble", [EnsembleType.NVE, EnsembleType.NVT])
    def test_euler_update(self, single_atom, ensemble):
        """测试 x += dt·v + ½dt²f, v += dt·f"""
        integrator = VerletIntegrator(ensemble, dt=DT, alpha=0.2)
        # 目标温度等于瞬时温度，标度因子为 1
        target = 0.5 / 1.5
        state = integrator.step(single_atom, 1, target)

        assert isinstance(state, KineticState)
        assert state.kinetic_energy == pytest.approx(0.5)
        assert state.temperature == pytest.approx(target)
        assert state.scaling_factor == pytest.approx(1.0)

        assert single_atom.x[0] == pytest.approx(0.11)
        assert single_atom.velocities[0, 0] == pytest.approx(1.2)
        # 上一步位置记录自举前的坐标
        assert single_atom.previous_positions[0, 0] == 0.0
        assert single_atom.y[0] == 0.0
        assert single_atom.z[0] == 0.0

    def test_bootstrap_applies_scaling(self, single_atom):
        """测试自举步先用 Woodcock 因子标度速度"""
        integrator = VerletIntegrator(EnsembleType.NVT, dt=DT, alpha=0.0)
        # T_c = 1/3，T_g = 1/12 → s = 0.5
        state = integrator.step(single_atom, 1, 1.0 / 12.0)

        assert state.scaling_factor == pytest.approx(0.5)
        assert single_atom.x[0] == pytest.approx(0.1 * 0.5 + 0.01)
        assert single_atom.velocities[0, 0] == pytest.approx(0.5 + 0.2)


class TestVerletStep:
    """第 2 步起的 Verlet 递推测试"""

    def test_nve_after_bootstrap(self, single_atom):
        """测试 r' = 2r - r1 + dt²f"""
        integrator = VerletIntegrator(EnsembleType.NVE, dt=DT)
        integrator.step(single_atom, 1, 0.5 / 1.5)
        integrator.step(single_atom, 2, 0.0)

        assert single_atom.x[0] == pytest.approx(0.24)
        assert single_atom.velocities[0, 0] == pytest.approx(1.2)
        assert single_atom.previous_positions[0, 0] == pytest.approx(0.11)
        assert single_atom.velocities[0, 3] == 0.0

    def test_nve_ignores_target_temperature(self, single_atom):
        integrator = VerletIntegrator(EnsembleType.NVE, dt=DT)
        single_atom.x[0] = 0.11
        single_atom.velocities[0, 0] = 1.2
        other = ParticleSystem(1)
        other.x[0] = 0.11
        other.velocities[0, 0] = 1.2
        other.forces[0, 0] = 2.0

        integrator.step(single_atom, 2, 0.0)
        integrator.step(other, 2, 10.0)
        assert single_atom.x[0] == other.x[0]

    def test_nvt_scales_displacement(self, single_atom):
        """测试 r' = r + s(r - r1) + dt²f"""
        integrator = VerletIntegrator(EnsembleType.NVT, dt=DT, alpha=0.0)
        single_atom.x[0] = 0.11
        single_atom.velocities[0, 0] = 1.2  # T_c = 0.48

        state = integrator.step(single_atom, 2, 0.12)

        assert state.temperature == pytest.approx(0.48)
        assert state.scaling_factor == pytest.approx(0.5)
        assert single_atom.x[0] == pytest.approx(0.185)
        assert single_atom.velocities[0, 0] == pytest.approx(0.925)
        assert single_atom.previous_positions[0, 0] == pytest.approx(0.11)

    def test_nvt_matches_nve_at_unit_scaling(self, single_atom):
        """测试 s = 1 时 NVT 与 NVE 递推一致"""
        nvt = VerletIntegrator(EnsembleType.NVT, dt=DT)
        nve = VerletIntegrator(EnsembleType.NVE, dt=DT)
        other = ParticleSystem(1)
        for system in (single_atom, other):
            system.x[0] = 0.11
            system.velocities[0, 0] = 1.2
            system.forces[0, 0] = 2.0

        nvt.step(single_atom, 2, 0.48)
        nve.step(other, 2, 0.48)
        assert single_atom.x[0] == pytest.approx(other.x[0])
        np.testing.assert_allclose(single_atom.velocities, other.velocities)


class TestIntegratorErrors:
    """错误处理测试"""

    def test_unknown_ensemble_on_verlet_step(self, single_atom):
        integrator = VerletIntegrator(EnsembleType.NVE, dt=DT)
        integrator.ensemble = 7
        with pytest.raises(EnsembleConsistencyError):
            integrator.step(single_atom, 2, 0.3)

    def test_step_count_starts_at_one(self, single_atom):
        integrator = VerletIntegrator(EnsembleType.NVE, dt=DT)
        with pytest.raises(ValueError):
            integrator.step(single_atom, 0, 0.3)

    @pytest.mark.parametrize(
        "kwargs", [{"ensemble": EnsembleType.NVE, "dt": 0.0}, {"ensemble": 3}]
    )
    def test_invalid_construction(self, kwargs):
        with pytest.raises(ValueError):
            VerletIntegrator(**kwargs)
