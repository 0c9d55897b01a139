#!/usr/bin/env python3
"""
测试 Lennard-Jones 势与全镜像力计算
"""

import numpy as np
import pytest

from argonmd.core.crystalline_structures import FCCLatticeBuilder
from argonmd.core.structure import ParticleSystem
from argonmd.potentials.lennard_jones import (
    ForceResult,
    GeometryError,
    LennardJonesForceEngine,
    lj_force_magnitude,
    lj_potential,
    potential_shift,
    shifted_potential,
)

CUTOFF = 2.5


@pytest.fixture
def pair_system():
    """大盒子中相距 1.2 的两个原子"""
    system = ParticleSystem(2)
    system.x[:] = [0.0, 1.2]
    system.y[:] = [0.0, 0.0]
    system.z[:] = [0.0, 0.0]
    return system


def _lattice_system(nc, scale=1.0):
    builder = FCCLatticeBuilder(nc, scale)
    system = ParticleSystem(builder.num_atoms)
    builder.init_positions(system)
    return builder, system


def test_potential_shift_value():
    """测试 r_c = 2.5 处的平移常数"""
    assert potential_shift(CUTOFF) == pytest.approx(-0.016316891, rel=1e-6)


def test_shifted_potential_zero_at_cutoff():
    """测试平移后的势在截断处为零"""
    assert shifted_potential(CUTOFF, CUTOFF) == pytest.approx(0.0, abs=1e-15)
    assert lj_potential(1.0) == 0.0


def test_force_zero_at_minimum():
    """测试力在势能极小点 2^(1/6) 处为零"""
    r_min = 2 ** (1 / 6)
    assert lj_force_magnitude(r_min) == pytest.approx(0.0, abs=1e-12)
    assert lj_potential(r_min) == pytest.approx(-1.0)
    assert lj_force_magnitude(1.0) > 0  # 排斥
    assert lj_force_magnitude(1.5) < 0  # 吸引


@pytest.mark.parametrize("r", [0.95, 1.1, 1.5, 2.2])
def test_force_is_negative_gradient(r):
    """测试 F(r) = -dV/dr"""
    h = 1e-6
    numeric = -(lj_potential(r + h) - lj_potential(r - h)) / (2 * h)
    assert lj_force_magnitude(r) == pytest.approx(numeric, rel=1e-6)


class TestForceEngine:
    """全镜像力计算测试"""

    @pytest.mark.parametrize("num_partitions", [1, 2])
    def test_two_particle_forces(self, pair_system, num_partitions):
        """测试双原子体系的力、势能和维里"""
        engine = LennardJonesForceEngine(
            cutoff=CUTOFF, image_shells=1, num_partitions=num_partitions
        )
        result = engine.compute(pair_system, 10.0)

        fr = lj_force_magnitude(1.2)
        # 1.2 > 2^(1/6)，两原子相互吸引
        assert pair_system.forces[0, 0] == pytest.approx(-fr)
        assert pair_system.forces[1, 0] == pytest.approx(fr)
        np.testing.assert_allclose(pair_system.forces[:, 1:], 0.0, atol=1e-15)

        assert isinstance(result, ForceResult)
        assert result.potential_energy == pytest.approx(shifted_potential(1.2, CUTOFF))
        assert result.virial == pytest.approx(1.2 * fr)

    def test_pair_beyond_cutoff(self, pair_system):
        """测试截断半径外没有相互作用"""
        pair_system.x[1] = 3.0
        engine = LennardJonesForceEngine(cutoff=CUTOFF, image_shells=1)
        result = engine.compute(pair_system, 10.0)

        np.testing.assert_array_equal(pair_system.forces, 0.0)
        assert result.potential_energy == 0.0
        assert result.virial == 0.0

    def test_forces_are_overwritten(self, pair_system):
        """测试旧的受力被整体覆盖"""
        pair_system.forces[:] = 99.0
        LennardJonesForceEngine(cutoff=CUTOFF, image_shells=1).compute(
            pair_system, 10.0
        )
        np.testing.assert_array_equal(pair_system.forces[:, 3], 0.0)
        assert abs(pair_system.forces[0, 0]) < 99.0

    def test_image_interaction(self):
        """测试跨越周期边界的镜像相互作用"""
        system = ParticleSystem(2)
        system.x[:] = [0.5, 3.5]
        engine = LennardJonesForceEngine(cutoff=CUTOFF, image_shells=1)
        result = engine.compute(system, 4.0)

        # 盒内距离 3.0 超出截断，原子 1 的镜像位于 -0.5，与原子 0 相距 1.0
        fr = lj_force_magnitude(1.0)
        assert system.forces[0, 0] == pytest.approx(fr)
        assert system.forces[1, 0] == pytest.approx(-fr)
        assert result.potential_energy == pytest.approx(-potential_shift(CUTOFF))
        assert result.virial == pytest.approx(fr)

    def test_perfect_lattice_forces_vanish(self):
        """测试完美晶格中每个原子受力为零"""
        _, system = _lattice_system(2)
        LennardJonesForceEngine().compute(system, 2 * 2 ** (2 / 3))
        np.testing.assert_allclose(system.forces, 0.0, atol=1e-10)

    def test_per_atom_energy_independent_of_cell_count(self):
        """测试完美晶格的每原子势能与超胞大小无关"""
        engine = LennardJonesForceEngine()
        builder2, system2 = _lattice_system(2)
        builder3, system3 = _lattice_system(3)
        r2 = engine.compute(system2, builder2.periodic_len)
        r3 = engine.compute(system3, builder3.periodic_len)

        e2 = r2.potential_energy / system2.num_atoms
        e3 = r3.potential_energy / system3.num_atoms
        assert e2 == pytest.approx(e3, rel=1e-10)
        assert e2 < 0
        # 平衡距离附近的结合能量级
        assert -8.0 < e2 < -5.0

    def test_partition_independence(self):
        """测试结果与划分数无关"""
        builder, base = _lattice_system(2)
        rng = np.random.default_rng(8)
        base.x += rng.uniform(-0.05, 0.05, base.num_atoms)
        base.y += rng.uniform(-0.05, 0.05, base.num_atoms)
        base.z += rng.uniform(-0.05, 0.05, base.num_atoms)

        results = []
        forces = []
        for partitions in (1, 3, 32):
            system = ParticleSystem(base.num_atoms)
            system.x[:] = base.x
            system.y[:] = base.y
            system.z[:] = base.z
            engine = LennardJonesForceEngine(num_partitions=partitions)
            results.append(engine.compute(system, builder.periodic_len))
            forces.append(system.forces.copy())

        for result, force in zip(results[1:], forces[1:], strict=True):
            np.testing.assert_allclose(force, forces[0], rtol=1e-12, atol=1e-12)
            assert result.potential_energy == pytest.approx(
                results[0].potential_energy, rel=1e-12
            )
            assert result.virial == pytest.approx(results[0].virial, rel=1e-12)

    def test_newton_third_law(self):
        """测试扰动构型的合力为零"""
        builder, system = _lattice_system(2)
        rng = np.random.default_rng(3)
        system.x += rng.uniform(-0.05, 0.05, system.num_atoms)
        LennardJonesForceEngine().compute(system, builder.periodic_len)
        np.testing.assert_allclose(system.forces.sum(axis=0), 0.0, atol=1e-9)


class TestGeometryCheck:
    """镜像壳层几何检查"""

    def test_insufficient_shells(self):
        engine = LennardJonesForceEngine(cutoff=CUTOFF, image_shells=1)
        with pytest.raises(GeometryError):
            engine.check_geometry(2.0)
        with pytest.raises(ValueError):
            engine.check_geometry(CUTOFF)

    def test_sufficient_shells(self):
        engine = LennardJonesForceEngine(cutoff=CUTOFF, image_shells=3)
        engine.check_geometry(1.0)
        engine.check_geometry(2 * 2 ** (2 / 3))

    @pytest.mark.parametrize(
        "kwargs",
        [{"cutoff": 0.0}, {"image_shells": -1}, {"num_partitions": 0}],
    )
    def test_invalid_construction(self, kwargs):
        with pytest.raises(ValueError):
            LennardJonesForceEngine(**kwargs)
