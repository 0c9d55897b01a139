"""
pytest配置文件 - 提供全局fixtures和测试配置
"""

import numpy as np
import pytest

from argonmd.core.config import SimulationConfig
from argonmd.core.crystalline_structures import FCCLatticeBuilder
from argonmd.core.random_source import RandomSource
from argonmd.core.structure import EnsembleType, ParticleSystem


class FixedRandomSource(RandomSource):
    """按顺序循环返回预设样本的随机数源"""

    def __init__(self, samples):
        self.samples = np.asarray(samples, dtype=np.float64).ravel()
        self.calls = 0

    def uniform(self, low, high, size):
        self.calls += 1
        count = int(np.prod(size))
        reps = -(-count // self.samples.size)
        return np.tile(self.samples, reps)[:count].reshape(size)


@pytest.fixture
def fixed_random_source():
    """x 方向正负交替的单位方向，平均速度恰为零"""
    return FixedRandomSource([1.0, 0.0, 0.0, -1.0, 0.0, 0.0])


@pytest.fixture
def small_builder():
    """2×2×2 超胞（32 个原子）"""
    return FCCLatticeBuilder(num_cells=2, scale=1.0)


@pytest.fixture
def lattice_system(small_builder):
    """已放置 FCC 位置的粒子体系"""
    system = ParticleSystem(small_builder.num_atoms)
    small_builder.init_positions(system)
    return system


@pytest.fixture
def small_config():
    """小体系 NVT 模拟参数"""
    return SimulationConfig(nc=2, scale=1.0, temperature=50.0, seed=12345)


@pytest.fixture
def small_nve_config():
    """小体系 NVE 模拟参数"""
    return SimulationConfig(
        nc=2, scale=1.0, temperature=50.0, ensemble=EnsembleType.NVE, seed=2024
    )


# 全局测试配置
def pytest_configure(config):
    """pytest全局配置"""
    # 设置numpy错误处理
    np.seterr(all="raise")


def pytest_runtest_setup(item):
    """每个测试前的设置"""
    # 设置随机种子确保可重现性
    np.random.seed(42)
