"""
随机数源

初速度方向由外部随机数源提供：按需返回给定闭区间上相互独立的均匀分布样本。
"""

import abc

import numpy as np


class RandomSource(abc.ABC):
    """均匀分布随机数源接口"""

    @abc.abstractmethod
    def uniform(self, low: float, high: float, size) -> np.ndarray:
        """返回 ``[low, high]`` 上的独立均匀样本，形状为 ``size``"""
        pass


class NumpyRandomSource(RandomSource):
    """基于 ``numpy.random.Generator`` 的随机数源

    Parameters
    ----------
    seed : int | None, optional
        随机种子；相同种子给出相同样本序列
    """

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def uniform(self, low: float, high: float, size) -> np.ndarray:
        return self._rng.uniform(low, high, size)
