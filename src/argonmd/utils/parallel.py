"""
数据并行辅助工具

粒子循环按连续、互不重叠的下标区间划分后交给 numba ``prange`` 执行。
标量（势能、维里）先在各区间内累加为局部和，写入 ``partials`` 数组，
并行区结束后再统一合并。
"""

import logging

import numba
import numpy as np

logger = logging.getLogger(__name__)


def block_bounds(n_items: int, n_blocks: int) -> np.ndarray:
    """将 ``[0, n_items)`` 划分为 ``n_blocks`` 个连续区间

    Parameters
    ----------
    n_items : int
        元素总数
    n_blocks : int
        区间数，至少为 1

    Returns
    -------
    numpy.ndarray
        长度为 ``n_blocks + 1`` 的 int64 边界数组，第 b 个区间为
        ``[bounds[b], bounds[b + 1])``

    Raises
    ------
    ValueError
        如果 n_items 为负或 n_blocks 小于 1
    """
    if n_items < 0:
        raise ValueError(f"元素数不能为负，得到 {n_items}")
    if n_blocks < 1:
        raise ValueError(f"区间数必须至少为 1，得到 {n_blocks}")
    return np.linspace(0, n_items, n_blocks + 1).astype(np.int64)


def default_partitions(n_items: int) -> int:
    """默认区间数：不超过元素数的 numba 线程数"""
    return max(1, min(n_items, numba.get_num_threads()))


def combine_partials(partials: np.ndarray) -> float:
    """合并各区间的局部和

    只能在并行区完全结束后调用。
    """
    return float(np.sum(partials))


def set_num_threads(num_threads: int | None) -> int:
    """设置 numba 并行线程数

    Parameters
    ----------
    num_threads : int | None
        线程数；``None`` 表示保持 numba 默认值

    Returns
    -------
    int
        实际使用的线程数
    """
    if num_threads is not None:
        if num_threads < 1 or num_threads > numba.config.NUMBA_NUM_THREADS:
            raise ValueError(
                f"线程数必须位于 [1, {numba.config.NUMBA_NUM_THREADS}]，得到 {num_threads}"
            )
        numba.set_num_threads(num_threads)
        logger.debug(f"numba 线程数设置为 {num_threads}")
    return numba.get_num_threads()
