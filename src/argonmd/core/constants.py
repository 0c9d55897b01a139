#!/usr/bin/env python3
r"""
物理常数与单位换算模块

模拟内部全部使用约化（无量纲）单位：能量以 LJ 势阱深度 :math:`\varepsilon`、
长度以 :math:`\sigma`、时间以

.. math::
    \tau = \sqrt{\frac{m\,\sigma^2}{\varepsilon}}

为单位。本模块提供一张进程级只读常数表及约化单位与物理单位之间的换算函数。

常数表在 :func:`build_constants` 中按依赖顺序一次性构建：先确定基本常数，
再由质量、:math:`\sigma`、:math:`\varepsilon` 推导 :math:`\tau`。

Notes
-----
数值取自氩的常用 LJ 参数（:math:`\sigma = 3.405` Å，
:math:`\varepsilon/k_B \approx 119.8` K）。
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PhysicalConstants:
    """只读物理常数表（SI 单位，模拟参数为约化单位）

    Attributes
    ----------
    SIGMA : float
        LJ 长度参数 (m)
    YPSILON : float
        LJ 势阱深度 (J)
    KB : float
        玻尔兹曼常数 (J/K)
    AVOGADRO_CONSTANT : float
        阿伏伽德罗常数 (1/mol)
    MOLAR_MASS : float
        氩的摩尔质量 (kg/mol)
    HARTREE : float
        1 Hartree 对应的能量 (J)
    ATM : float
        Pa → atm 换算系数
    VDW_RADIUS : float
        氩的范德华半径 (m)，供可视化使用
    TAU : float
        约化时间单位 (s)，由 MOLAR_MASS、SIGMA、YPSILON 推导
    DT : float
        时间步长（约化单位）
    ALPHA : float
        Woodcock 恒温器阻尼系数
    RC : float
        截断半径（约化单位）
    NCP : int
        对相互作用求和的周期镜像壳层数
    FIRSTNC : int
        默认超胞重复数
    FIRSTSCALE : float
        默认晶格常数缩放
    FIRSTTEMP : float
        默认目标温度 (K)
    """

    SIGMA: float
    YPSILON: float
    KB: float
    AVOGADRO_CONSTANT: float
    MOLAR_MASS: float
    HARTREE: float
    ATM: float
    VDW_RADIUS: float
    TAU: float
    DT: float
    ALPHA: float
    RC: float
    NCP: int
    FIRSTNC: int
    FIRSTSCALE: float
    FIRSTTEMP: float


def build_constants() -> PhysicalConstants:
    """按依赖顺序构建常数表

    Returns
    -------
    PhysicalConstants
        不可变常数表
    """
    sigma = 3.405e-10
    ypsilon = 1.6540172624e-21
    avogadro = 6.022140857e23
    molar_mass = 0.039948

    # τ 依赖于单原子质量、σ 与 ε，必须在三者之后计算
    tau = math.sqrt(molar_mass / avogadro * sigma * sigma / ypsilon)

    return PhysicalConstants(
        SIGMA=sigma,
        YPSILON=ypsilon,
        KB=1.3806488e-23,
        AVOGADRO_CONSTANT=avogadro,
        MOLAR_MASS=molar_mass,
        HARTREE=4.35974465054e-18,
        ATM=9.86923266716013e-6,
        VDW_RADIUS=1.88e-10,
        TAU=tau,
        DT=0.001,
        ALPHA=0.2,
        RC=2.5,
        NCP=3,
        FIRSTNC=4,
        FIRSTSCALE=1.0,
        FIRSTTEMP=50.0,
    )


CONSTANTS: PhysicalConstants = build_constants()
"""进程级唯一常数表实例。"""


def lattice_constant(scale: float) -> float:
    r"""FCC 晶格常数（约化单位）

    .. math::
        a = 2^{2/3}\,s

    Parameters
    ----------
    scale : float
        晶格常数缩放因子

    Returns
    -------
    float
        晶格常数
    """
    return 2.0 ** (2.0 / 3.0) * scale


def dimensionless_to_hartree(e: float) -> float:
    """约化能量 → Hartree"""
    return e * CONSTANTS.YPSILON / CONSTANTS.HARTREE


def reduced_length_to_nm(length: float) -> float:
    """约化长度 → nm"""
    return CONSTANTS.SIGMA * length * 1.0e9


def reduced_time_to_ps(t: float) -> float:
    """约化时间 → ps"""
    return CONSTANTS.TAU * t * 1.0e12


def kelvin_to_reduced(temperature: float) -> float:
    """绝对温度 (K) → 约化温度"""
    return temperature * CONSTANTS.KB / CONSTANTS.YPSILON


def reduced_to_kelvin(temperature: float) -> float:
    """约化温度 → 绝对温度 (K)"""
    return CONSTANTS.YPSILON / CONSTANTS.KB * temperature


def pressure_to_atm(
    num_atoms: int, temperature: float, virial: float, periodic_len: float
) -> float:
    r"""由温度与维里计算压强 (atm)

    .. math::
        P = \frac{N\varepsilon T^{*} + \varepsilon W/3}{(\sigma L)^3}

    其中 :math:`T^{*}` 为约化温度，:math:`W = \sum r F(r)` 为约化维里，
    :math:`L` 为约化盒长。

    Parameters
    ----------
    num_atoms : int
        原子数
    temperature : float
        约化温度
    virial : float
        约化维里
    periodic_len : float
        约化盒长

    Returns
    -------
    float
        压强 (atm)
    """
    volume = (CONSTANTS.SIGMA * periodic_len) ** 3
    ideal = num_atoms * CONSTANTS.YPSILON * temperature
    return (ideal + virial * CONSTANTS.YPSILON / 3.0) / volume * CONSTANTS.ATM
