"""
ArgonMD - 氩原子分子动力学模拟器

在约化单位下模拟周期性 FCC 氩体系（Lennard-Jones 对势），
支持 NVE 与 Woodcock 速度标度的 NVT 系综。
"""

__version__ = "1.0.0"

from . import core, md, potentials, utils

__all__ = ["core", "potentials", "md", "utils"]
