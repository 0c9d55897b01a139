"""
核心模块 - 常数、粒子数据结构、晶格初始化与配置管理
"""

__all__ = [
    "CONSTANTS",
    "EnsembleType",
    "ParticleSystem",
    "FCCLatticeBuilder",
    "NumpyRandomSource",
    "ConfigManager",
    "SimulationConfig",
]


# 延迟导入避免循环依赖
def __getattr__(name):
    if name == "CONSTANTS":
        from .constants import CONSTANTS
        return CONSTANTS
    elif name == "EnsembleType":
        from .structure import EnsembleType
        return EnsembleType
    elif name == "ParticleSystem":
        from .structure import ParticleSystem
        return ParticleSystem
    elif name == "FCCLatticeBuilder":
        from .crystalline_structures import FCCLatticeBuilder
        return FCCLatticeBuilder
    elif name == "NumpyRandomSource":
        from .random_source import NumpyRandomSource
        return NumpyRandomSource
    elif name == "ConfigManager":
        from .config import ConfigManager
        return ConfigManager
    elif name == "SimulationConfig":
        from .config import SimulationConfig
        return SimulationConfig
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
