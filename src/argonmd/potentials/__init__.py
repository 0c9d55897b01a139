#!/usr/bin/env python3
"""
ArgonMD - 势能模块

采用延迟导入模式以避免循环依赖并提高加载性能。
"""

__all__ = ["LennardJonesForceEngine", "ForceResult", "GeometryError"]


def __getattr__(name):
    if name == "LennardJonesForceEngine":
        from .lennard_jones import LennardJonesForceEngine

        return LennardJonesForceEngine
    elif name == "ForceResult":
        from .lennard_jones import ForceResult

        return ForceResult
    elif name == "GeometryError":
        from .lennard_jones import GeometryError

        return GeometryError
    else:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
