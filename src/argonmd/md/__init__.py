"""分子动力学模块"""

__all__ = [
    "ArgonMDSimulator",
    "VerletIntegrator",
    "EnsembleConsistencyError",
]


# 延迟导入避免循环依赖
def __getattr__(name):
    if name == "ArgonMDSimulator":
        from .simulator import ArgonMDSimulator

        return ArgonMDSimulator
    elif name == "VerletIntegrator":
        from .integrators import VerletIntegrator

        return VerletIntegrator
    elif name == "EnsembleConsistencyError":
        from .integrators import EnsembleConsistencyError

        return EnsembleConsistencyError
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
