"""
工具模块
"""

__all__ = ["ThermoCollector", "setup_logging", "block_bounds", "set_num_threads"]


# 延迟导入避免循环依赖
def __getattr__(name):
    if name == "ThermoCollector":
        from .utils import ThermoCollector
        return ThermoCollector
    elif name == "setup_logging":
        from .utils import setup_logging
        return setup_logging
    elif name == "block_bounds":
        from .parallel import block_bounds
        return block_bounds
    elif name == "set_num_threads":
        from .parallel import set_num_threads
        return set_num_threads
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
