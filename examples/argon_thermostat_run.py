#!/usr/bin/env python3
"""
氩晶体 NVT 控温示例

从 ``argon.yaml`` 构建模拟器，先在初始温度下平衡，再把目标温度
切换到 20 K，统计切换后温度相对目标值的偏差。

运行:
    python examples/argon_thermostat_run.py [config.yaml ...]
"""

import logging
import os
import sys

from argonmd.core.config import ConfigManager, SimulationConfig
from argonmd.md.simulator import ArgonMDSimulator
from argonmd.utils.utils import ThermoCollector, setup_logging

logger = logging.getLogger(__name__)

EQUILIBRATION_STEPS = 200
PRODUCTION_STEPS = 500
QUENCH_TEMPERATURE = 20.0


def main(files):
    cfg = ConfigManager(files=files)
    run_dir = cfg.make_output_dir("argon_nvt")
    setup_logging(run_dir)
    cfg.snapshot(run_dir)

    sim = ArgonMDSimulator(SimulationConfig.from_manager(cfg))
    logger.info(
        f"N={sim.num_atom}, a={sim.get_latticeconst():.4f} nm, "
        f"L={sim.get_periodiclen():.4f} nm"
    )

    collector = ThermoCollector()
    sim.run(EQUILIBRATION_STEPS, callback=collector.collect)
    equil = collector.statistics("T_K", skip=EQUILIBRATION_STEPS // 2)
    logger.info(
        f"平衡段: T = {equil['mean']:.2f} ± {equil['std']:.2f} K "
        f"(目标 {sim.get_tgiven():.1f} K)"
    )

    collector.clear()
    sim.set_tgiven(QUENCH_TEMPERATURE)
    sim.run(PRODUCTION_STEPS, callback=collector.collect)

    skip = PRODUCTION_STEPS // 2
    stats = collector.statistics("T_K", skip=skip)
    pressure = collector.statistics("P_atm", skip=skip)
    logger.info(
        f"降温后: T = {stats['mean']:.2f} ± {stats['std']:.2f} K, "
        f"RMSE = {collector.rmse('T_K', QUENCH_TEMPERATURE, skip=skip):.2f} K, "
        f"P = {pressure['mean']:.1f} atm"
    )
    logger.info(f"模拟时间 {sim.get_deltat():.3f} ps，结果目录 {run_dir}")


if __name__ == "__main__":
    default = os.path.join(os.path.dirname(__file__), "argon.yaml")
    main(sys.argv[1:] or [default])
