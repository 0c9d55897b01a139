r"""MD 积分接口定义

主要类
------

MDComponent
    MD 组件基类

IntegrationScheme
    积分方案基类：根据当前受力推进一个时间步的位置与速度
"""

import abc


class MDComponent:
    """MD组件基类

    所有MD相关组件的基础抽象类，用于统一接口标准。
    """

    pass


class IntegrationScheme(MDComponent):
    r"""积分方案基类。

    受力由调用方预先写入粒子体系；方案只负责位置与速度的更新。
    """

    @abc.abstractmethod
    def step(self, system, step_count: int, temperature_target: float):
        r"""执行一个完整积分步。

        Parameters
        ----------
        system : ParticleSystem
            粒子体系
        step_count : int
            当前步计数（从 1 开始）
        temperature_target : float
            约化目标温度
        """
        pass
