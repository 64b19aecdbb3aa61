"""基础管理器类"""

from typing import Optional

from loguru import logger

from ..parameters import ParameterProvider, StaticParameterProvider
from ..utils import CommandRunner, ShellCommandRunner


class CredentialsError(Exception):
    """凭证缺失错误"""

    pass


class BaseManager:
    """所有管理器类的基类，持有命令执行器和参数提供者"""

    command_runner: CommandRunner
    parameter_provider: ParameterProvider

    def __init__(
        self,
        command_runner: Optional[CommandRunner] = None,
        parameter_provider: Optional[ParameterProvider] = None,
    ) -> None:
        """
        初始化基础管理器

        Args:
            command_runner: 外部命令执行器，默认使用ShellCommandRunner
            parameter_provider: 参数提供者，默认使用空的静态参数
        """
        self.command_runner = command_runner or ShellCommandRunner()
        self.parameter_provider = parameter_provider or StaticParameterProvider()
        logger.debug(f"{type(self).__name__} 初始化完成")
