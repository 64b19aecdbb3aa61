"""镜像仓库登录相关功能"""

import shlex
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from ...constants import ENV_KEYS, ERROR_MESSAGES
from ...utils import CommandOutput, CommandRunner
from ..base_manager import CredentialsError
from .utils import normalize_registry


@dataclass(frozen=True)
class RegistryCredentials:
    """镜像仓库凭证"""

    username: str
    password: str

    @classmethod
    def resolve(
        cls,
        username: Optional[str] = None,
        password: Optional[str] = None,
        default_username: Optional[str] = None,
        default_password: Optional[str] = None,
    ) -> "RegistryCredentials":
        """
        优先使用显式参数，其次使用默认值（来自环境变量或配置）

        Raises:
            CredentialsError: 用户名或密码缺失时抛出
        """
        username = username or default_username
        password = password or default_password
        if not username:
            raise CredentialsError(ERROR_MESSAGES["credentials_missing"].format(ENV_KEYS["docker_username"]))
        if not password:
            raise CredentialsError(ERROR_MESSAGES["credentials_missing"].format(ENV_KEYS["docker_password"]))
        return cls(username, password)


class RegistryAuthenticator:
    """镜像仓库登录器类"""

    def __init__(
        self,
        command_runner: CommandRunner,
        default_username: Optional[str] = None,
        default_password: Optional[str] = None,
        default_registry: Optional[str] = None,
    ) -> None:
        """
        初始化登录器

        Args:
            command_runner: 外部命令执行器
            default_username: 未显式提供时使用的用户名
            default_password: 未显式提供时使用的密码
            default_registry: 未显式提供时使用的仓库地址
        """
        self.command_runner = command_runner
        self.default_username = default_username
        self.default_password = default_password
        self.default_registry = default_registry

    def login(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        registry: Optional[str] = None,
    ) -> CommandOutput:
        """
        登录Docker仓库，密码通过标准输入传递

        Args:
            username: 仓库用户名
            password: 仓库密码
            registry: 远程仓库地址，为空时登录默认仓库

        Returns:
            CommandOutput: 命令输出

        Raises:
            CredentialsError: 用户名或密码缺失时抛出
            CommandError: docker login 失败时抛出
        """
        credentials = RegistryCredentials.resolve(
            username, password, self.default_username, self.default_password
        )
        registry = normalize_registry(registry) or normalize_registry(self.default_registry)

        command = f"docker login -u {shlex.quote(credentials.username)} --password-stdin"
        if registry:
            command += f" {shlex.quote(registry)}"

        logger.info(f"正在登录仓库 {registry or 'docker.io'} 用户名: {credentials.username}")
        output = self.command_runner.run(
            command, f"登录仓库 {registry or 'docker.io'}", input=credentials.password
        )
        logger.success("登录仓库成功")
        return output

    def logout(self, registry: Optional[str] = None) -> CommandOutput:
        """
        退出Docker仓库

        Args:
            registry: 远程仓库地址

        Returns:
            CommandOutput: 命令输出
        """
        registry = normalize_registry(registry) or normalize_registry(self.default_registry)
        command = "docker logout"
        if registry:
            command += f" {shlex.quote(registry)}"
        output = self.command_runner.run(command, f"退出仓库 {registry or 'docker.io'}")
        logger.success("已退出仓库")
        return output
