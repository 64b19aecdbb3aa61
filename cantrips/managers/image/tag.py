"""镜像标签管理相关功能"""

import shlex
from typing import Optional

from loguru import logger

from ...utils import CommandOutput, CommandRunner
from .utils import normalize_registry


class ImageTagger:
    """镜像标签管理器类"""

    def __init__(self, command_runner: CommandRunner) -> None:
        """
        初始化镜像标签管理器

        Args:
            command_runner: 外部命令执行器
        """
        self.command_runner = command_runner

    def tag(self, source_tag: str, new_tag: str) -> CommandOutput:
        """
        为镜像添加新标签

        Args:
            source_tag: 源镜像标签
            new_tag: 新标签

        Returns:
            CommandOutput: 命令输出

        Raises:
            CommandError: docker tag 失败时抛出
        """
        output = self.command_runner.run(
            f"docker tag {shlex.quote(source_tag)} {shlex.quote(new_tag)}",
            f"为镜像 {source_tag} 添加标签 {new_tag}",
        )
        logger.success(f"已为镜像 {source_tag} 添加标签 {new_tag}")
        return output

    @staticmethod
    def add_registry_prefix(image_tag: str, registry: Optional[str]) -> str:
        """
        为镜像添加注册表前缀

        Args:
            image_tag: 镜像标签
            registry: 注册表，为空时不添加前缀

        Returns:
            str: 添加前缀后的镜像标签
        """
        registry = normalize_registry(registry)
        if registry:
            return f"{registry}/{image_tag}"
        return image_tag
