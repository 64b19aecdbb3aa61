"""CLI工具模块，包含CLI命令行接口的辅助函数和类

环境变量只在这里读取一次，组装成只读的Settings后再传给各个管理器。
"""

import os
from pathlib import Path
from threading import Lock
from typing import Any, List, Mapping, Optional, Union

import yaml
from dotenv import load_dotenv
from loguru import logger

from .constants import DEFAULT_FILES, LOG_FORMAT
from .managers.config_manager import ConfigManager, Settings
from .managers.container_provider import ContainerProvider, DockerContainerProvider
from .managers.image.base import DescriptorError
from .managers.image_manager import ImageManager
from .parameters import EnvironmentParameterProvider
from .utils import CommandRunner, DryRunCommandRunner, ShellCommandRunner


class DryRunContainerProvider:
    """只记录命令而不启动容器的执行器"""

    def __init__(self, image: str) -> None:
        self.image = image
        self.environment: dict = {}
        self.commands: List[str] = []

    def add_environment_variable(self, name: str, value: str) -> None:
        self.environment[name] = value

    def run(self, command: str, description: str = "") -> str:
        logger.info(f"[dry-run] {description}")
        logger.info(f"[dry-run] ({self.image}) {command}")
        self.commands.append(command)
        return ""


# 项目上下文管理
class ProjectContext:
    """项目上下文管理类"""

    _instance: Optional["ProjectContext"] = None
    _lock: Lock = Lock()

    def __init__(self) -> None:
        """初始化项目上下文"""
        if ProjectContext._instance is not None:
            raise RuntimeError("ProjectContext是单例类，请使用get_instance()获取实例")
        ProjectContext._instance = self
        self.reset()

    @classmethod
    def get_instance(cls) -> "ProjectContext":
        """获取ProjectContext单例实例"""
        with cls._lock:
            if cls._instance is None:
                cls._instance = ProjectContext()
            return cls._instance

    def reset(self, project_dir: Optional[str] = None, dry_run: bool = False) -> None:
        self.project_dir = str(Path(project_dir or os.getcwd()).resolve())
        self.dry_run = dry_run
        self._settings: Optional[Settings] = None
        self._environ: Optional[Mapping[str, str]] = None

    @property
    def environ(self) -> Mapping[str, str]:
        """读取 .env 文件后的环境变量快照"""
        if self._environ is None:
            load_dotenv(os.path.join(self.project_dir, DEFAULT_FILES["env_file"]))
            self._environ = dict(os.environ)
        return self._environ

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            config_manager = ConfigManager(self.project_dir, self.environ)
            config_manager.load_config()
            self._settings = config_manager.get_settings()
        return self._settings


def configure_logging(verbose: bool = False) -> None:
    """重新配置日志输出级别"""
    logger.remove()
    logger.add(
        sink=lambda msg: print(msg, end=""),
        format=LOG_FORMAT,
        colorize=True,
        level="DEBUG" if verbose else "INFO",
    )


def get_command_runner() -> CommandRunner:
    ctx = ProjectContext.get_instance()
    if ctx.dry_run:
        return DryRunCommandRunner()
    return ShellCommandRunner(cwd=ctx.project_dir)


def get_container_provider(image: str, volumes: Optional[List[str]] = None) -> ContainerProvider:
    ctx = ProjectContext.get_instance()
    if ctx.dry_run:
        return DryRunContainerProvider(image)
    return DockerContainerProvider(image, ctx.project_dir, volumes)


def get_parameter_provider() -> EnvironmentParameterProvider:
    ctx = ProjectContext.get_instance()
    # git查询是只读的，dry-run时也直接执行
    return EnvironmentParameterProvider(ctx.environ, ShellCommandRunner(cwd=ctx.project_dir), ctx.project_dir)


def get_image_manager() -> ImageManager:
    """
    获取镜像管理器实例

    Returns:
        ImageManager: 使用当前上下文配置的镜像管理器
    """
    ctx = ProjectContext.get_instance()
    return ImageManager(ctx.settings.docker, get_command_runner(), get_parameter_provider())


def eb_cli_volumes(settings: Settings) -> List[str]:
    return [f"{os.path.join(settings.home_dir, '.aws')}:/home/aws/.aws"]


def load_images_file(path: Union[str, Path]) -> Any:
    """
    从YAML或JSON文件读取文档格式的镜像描述

    Args:
        path: 文件路径

    Returns:
        Any: 解析后的文档

    Raises:
        DescriptorError: 文件为空时抛出
    """
    with open(path, "r", encoding="utf-8") as f:
        document = yaml.safe_load(f)
    if document is None:
        raise DescriptorError(f"镜像描述文件为空: {path}", str(path))
    return document


def select_images(
    image_manager: ImageManager,
    images: Optional[str],
    images_file: Optional[str],
    default_tags: bool,
) -> Any:
    """
    根据命令行参数确定镜像描述

    Args:
        image_manager: 镜像管理器
        images: 命令行给出的镜像描述
        images_file: 镜像描述文件
        default_tags: 未给出镜像描述时是否包含默认标签

    Returns:
        Any: 镜像描述，None表示使用默认镜像名称
    """
    if images and images_file:
        raise ValueError("--images 和 --images-file 不能同时使用")
    if images_file:
        return load_images_file(images_file)
    if images:
        return images
    if default_tags:
        return image_manager.default_images(include_default_tags=True)
    return None
