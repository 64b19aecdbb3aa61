"""镜像管理器类 - 门面模式实现"""

from typing import List, Optional

from ..parameters import ParameterProvider
from ..utils import CommandOutput, CommandRunner
from .base_manager import BaseManager
from .config_manager import DockerSettings
from .image.auth import RegistryAuthenticator
from .image.base import BuildGroup, ParsedDescriptor
from .image.build import BuildArgs, ImageBuilder
from .image.defaults import DefaultsResolver
from .image.descriptor import ImageDescriptorParser, RawDescriptor
from .image.push import ImagePusher
from .image.tag import ImageTagger


class ImageManager(BaseManager):
    """镜像管理器类，用于解析镜像描述、构建、推送镜像以及登录仓库"""

    def __init__(
        self,
        settings: Optional[DockerSettings] = None,
        command_runner: Optional[CommandRunner] = None,
        parameter_provider: Optional[ParameterProvider] = None,
    ) -> None:
        """
        初始化镜像管理器

        Args:
            settings: Docker相关配置
            command_runner: 外部命令执行器
            parameter_provider: 参数提供者
        """
        super().__init__(command_runner, parameter_provider)
        self.settings = settings or DockerSettings()

        # 初始化子组件
        self.defaults = DefaultsResolver(self.parameter_provider)
        self.parser = ImageDescriptorParser(self.defaults)
        self.builder = ImageBuilder(
            self.command_runner,
            self.parser,
            context=self.settings.context,
            max_workers=self.settings.max_workers,
        )
        self.pusher = ImagePusher(
            self.command_runner, self.parser, self.defaults, max_workers=self.settings.max_workers
        )
        self.tagger = ImageTagger(self.command_runner)
        self.authenticator = RegistryAuthenticator(
            self.command_runner,
            default_username=self.settings.username,
            default_password=self.settings.password,
            default_registry=self.settings.registry,
        )

    def resolve_images(self, images: RawDescriptor = None) -> BuildGroup:
        return self.parser.resolve(images)

    def parse_images(self, images: RawDescriptor = None) -> ParsedDescriptor:
        return self.parser.parse(images)

    def default_images(self, include_default_tags: bool = False) -> str:
        """
        生成默认镜像描述

        Args:
            include_default_tags: 是否包含提交哈希或版本号标签

        Returns:
            str: 默认镜像描述字符串
        """
        return self.defaults.default_descriptor(include_default_tags)

    def build_image(
        self,
        images: RawDescriptor = None,
        build_args: BuildArgs = None,
        no_cache: bool = False,
        pull: bool = True,
    ) -> BuildGroup:
        """
        构建Docker镜像

        Args:
            images: 镜像描述
            build_args: 构建参数
            no_cache: 是否禁用构建缓存
            pull: 是否拉取最新的基础镜像

        Returns:
            BuildGroup: 已构建的分组

        Raises:
            DescriptorError: 镜像描述无效时抛出
            ImageBuildError: 构建失败时抛出
        """
        return self.builder.build(images, build_args, no_cache=no_cache, pull=pull)

    def push_image(self, images: RawDescriptor = None, registry: Optional[str] = None) -> List[str]:
        """
        推送镜像到远程仓库

        Args:
            images: 镜像描述
            registry: 远程仓库地址，为空时依次使用配置和 DockerRegistry 参数

        Returns:
            List[str]: 推送成功的完整镜像名称

        Raises:
            DescriptorError: 镜像描述无效时抛出
            ImagePushError: 至少一个镜像推送失败时抛出
        """
        return self.pusher.push(images, registry or self.settings.registry)

    def tag_image(self, source_tag: str, new_tag: str) -> CommandOutput:
        return self.tagger.tag(source_tag, new_tag)

    def login(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        registry: Optional[str] = None,
    ) -> CommandOutput:
        return self.authenticator.login(username, password, registry)

    def logout(self, registry: Optional[str] = None) -> CommandOutput:
        return self.authenticator.logout(registry)
