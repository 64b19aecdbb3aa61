"""镜像推送相关功能"""

import shlex
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

from loguru import logger

from ...utils import CommandError, CommandRunner
from .base import ImagePushError, PushFailureRecord
from .defaults import DefaultsResolver
from .descriptor import ImageDescriptorParser, RawDescriptor
from .tag import ImageTagger
from .utils import normalize_registry


class ImagePusher:
    """镜像推送器类

    与构建不同，推送是尽力而为的：单个镜像推送失败不会中止其余镜像，
    所有镜像尝试完毕后再汇总报告失败的目标。
    """

    def __init__(
        self,
        command_runner: CommandRunner,
        parser: ImageDescriptorParser,
        defaults: Optional[DefaultsResolver] = None,
        max_workers: int = 1,
    ) -> None:
        """
        初始化镜像推送器

        Args:
            command_runner: 外部命令执行器
            parser: 镜像描述解析器
            defaults: 用于获取默认仓库地址
            max_workers: 并行推送的最大数量
        """
        self.command_runner = command_runner
        self.parser = parser
        self.defaults = defaults
        self.max_workers = max(1, max_workers)
        self.tagger = ImageTagger(command_runner)

    def push(self, images: RawDescriptor = None, registry: Optional[str] = None) -> List[str]:
        """
        推送镜像到远程仓库

        Args:
            images: 镜像描述，为空时使用默认镜像名称
            registry: 远程仓库地址，为空时使用 DockerRegistry 参数，仍为空则直接推送本地名称

        Returns:
            List[str]: 推送成功的完整镜像名称

        Raises:
            DescriptorError: 镜像描述无效时抛出，此时不会执行任何命令
            ImagePushError: 至少一个镜像推送失败时，在全部尝试后抛出
        """
        build_group = self.parser.resolve(images)
        registry = normalize_registry(registry)
        if registry is None and self.defaults is not None:
            registry = normalize_registry(self.defaults.default_registry())

        targets = [target for group_targets in build_group.values() for target in group_targets]
        if not targets:
            logger.info("没有需要推送的镜像")
            return []

        if registry:
            logger.info(f"推送 {len(targets)} 个镜像到仓库 {registry}")
        else:
            logger.warning("未配置仓库地址，将直接推送本地镜像名称")

        if self.max_workers > 1 and len(targets) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(lambda target: self._push_target(target, registry), targets))
        else:
            results = [self._push_target(target, registry) for target in targets]

        pushed = [reference for reference, failure in results if failure is None]
        failures = [failure for _, failure in results if failure is not None]
        if failures:
            for failure in failures:
                logger.error(f"推送镜像 {failure.target} 失败 ({failure.stage}, 退出码 {failure.return_code})")
            raise ImagePushError(failures)

        logger.success(f"{len(pushed)} 个镜像推送成功")
        return pushed

    def _push_target(self, target: str, registry: Optional[str]) -> Tuple[str, Optional[PushFailureRecord]]:
        reference = self.tagger.add_registry_prefix(target, registry)

        if reference != target:
            try:
                self.tagger.tag(target, reference)
            except CommandError as e:
                return reference, PushFailureRecord(reference, "tag", e.command, e.return_code)

        command = f"docker push {shlex.quote(reference)}"
        logger.warning(f"开始推送镜像 {reference}...")
        try:
            self.command_runner.run(command, f"推送镜像 {reference}")
        except CommandError as e:
            return reference, PushFailureRecord(reference, "push", e.command, e.return_code)

        logger.success(f"镜像 {reference} 推送成功")
        return reference, None
