"""镜像构建相关功能"""

import shlex
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Iterable, List, Mapping, Optional, Set, Tuple, Union

from loguru import logger

from ...constants import DEFAULT_BUILD_CONTEXT
from ...utils import CommandError, CommandRunner, build_arg_pairs
from .base import BuildGroup, ImageBuildError
from .descriptor import ImageDescriptorParser, RawDescriptor

BuildArgs = Optional[Union[Mapping[str, str], Iterable[Tuple[str, str]]]]


class ImageBuilder:
    """镜像构建器类，每个Dockerfile执行一次构建，同时打上该组的所有标签"""

    def __init__(
        self,
        command_runner: CommandRunner,
        parser: ImageDescriptorParser,
        context: str = DEFAULT_BUILD_CONTEXT,
        max_workers: int = 1,
    ) -> None:
        """
        初始化镜像构建器

        Args:
            command_runner: 外部命令执行器
            parser: 镜像描述解析器
            context: 构建上下文目录
            max_workers: 并行构建的最大数量，1表示顺序构建
        """
        self.command_runner = command_runner
        self.parser = parser
        self.context = context
        self.max_workers = max(1, max_workers)

    def build(
        self,
        images: RawDescriptor = None,
        build_args: BuildArgs = None,
        no_cache: bool = False,
        pull: bool = True,
    ) -> BuildGroup:
        """
        构建Docker镜像

        Args:
            images: 镜像描述，为空时使用默认镜像名称
            build_args: 构建参数
            no_cache: 是否禁用构建缓存
            pull: 是否总是拉取最新的基础镜像

        Returns:
            BuildGroup: 已构建的分组

        Raises:
            DescriptorError: 镜像描述无效时抛出，此时不会执行任何命令
            ImageBuildError: 任意一组构建失败时抛出，剩余的构建不再执行
        """
        build_group = self.parser.resolve(images)
        arg_pairs = build_arg_pairs(build_args)
        commands = [
            (build_file, targets, self.build_command(build_file, targets, arg_pairs, no_cache, pull))
            for build_file, targets in build_group.items()
        ]

        if self.max_workers > 1 and len(commands) > 1 and not self._has_shared_targets(build_group):
            self._build_concurrently(commands)
        else:
            for build_file, targets, command in commands:
                self._run_build(build_file, targets, command)

        return build_group

    def build_command(
        self,
        build_file: str,
        targets: List[str],
        build_args: List[Tuple[str, str]],
        no_cache: bool = False,
        pull: bool = True,
    ) -> str:
        """
        生成构建命令

        Args:
            build_file: Dockerfile路径
            targets: 该Dockerfile对应的所有 "name:tag"
            build_args: 构建参数键值对
            no_cache: 是否禁用构建缓存
            pull: 是否拉取基础镜像

        Returns:
            str: docker build 命令
        """
        parts = ["docker", "build", "-f", shlex.quote(build_file)]
        for target in targets:
            parts.extend(["-t", shlex.quote(target)])
        if no_cache:
            parts.append("--no-cache")
        if pull:
            parts.append("--pull")
        for key, value in build_args:
            parts.extend(["--build-arg", shlex.quote(f"{key}={value}")])
        parts.append(shlex.quote(self.context))
        return " ".join(parts)

    @staticmethod
    def _has_shared_targets(build_group: BuildGroup) -> bool:
        """同一 "name:tag" 出现在多个分组中时必须按顺序构建，后构建的分组覆盖先构建的"""
        seen: Set[str] = set()
        for targets in build_group.values():
            group_targets = set(targets)
            if seen & group_targets:
                logger.debug("多个Dockerfile构建相同的镜像标签，按顺序构建")
                return True
            seen |= group_targets
        return False

    def _run_build(self, build_file: str, targets: List[str], command: str) -> None:
        logger.warning(f"开始使用 {build_file} 构建镜像 {', '.join(targets)}...")
        try:
            self.command_runner.run(command, f"使用 {build_file} 构建镜像 {', '.join(targets)}")
        except CommandError as e:
            logger.error(f"构建镜像失败: {e}")
            raise ImageBuildError(build_file, e.return_code, command) from e
        logger.success(f"镜像 {', '.join(targets)} 构建成功")

    def _build_concurrently(self, commands: List[Tuple[str, List[str], str]]) -> None:
        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            futures = [executor.submit(self._run_build, *item) for item in commands]
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
            for future in futures:
                if future in done and future.exception() is not None:
                    raise future.exception()
        finally:
            # 取消尚未开始的构建，等待正在运行的构建结束
            executor.shutdown(wait=True, cancel_futures=True)
