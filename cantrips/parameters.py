"""构建参数提供者模块

参数提供者根据CI环境变量（或本地git仓库）计算项目名称、分支名、提交哈希等默认值。
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol, Union

from loguru import logger

from .constants import PARAMETER_KEYS, RELEASE_TAG_PREFIX, SHORT_HASH_LENGTH
from .utils import CommandError, CommandRunner


class ParameterProvider(Protocol):
    """按键名查询参数的能力"""

    def get(self, key: str) -> Optional[Any]:
        ...


class StaticParameterProvider:
    """基于固定字典的参数提供者"""

    def __init__(self, parameters: Optional[Mapping[str, Any]] = None) -> None:
        self.parameters: Dict[str, Any] = dict(parameters or {})

    def get(self, key: str) -> Optional[Any]:
        return self.parameters.get(key)


class EnvironmentParameterProvider:
    """基于CI环境变量的参数提供者，缺失时回退到本地git仓库"""

    def __init__(
        self,
        environ: Mapping[str, str],
        command_runner: Optional[CommandRunner] = None,
        project_dir: Optional[Union[str, Path]] = None,
    ) -> None:
        """
        初始化参数提供者

        Args:
            environ: 环境变量快照
            command_runner: 用于查询git信息的命令执行器，为空时不回退到git
            project_dir: 项目目录，用于推断项目名称
        """
        self.environ = dict(environ)
        self.command_runner = command_runner
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self._cache: Dict[str, Optional[str]] = {}

    def get(self, key: str) -> Optional[str]:
        if key not in self._cache:
            self._cache[key] = self._compute(key)
        return self._cache[key]

    def _compute(self, key: str) -> Optional[str]:
        if key == PARAMETER_KEYS["project_name"]:
            return self._project_name()
        if key == PARAMETER_KEYS["branch_name"]:
            return self._env("CIRCLE_BRANCH") or self._git("rev-parse --abbrev-ref HEAD")
        if key == PARAMETER_KEYS["short_hash"]:
            sha = self._env("CIRCLE_SHA1")
            if sha:
                return sha[:SHORT_HASH_LENGTH]
            return self._git(f"rev-parse --short={SHORT_HASH_LENGTH} HEAD")
        if key == PARAMETER_KEYS["release_version"]:
            return self._release_version()
        if key == PARAMETER_KEYS["is_release"]:
            return "true" if self._release_version() else "false"
        if key == PARAMETER_KEYS["docker_registry"]:
            return self._env("DOCKER_REGISTRY")
        return None

    def _env(self, name: str) -> Optional[str]:
        value = self.environ.get(name)
        return value or None

    def _project_name(self) -> Optional[str]:
        username = self._env("CIRCLE_PROJECT_USERNAME")
        repo_name = self._env("CIRCLE_PROJECT_REPONAME")
        if username and repo_name:
            return f"{username}/{repo_name}"
        return repo_name or self.project_dir.resolve().name or None

    def _release_version(self) -> Optional[str]:
        tag = self._env("CIRCLE_TAG")
        if tag and tag.startswith(RELEASE_TAG_PREFIX):
            return tag[len(RELEASE_TAG_PREFIX):] or None
        return None

    def _git(self, arguments: str) -> Optional[str]:
        if self.command_runner is None:
            return None
        try:
            output = self.command_runner.run(f"git {arguments}", f"查询git信息: git {arguments}")
        except CommandError as e:
            logger.warning(f"无法获取git信息: {e}")
            return None
        return output.stdout.strip() or None
