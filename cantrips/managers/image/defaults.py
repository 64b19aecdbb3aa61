"""镜像默认名称与标签的计算"""

from typing import Any, List, Optional

from ...constants import ERROR_MESSAGES, PARAMETER_KEYS, TRUTHY_VALUES
from ...parameters import ParameterProvider
from ...string_utils import normalize
from .base import DescriptorError


def _is_truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY_VALUES


class DefaultsResolver:
    """根据参数提供者计算默认镜像名称和标签"""

    def __init__(self, parameter_provider: ParameterProvider) -> None:
        self.parameter_provider = parameter_provider

    def _require(self, key: str) -> Any:
        value = self.parameter_provider.get(key)
        if value is None or value == "":
            raise DescriptorError(ERROR_MESSAGES["parameter_missing"].format(key), key)
        return value

    def default_image_name(self) -> str:
        """
        计算默认镜像名称

        Returns:
            str: 规范化后的项目名称
        """
        project_name = self._require(PARAMETER_KEYS["project_name"])
        try:
            return normalize(project_name)
        except ValueError as e:
            raise DescriptorError(str(e), project_name) from e

    def default_tags(self) -> List[str]:
        """
        计算默认标签，发布模式下使用版本号，否则使用规范化的提交哈希

        Returns:
            List[str]: 只包含一个标签的列表
        """
        if _is_truthy(self.parameter_provider.get(PARAMETER_KEYS["is_release"])):
            return [str(self._require(PARAMETER_KEYS["release_version"]))]

        short_hash = self._require(PARAMETER_KEYS["short_hash"])
        try:
            return [normalize(short_hash)]
        except ValueError as e:
            raise DescriptorError(str(e), short_hash) from e

    def default_registry(self) -> Optional[str]:
        return self.parameter_provider.get(PARAMETER_KEYS["docker_registry"]) or None

    def default_descriptor(self, include_default_tags: bool = False) -> str:
        """
        生成默认的镜像描述字符串

        Args:
            include_default_tags: 是否在latest之外追加默认标签

        Returns:
            str: 形如 "name" 或 "name,name:tag" 的描述字符串
        """
        name = self.default_image_name()
        if not include_default_tags:
            return name
        fragments = [name] + [f"{name}:{tag}" for tag in self.default_tags()]
        return ",".join(fragments)
