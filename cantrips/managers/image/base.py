"""镜像管理基础类型定义"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from ...constants import DEFAULT_FILES, DEFAULT_TAG

# 构建文件 -> 按解析顺序排列的 "name:tag" 列表
BuildGroup = Dict[str, List[str]]


class DescriptorError(Exception):
    """镜像描述错误"""

    def __init__(self, message: str, value: Optional[str] = None) -> None:
        self.value = value
        super().__init__(message)


class ImageBuildError(Exception):
    """镜像构建错误"""

    def __init__(self, build_file: str, return_code: Optional[int], command: str) -> None:
        self.build_file = build_file
        self.return_code = return_code
        self.command = command
        super().__init__(f"使用 {build_file} 构建镜像失败 (退出码 {return_code}): {command}")


@dataclass(frozen=True)
class PushFailureRecord:
    """单个镜像推送失败的记录"""

    target: str
    stage: str  # "tag" 或 "push"
    command: str
    return_code: Optional[int]


class ImagePushError(Exception):
    """镜像推送错误，汇总所有失败的目标"""

    def __init__(self, failures: List[PushFailureRecord]) -> None:
        self.failures = failures
        targets = ", ".join(failure.target for failure in failures)
        super().__init__(f"{len(failures)} 个镜像推送失败: {targets}")


@dataclass(frozen=True)
class ImageDescriptor:
    """单个请求构建或推送的镜像"""

    name: str
    tag: str = DEFAULT_TAG
    build_file: str = DEFAULT_FILES["dockerfile"]

    @property
    def target(self) -> str:
        return f"{self.name}:{self.tag}"


class DescriptorFormat(Enum):
    """镜像描述的来源格式"""

    DOCUMENT = "document"
    STRING = "string"
    DEFAULT = "default"


@dataclass(frozen=True)
class ParsedDescriptor:
    """解析结果，记录使用的格式和镜像列表"""

    format: DescriptorFormat
    descriptors: List[ImageDescriptor]
