"""Docker镜像管理相关功能模块

该子包包含镜像管理相关的各个功能模块，如镜像描述解析、构建、推送、标签管理和仓库登录等。
"""

from .auth import RegistryAuthenticator, RegistryCredentials
from .base import (
    BuildGroup,
    DescriptorError,
    DescriptorFormat,
    ImageBuildError,
    ImageDescriptor,
    ImagePushError,
    ParsedDescriptor,
    PushFailureRecord,
)
from .build import ImageBuilder
from .defaults import DefaultsResolver
from .descriptor import ImageDescriptorParser
from .push import ImagePusher
from .tag import ImageTagger
from .utils import normalize_registry, parse_image_name

__all__ = [
    "BuildGroup",
    "DescriptorError",
    "DescriptorFormat",
    "ImageBuildError",
    "ImageDescriptor",
    "ImagePushError",
    "ParsedDescriptor",
    "PushFailureRecord",
    "RegistryAuthenticator",
    "RegistryCredentials",
    "ImageBuilder",
    "DefaultsResolver",
    "ImageDescriptorParser",
    "ImagePusher",
    "ImageTagger",
    "normalize_registry",
    "parse_image_name",
]
