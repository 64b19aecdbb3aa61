"""镜像描述解析

镜像描述说明要构建或推送哪些镜像、使用哪些标签和Dockerfile，支持两种格式：

字符串格式，逗号分隔的片段列表，每个片段为 ``<name>[:<tag>][[<buildFile>]]``，例如::

    api,api:v2,worker:1.0[docker/worker.Dockerfile]

文档格式（JSON字符串或已解析的字典）::

    {"docker": {"api": {"tags": ["latest", "v2"]},
                "worker": {"dockerFile": "docker/worker.Dockerfile", "tags": ["1.0"]}}}

两种格式都会被解析为同一种规范结构：构建文件 -> "name:tag" 列表。
先尝试按文档格式解析，不是文档时再按字符串格式解析。
"""

import json
import re
from typing import Any, Dict, List, Mapping, Optional, Union

from loguru import logger

from ...constants import (
    DEFAULT_FILES,
    DEFAULT_TAG,
    DESCRIPTOR_FRAGMENT_PATTERN,
    DESCRIPTOR_SEPARATOR,
    DOCKER_TAG_PATTERN,
    DOCUMENT_DOCKERFILE_KEY,
    DOCUMENT_ROOT_KEY,
    DOCUMENT_TAGS_KEY,
    ERROR_MESSAGES,
)
from ...string_utils import is_normalized
from .base import (
    BuildGroup,
    DescriptorError,
    DescriptorFormat,
    ImageDescriptor,
    ParsedDescriptor,
)
from .defaults import DefaultsResolver
from .utils import parse_image_name

RawDescriptor = Optional[Union[str, Mapping[str, Any]]]

_FRAGMENT = re.compile(DESCRIPTOR_FRAGMENT_PATTERN)
_LEADING_NAME = re.compile(r"[^:\[.]*")
_DOCKER_TAG = re.compile(DOCKER_TAG_PATTERN)


def _validate_name(name: Any) -> str:
    if not isinstance(name, str) or not is_normalized(name):
        raise DescriptorError(ERROR_MESSAGES["name_not_normalized"].format(name), str(name))
    return name


def _validate_tag(name: str, tag: Any) -> str:
    if not isinstance(tag, str) or not _DOCKER_TAG.fullmatch(tag):
        raise DescriptorError(ERROR_MESSAGES["tag_invalid"].format(name, tag), str(tag))
    return tag


def _validate_build_file(name: str, build_file: Any) -> str:
    if not isinstance(build_file, str) or not build_file.strip():
        raise DescriptorError(ERROR_MESSAGES["build_file_empty"].format(name), name)
    return build_file


class ImageDescriptorParser:
    """镜像描述解析器"""

    def __init__(self, defaults: Optional[DefaultsResolver] = None) -> None:
        """
        初始化镜像描述解析器

        Args:
            defaults: 未提供镜像描述时用于计算默认镜像名称
        """
        self.defaults = defaults

    def resolve(self, raw: RawDescriptor) -> BuildGroup:
        """
        将镜像描述解析为按构建文件分组的镜像列表

        Args:
            raw: 字符串或文档格式的镜像描述，为空时使用默认镜像名称

        Returns:
            BuildGroup: 构建文件 -> "name:tag" 列表

        Raises:
            DescriptorError: 镜像描述无效时抛出
        """
        return self.group(self.parse(raw).descriptors)

    def parse(self, raw: RawDescriptor) -> ParsedDescriptor:
        """
        解析镜像描述并记录所使用的格式

        Args:
            raw: 字符串或文档格式的镜像描述

        Returns:
            ParsedDescriptor: 格式与镜像列表
        """
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            if self.defaults is None:
                raise DescriptorError("未提供镜像描述，且无法计算默认镜像名称")
            default_name = self.defaults.default_image_name()
            logger.debug(f"未提供镜像描述，使用默认镜像名称 {default_name}")
            return ParsedDescriptor(DescriptorFormat.DEFAULT, self.parse_string_grammar(default_name))

        descriptors = self.try_parse_document(raw)
        if descriptors is not None:
            logger.debug("镜像描述按文档格式解析")
            return ParsedDescriptor(DescriptorFormat.DOCUMENT, descriptors)

        if not isinstance(raw, str):
            raise DescriptorError(
                ERROR_MESSAGES["document_invalid"].format(f"缺少 '{DOCUMENT_ROOT_KEY}' 字段")
            )

        logger.debug("镜像描述按字符串格式解析")
        return ParsedDescriptor(DescriptorFormat.STRING, self.parse_string_grammar(raw))

    def try_parse_document(self, raw: RawDescriptor) -> Optional[List[ImageDescriptor]]:
        """
        尝试按文档格式解析镜像描述

        Args:
            raw: JSON字符串或已解析的字典

        Returns:
            Optional[List[ImageDescriptor]]: 不是文档时返回None

        Raises:
            DescriptorError: 是文档但内容无效时抛出
        """
        if isinstance(raw, Mapping):
            document: Any = raw
        else:
            try:
                document = json.loads(raw)
            except (TypeError, ValueError):
                return None

        if not isinstance(document, Mapping) or DOCUMENT_ROOT_KEY not in document:
            return None
        return self._parse_document_images(document[DOCUMENT_ROOT_KEY])

    def _parse_document_images(self, images: Any) -> List[ImageDescriptor]:
        if not isinstance(images, Mapping):
            raise DescriptorError(
                ERROR_MESSAGES["document_invalid"].format(f"'{DOCUMENT_ROOT_KEY}' 应为字典")
            )

        descriptors: List[ImageDescriptor] = []
        for name, entry in images.items():
            name = _validate_name(name)
            if entry is None:
                entry = {}
            if not isinstance(entry, Mapping):
                raise DescriptorError(
                    ERROR_MESSAGES["document_invalid"].format(f"镜像 '{name}' 的配置应为字典"), name
                )

            build_file = entry.get(DOCUMENT_DOCKERFILE_KEY)
            if build_file is None:
                build_file = DEFAULT_FILES["dockerfile"]
            build_file = _validate_build_file(name, build_file)

            tags = entry.get(DOCUMENT_TAGS_KEY)
            if tags is None:
                tags = [DEFAULT_TAG]
            if not isinstance(tags, list) or not tags:
                raise DescriptorError(
                    ERROR_MESSAGES["document_invalid"].format(f"镜像 '{name}' 的tags应为非空列表"), name
                )

            for tag in tags:
                descriptors.append(ImageDescriptor(name, _validate_tag(name, tag), build_file))
        return descriptors

    def parse_string_grammar(self, raw: str) -> List[ImageDescriptor]:
        """
        按字符串格式解析镜像描述

        Args:
            raw: 逗号分隔的 ``<name>[:<tag>][[<buildFile>]]`` 片段

        Returns:
            List[ImageDescriptor]: 按输入顺序排列的镜像列表
        """
        descriptors: List[ImageDescriptor] = []
        for fragment in raw.split(DESCRIPTOR_SEPARATOR):
            descriptors.append(self._parse_fragment(fragment.strip()))
        return descriptors

    def _parse_fragment(self, fragment: str) -> ImageDescriptor:
        # 镜像名称为第一个 ':'、'[' 或 '.' 之前的部分，名称中不允许出现 '.'
        name = _validate_name(_LEADING_NAME.match(fragment).group(0))

        match = _FRAGMENT.fullmatch(fragment)
        if match is None:
            raise DescriptorError(ERROR_MESSAGES["fragment_invalid"].format(fragment), fragment)

        tag = match.group("tag")
        tag = DEFAULT_TAG if tag is None else _validate_tag(name, tag)

        build_file = match.group("build_file")
        if build_file is None:
            build_file = DEFAULT_FILES["dockerfile"]
        build_file = _validate_build_file(name, build_file)

        return ImageDescriptor(name, tag, build_file)

    @staticmethod
    def group(descriptors: List[ImageDescriptor]) -> BuildGroup:
        """
        按构建文件分组，保留输入顺序和重复项

        Args:
            descriptors: 镜像列表

        Returns:
            BuildGroup: 构建文件 -> "name:tag" 列表
        """
        build_group: BuildGroup = {}
        for descriptor in descriptors:
            build_group.setdefault(descriptor.build_file, []).append(descriptor.target)
        return build_group

    @staticmethod
    def to_document(build_group: BuildGroup) -> Dict[str, Any]:
        """
        将分组结果转换为文档格式的镜像描述

        Args:
            build_group: 构建文件 -> "name:tag" 列表

        Returns:
            Dict[str, Any]: 文档格式的镜像描述

        Raises:
            DescriptorError: 同一镜像名称出现在多个构建文件中时抛出
        """
        images: Dict[str, Dict[str, Any]] = {}
        for build_file, targets in build_group.items():
            for target in targets:
                name, tag = parse_image_name(target)
                entry = images.setdefault(
                    name, {DOCUMENT_DOCKERFILE_KEY: build_file, DOCUMENT_TAGS_KEY: []}
                )
                if entry[DOCUMENT_DOCKERFILE_KEY] != build_file:
                    raise DescriptorError(
                        ERROR_MESSAGES["document_invalid"].format(
                            f"镜像 '{name}' 使用了多个Dockerfile，无法用文档格式表示"
                        ),
                        name,
                    )
                entry[DOCUMENT_TAGS_KEY].append(tag)
        return {DOCUMENT_ROOT_KEY: images}
