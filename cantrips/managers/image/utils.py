"""镜像管理工具函数"""

from typing import Optional, Tuple

from ...constants import DEFAULT_TAG


def parse_image_name(image_name: str) -> Tuple[str, str]:
    """
    解析镜像名称，分离仓库名和标签

    Args:
        image_name: 镜像名称，格式为 "仓库名:标签"

    Returns:
        Tuple[str, str]: 仓库名和标签
    """
    if ":" in image_name:
        repository, tag = image_name.split(":", 1)
    else:
        repository = image_name
        tag = DEFAULT_TAG
    return repository, tag


def normalize_registry(registry: Optional[str]) -> Optional[str]:
    """去掉仓库地址末尾的斜杠，空字符串视为未设置"""
    if not registry:
        return None
    return registry.rstrip("/") or None
