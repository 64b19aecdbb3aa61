"""字符串工具函数模块"""

import re
from typing import Optional

from .constants import ERROR_MESSAGES, NORMALIZED_NAME_PATTERN

_INVALID_CHARS = re.compile(r"[^a-z0-9_-]+")
_REPEATED_DASHES = re.compile(r"-{2,}")
_NORMALIZED_NAME = re.compile(NORMALIZED_NAME_PATTERN)


def normalize(text: Optional[str]) -> str:
    """
    将任意字符串规范化为可用作Docker镜像名称的字符串

    转为小写，非法字符替换为连字符，合并连续的连字符并去掉首尾连字符。

    Args:
        text: 原始字符串

    Returns:
        str: 规范化后的字符串

    Raises:
        ValueError: 字符串为空或不包含任何有效字符时抛出
    """
    if text is None:
        raise ValueError(ERROR_MESSAGES["normalize_empty"].format(text))

    normalized = _INVALID_CHARS.sub("-", str(text).lower())
    normalized = _REPEATED_DASHES.sub("-", normalized).strip("-")
    if not normalized:
        raise ValueError(ERROR_MESSAGES["normalize_empty"].format(text))
    return normalized


def is_normalized(text: Optional[str]) -> bool:
    """
    检查字符串是否为规范化的镜像名称

    Args:
        text: 要检查的字符串

    Returns:
        bool: 是否只包含小写字母、数字、下划线和连字符
    """
    if not isinstance(text, str):
        return False
    return _NORMALIZED_NAME.fullmatch(text) is not None
