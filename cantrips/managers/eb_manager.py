"""Elastic Beanstalk部署"""

import json
import shlex
from typing import Dict, Optional

from loguru import logger

from ..constants import ENV_KEYS, PARAMETER_KEYS
from ..parameters import ParameterProvider
from .container_provider import ContainerProvider

PATTERN_SEPARATOR = "|"
RULE_SEPARATOR = ":"


class DeploymentError(Exception):
    """部署错误"""

    pass


def resolve_pattern_string(pattern_string: str) -> Dict[str, str]:
    """
    解析部署规则字符串

    Args:
        pattern_string: 形如 "分支名:环境名|分支名:环境名" 的规则

    Returns:
        Dict[str, str]: 分支名 -> 环境名，格式错误的片段会被忽略
    """
    rules: Dict[str, str] = {}
    for pattern in pattern_string.split(PATTERN_SEPARATOR):
        tokens = pattern.split(RULE_SEPARATOR)
        if len(tokens) == 2 and all(token.strip() for token in tokens):
            rules[tokens[0].strip()] = tokens[1].strip()
        else:
            logger.warning(f"无效的部署规则片段: '{pattern}'")
    return rules


class ElasticBeanstalkDeployer:
    """根据当前分支选择环境，在eb-cli容器中执行部署"""

    def __init__(
        self,
        container: ContainerProvider,
        parameter_provider: ParameterProvider,
        default_pattern: Optional[str] = None,
    ) -> None:
        self.container = container
        self.parameter_provider = parameter_provider
        self.default_pattern = default_pattern

    def deploy(self, pattern_string: Optional[str] = None, timeout: int = 60) -> str:
        """
        部署当前分支对应的环境

        Args:
            pattern_string: 部署规则，为空时使用配置中的规则
            timeout: eb deploy 的超时时间（分钟）

        Returns:
            str: 容器输出

        Raises:
            DeploymentError: 缺少部署规则、无法确定分支或没有匹配的环境时抛出
        """
        logger.info("开始Elastic Beanstalk部署")
        pattern_string = pattern_string or self.default_pattern
        if not pattern_string:
            raise DeploymentError(f"{ENV_KEYS['eb_pattern']} 是必需的")

        rules = resolve_pattern_string(pattern_string)
        logger.debug(f"部署规则:\n{json.dumps(rules, indent=2, ensure_ascii=False)}")

        branch_name = self.parameter_provider.get(PARAMETER_KEYS["branch_name"])
        if not branch_name:
            raise DeploymentError("无法确定当前分支名")
        logger.debug(f"当前分支: {branch_name}")

        environment = rules.get(branch_name)
        if not environment:
            raise DeploymentError(f"分支 {branch_name} 没有匹配的部署环境")
        logger.debug(f"匹配的环境: {environment}")

        return self.container.run(
            f"init && eb deploy {shlex.quote(environment)} --timeout {int(timeout)}",
            f"部署到环境 {environment}",
        )
