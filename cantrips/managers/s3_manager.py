"""S3文件操作"""

import shlex
from typing import Optional

from loguru import logger

from ..constants import ENV_KEYS, ERROR_MESSAGES
from .base_manager import CredentialsError
from .container_provider import ContainerProvider

S3_URI_PREFIX = "s3://"


class S3Handler:
    """在aws-cli容器中执行S3命令"""

    def __init__(
        self,
        container: ContainerProvider,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
    ) -> None:
        """
        初始化S3处理器，并把访问密钥注入容器环境

        Args:
            container: 运行aws-cli的容器执行器
            access_key_id: AWS访问密钥ID
            secret_access_key: AWS秘密访问密钥

        Raises:
            CredentialsError: 访问密钥缺失时抛出
        """
        if not access_key_id or not secret_access_key:
            raise CredentialsError(
                ERROR_MESSAGES["credentials_missing"].format(
                    f"{ENV_KEYS['aws_access_key_id']} 和 {ENV_KEYS['aws_secret_access_key']}"
                )
            )
        self.container = container
        self.container.add_environment_variable(ENV_KEYS["aws_access_key_id"], access_key_id)
        self.container.add_environment_variable(ENV_KEYS["aws_secret_access_key"], secret_access_key)

    def list(self, bucket_name: str) -> str:
        return self.container.run(f"aws s3 ls {shlex.quote(bucket_name)}", f"列出存储桶 {bucket_name}")

    def get(self, file_uri: str, target_path: Optional[str] = None) -> str:
        """
        下载S3文件

        Args:
            file_uri: 以 s3:// 开头的文件地址
            target_path: 本地目标路径，默认为当前目录下的同名文件

        Returns:
            str: 容器输出

        Raises:
            ValueError: 文件地址不以 s3:// 开头时抛出
        """
        if not file_uri.startswith(S3_URI_PREFIX):
            raise ValueError(f"文件地址必须以 \"{S3_URI_PREFIX}\" 开头: {file_uri}")
        if not target_path:
            target_path = f"./{file_uri.rstrip('/').split('/')[-1]}"

        logger.info(f"从 {file_uri} 下载文件到 {target_path}")
        return self.container.run(
            f"aws s3 cp {shlex.quote(file_uri)} {shlex.quote(target_path)}",
            f"下载 {file_uri}",
        )
