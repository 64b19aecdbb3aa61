"""凭证文件写入

为AWS CLI和npm写入凭证文件。目标文件已存在时先重命名为 ``<文件名>_old`` 备份。
"""

import os
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from ..constants import ENV_KEYS, ERROR_MESSAGES
from .base_manager import CredentialsError

CREDENTIAL_FILE_MODE = 0o600


def write_credential_file(config_file: Path, content: str) -> Path:
    """
    写入凭证文件，已有文件会被备份

    Args:
        config_file: 目标文件路径
        content: 文件内容

    Returns:
        Path: 写入的文件路径
    """
    config_file.parent.mkdir(parents=True, exist_ok=True)

    if config_file.exists():
        backup_file = config_file.with_name(f"{config_file.name}_old")
        logger.warning(f"备份已有的凭证文件 {config_file} 为 {backup_file}")
        os.replace(config_file, backup_file)

    fd = os.open(str(config_file), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CREDENTIAL_FILE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(content)
    os.chmod(config_file, CREDENTIAL_FILE_MODE)
    return config_file


class AwsCredentialsWriter:
    """AWS凭证文件写入器"""

    def __init__(
        self,
        home_dir: Union[str, Path],
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        profile: str = "eb-cli",
        user_folder: Optional[Union[str, Path]] = None,
    ) -> None:
        """
        初始化AWS凭证写入器

        Args:
            home_dir: 用户主目录
            access_key_id: AWS访问密钥ID
            secret_access_key: AWS秘密访问密钥
            profile: 写入的profile名称
            user_folder: 凭证目录，默认为 ~/.aws

        Raises:
            CredentialsError: 访问密钥缺失时抛出
        """
        if not access_key_id or not secret_access_key:
            raise CredentialsError(
                ERROR_MESSAGES["credentials_missing"].format(
                    f"{ENV_KEYS['aws_access_key_id']} 和 {ENV_KEYS['aws_secret_access_key']}"
                )
            )
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.profile = profile
        self.user_folder = Path(user_folder) if user_folder else Path(home_dir) / ".aws"

    def create_credentials(self) -> Path:
        """
        写入 ~/.aws/config

        Returns:
            Path: 写入的文件路径
        """
        logger.info("创建AWS凭证文件...")
        content = (
            f"[profile {self.profile}]\n"
            f"aws_access_key_id={self.access_key_id}\n"
            f"aws_secret_access_key={self.secret_access_key}\n"
        )
        config_file = write_credential_file(self.user_folder / "config", content)
        logger.success(f"AWS凭证文件已创建: {config_file}")
        return config_file


class NpmCredentialsWriter:
    """npm凭证文件写入器"""

    def __init__(
        self,
        home_dir: Union[str, Path],
        auth_token: Optional[str] = None,
        registry_url: str = "registry.npmjs.org/",
        user_folder: Optional[Union[str, Path]] = None,
    ) -> None:
        if not auth_token:
            raise CredentialsError(ERROR_MESSAGES["credentials_missing"].format(ENV_KEYS["npm_auth_token"]))
        self.auth_token = auth_token
        self.registry_url = registry_url
        self.user_folder = Path(user_folder) if user_folder else Path(home_dir)

    def create_credentials(self) -> Path:
        """写入 ~/.npmrc"""
        logger.info("创建npm凭证文件...")
        content = f"//{self.registry_url}:_authToken={self.auth_token}\n"
        config_file = write_credential_file(self.user_folder / ".npmrc", content)
        logger.success(f"npm凭证文件已创建: {config_file}")
        return config_file
