"""管理器模块

该模块包含各种管理器类，用于管理Docker镜像、凭证文件以及在容器中运行的部署任务。
"""

from .base_manager import BaseManager, CredentialsError
from .config_manager import ConfigError, ConfigManager, Settings
from .container_provider import ContainerProvider, DockerContainerProvider
from .credentials_manager import AwsCredentialsWriter, NpmCredentialsWriter
from .eb_manager import DeploymentError, ElasticBeanstalkDeployer
from .image_manager import ImageManager
from .s3_manager import S3Handler

__all__ = [
    "BaseManager",
    "CredentialsError",
    "ConfigError",
    "ConfigManager",
    "Settings",
    "ContainerProvider",
    "DockerContainerProvider",
    "AwsCredentialsWriter",
    "NpmCredentialsWriter",
    "DeploymentError",
    "ElasticBeanstalkDeployer",
    "ImageManager",
    "S3Handler",
]
