"""配置管理器类"""

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Type, Union, cast

import yaml
from loguru import logger

from ..constants import DEFAULT_FILES, DEFAULT_PROJECT_CONFIG, ENV_KEYS, ERROR_MESSAGES, DefaultProjectConfig


class ConfigError(Exception):
    """配置错误"""

    pass


ValidationStructure = Dict[str, Union[Type[Any], Tuple[Type[Any], ...], "ValidationStructure"]]

# 默认值为None的配置项可以是字符串或整数
_NULLABLE_SCALAR = (str, int, type(None))

# 环境变量 -> (配置段, 配置项)
_ENV_OVERRIDES: Dict[str, Tuple[str, str]] = {
    ENV_KEYS["docker_registry"]: ("docker", "registry"),
    ENV_KEYS["docker_username"]: ("docker", "username"),
    ENV_KEYS["docker_password"]: ("docker", "password"),
    ENV_KEYS["max_workers"]: ("docker", "max_workers"),
    ENV_KEYS["aws_access_key_id"]: ("aws", "access_key_id"),
    ENV_KEYS["aws_secret_access_key"]: ("aws", "secret_access_key"),
    ENV_KEYS["npm_auth_token"]: ("npm", "auth_token"),
    ENV_KEYS["npm_registry_url"]: ("npm", "registry_url"),
    ENV_KEYS["eb_pattern"]: ("eb", "pattern"),
}


def generate_validation_structure(config_template: Mapping[str, Any]) -> ValidationStructure:
    """
    从配置模板生成验证结构

    Args:
        config_template: 配置模板

    Returns:
        ValidationStructure: 验证结构
    """
    validation_structure: ValidationStructure = {}

    for key, value in config_template.items():
        if isinstance(value, dict):
            validation_structure[key] = generate_validation_structure(value)
        elif value is None:
            validation_structure[key] = _NULLABLE_SCALAR
        else:
            validation_structure[key] = type(value)

    return validation_structure


@dataclass(frozen=True)
class DockerSettings:
    registry: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    max_workers: int = 1
    context: str = "."


@dataclass(frozen=True)
class AwsSettings:
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    profile: str = "eb-cli"


@dataclass(frozen=True)
class NpmSettings:
    registry_url: str = "registry.npmjs.org/"
    auth_token: Optional[str] = None


@dataclass(frozen=True)
class ElasticBeanstalkSettings:
    pattern: Optional[str] = None
    timeout: int = 60


@dataclass(frozen=True)
class Settings:
    """运行期只读配置，在CLI入口组装一次后传给各个管理器"""

    project_dir: str
    home_dir: str
    docker: DockerSettings = field(default_factory=DockerSettings)
    aws: AwsSettings = field(default_factory=AwsSettings)
    npm: NpmSettings = field(default_factory=NpmSettings)
    eb: ElasticBeanstalkSettings = field(default_factory=ElasticBeanstalkSettings)


class ConfigManager:
    """配置管理器类，用于加载项目配置文件并与环境变量合并"""

    project_dir: str
    config: DefaultProjectConfig
    REQUIRED_CONFIG_FIELDS: ValidationStructure

    def __init__(
        self,
        project_dir: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        config: Optional[DefaultProjectConfig] = None,
    ) -> None:
        """
        初始化配置管理器

        Args:
            project_dir: 项目目录路径，默认为当前目录
            environ: 环境变量快照，默认为空
            config: 项目配置，默认为None
        """
        self.project_dir = project_dir or os.getcwd()
        self.environ = dict(environ or {})
        self.config = config or self.create_default_config()

        # 初始化验证结构
        self.REQUIRED_CONFIG_FIELDS = generate_validation_structure(DEFAULT_PROJECT_CONFIG)

    @property
    def config_file(self) -> str:
        return os.path.join(self.project_dir, DEFAULT_FILES["config_file"])

    def create_default_config(self) -> DefaultProjectConfig:
        """
        创建默认配置

        Returns:
            DefaultProjectConfig: 默认配置
        """
        self.config = cast(DefaultProjectConfig, copy.deepcopy(DEFAULT_PROJECT_CONFIG))
        return self.config

    def load_config(self) -> DefaultProjectConfig:
        """
        加载配置文件，文件中的配置覆盖默认配置；配置文件不存在时使用默认配置

        Returns:
            DefaultProjectConfig: 加载的配置

        Raises:
            ConfigError: 配置加载失败时抛出
        """
        self.create_default_config()
        if not os.path.exists(self.config_file):
            logger.debug(f"配置文件不存在，使用默认配置: {self.config_file}")
            return self.config

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"配置文件格式错误: {e}")

        if not isinstance(file_config, dict):
            raise ConfigError(ERROR_MESSAGES["config_validation"].format("配置文件顶层应为字典"))

        self._recursive_update(self.config, file_config)
        self.validate_config()
        logger.debug(f"已加载配置文件: {self.config_file}")
        return self.config

    def update_config(self, config_updates: Dict[str, Any]) -> DefaultProjectConfig:
        """
        更新配置

        Args:
            config_updates: 要更新的配置项

        Returns:
            DefaultProjectConfig: 更新后的配置

        Raises:
            ConfigError: 配置更新失败时抛出
        """
        self._recursive_update(self.config, config_updates)
        self.validate_config()
        self.save_config()
        return self.config

    @staticmethod
    def _recursive_update(current: Dict[str, Any], updates: Mapping[str, Any]) -> None:
        for key, value in updates.items():
            if key in current and isinstance(value, dict) and isinstance(current[key], dict):
                ConfigManager._recursive_update(current[key], value)
            else:
                current[key] = value

    def validate_config(self) -> None:
        """
        验证配置的完整性和正确性

        Raises:
            ConfigError: 配置验证失败时抛出
        """
        try:
            self._validate_config_structure(cast(Dict[str, Any], self.config), self.REQUIRED_CONFIG_FIELDS)
        except ConfigError as e:
            raise ConfigError(ERROR_MESSAGES["config_validation"].format(str(e)))

    def _validate_config_structure(self, config: Dict[str, Any], required: ValidationStructure) -> None:
        """
        递归验证配置结构

        Args:
            config: 要验证的配置
            required: 必需的配置结构

        Raises:
            ConfigError: 配置结构验证失败时抛出
        """
        for key in config:
            if key not in required:
                logger.warning(f"忽略未知的配置项: {key}")

        for key, value_type in required.items():
            if key not in config:
                raise ConfigError(f"缺少必需的配置项: {key}")

            if isinstance(value_type, dict):
                if not isinstance(config[key], dict):
                    raise ConfigError(f"配置项类型错误: {key} 应为字典")
                self._validate_config_structure(config[key], value_type)
            elif not isinstance(config[key], value_type):
                raise ConfigError(f"配置项类型错误: {key}")

    def save_config(self) -> None:
        """
        保存配置到文件

        Raises:
            ConfigError: 配置保存失败时抛出
        """
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                yaml.safe_dump(dict(self.config), f, allow_unicode=True, sort_keys=False)
        except OSError as e:
            raise ConfigError(f"保存配置失败: {str(e)}")

    def get_config(self) -> DefaultProjectConfig:
        return self.config

    def get_settings(self) -> Settings:
        """
        合并配置文件与环境变量，生成只读的运行配置，环境变量优先

        Returns:
            Settings: 运行配置

        Raises:
            ConfigError: 配置值无效时抛出
        """
        merged = cast(Dict[str, Any], copy.deepcopy(self.config))
        for env_name, (section, key) in _ENV_OVERRIDES.items():
            value = self.environ.get(env_name)
            if value:
                merged[section][key] = value

        docker_config = merged["docker"]
        max_workers = self._parse_max_workers(docker_config.get("max_workers"))

        return Settings(
            project_dir=str(Path(self.project_dir).resolve()),
            home_dir=self.environ.get(ENV_KEYS["home"]) or str(Path.home()),
            docker=DockerSettings(
                registry=docker_config.get("registry") or None,
                username=docker_config.get("username") or None,
                password=docker_config.get("password") or None,
                max_workers=max_workers,
                context=docker_config.get("context") or ".",
            ),
            aws=AwsSettings(
                access_key_id=merged["aws"].get("access_key_id") or None,
                secret_access_key=merged["aws"].get("secret_access_key") or None,
                profile=merged["aws"].get("profile") or "eb-cli",
            ),
            npm=NpmSettings(
                registry_url=merged["npm"].get("registry_url") or "registry.npmjs.org/",
                auth_token=merged["npm"].get("auth_token") or None,
            ),
            eb=ElasticBeanstalkSettings(
                pattern=merged["eb"].get("pattern") or None,
                timeout=int(merged["eb"].get("timeout") or 60),
            ),
        )

    @staticmethod
    def _parse_max_workers(value: Any) -> int:
        if value is None or value == "":
            return os.cpu_count() or 1
        try:
            max_workers = int(value)
        except (TypeError, ValueError):
            raise ConfigError(ERROR_MESSAGES["config_validation"].format(f"max_workers 应为整数: {value}"))
        if max_workers < 1:
            raise ConfigError(ERROR_MESSAGES["config_validation"].format(f"max_workers 应大于0: {value}"))
        return max_workers
