"""常量配置模块"""

from typing import List, Optional, TypedDict

# 文件相关
class DefaultFiles(TypedDict):
    dockerfile: str
    config_file: str
    env_file: str

DEFAULT_FILES: DefaultFiles = {
    "dockerfile": "Dockerfile",
    "config_file": "cantrips.yml",
    "env_file": ".env",
}

# 镜像描述相关
DEFAULT_TAG: str = "latest"
DEFAULT_BUILD_CONTEXT: str = "."
DESCRIPTOR_SEPARATOR: str = ","
DOCUMENT_ROOT_KEY: str = "docker"
DOCUMENT_DOCKERFILE_KEY: str = "dockerFile"
DOCUMENT_TAGS_KEY: str = "tags"

# 镜像名称验证
NORMALIZED_NAME_PATTERN: str = r"^[a-z0-9_-]+$"
DESCRIPTOR_FRAGMENT_PATTERN: str = r"^(?P<name>[^:\[.]*)(?::(?P<tag>[^\[]*))?(?:\[(?P<build_file>[^\]]*)\])?$"
DOCKER_TAG_PATTERN: str = r"^[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}$"

# 参数提供者键名
class ParameterKeys(TypedDict):
    project_name: str
    branch_name: str
    short_hash: str
    is_release: str
    release_version: str
    docker_registry: str

PARAMETER_KEYS: ParameterKeys = {
    "project_name": "ProjectName",
    "branch_name": "BranchName",
    "short_hash": "ShortHash",
    "is_release": "IsRelease",
    "release_version": "ReleaseVersion",
    "docker_registry": "DockerRegistry",
}

SHORT_HASH_LENGTH: int = 8
RELEASE_TAG_PREFIX: str = "release-"
TRUTHY_VALUES: List[str] = ["1", "true", "yes", "y", "on"]

# 环境变量名
class EnvironmentKeys(TypedDict):
    docker_username: str
    docker_password: str
    docker_registry: str
    max_workers: str
    aws_access_key_id: str
    aws_secret_access_key: str
    npm_auth_token: str
    npm_registry_url: str
    eb_pattern: str
    home: str

ENV_KEYS: EnvironmentKeys = {
    "docker_username": "DOCKER_USERNAME",
    "docker_password": "DOCKER_PASSWORD",
    "docker_registry": "DOCKER_REGISTRY",
    "max_workers": "CANTRIPS_MAX_WORKERS",
    "aws_access_key_id": "AWS_ACCESS_KEY_ID",
    "aws_secret_access_key": "AWS_SECRET_ACCESS_KEY",
    "npm_auth_token": "NPM_AUTH_TOKEN",
    "npm_registry_url": "NPM_REGISTRY_URL",
    "eb_pattern": "EB_DEPLOYMENT_PATTERN_STRING",
    "home": "HOME",
}

# 容器镜像
class ContainerImages(TypedDict):
    aws_cli: str
    eb_cli: str

CONTAINER_IMAGES: ContainerImages = {
    "aws_cli": "garland/aws-cli-docker",
    "eb_cli": "mini/eb-cli",
}

# 项目默认配置
class DockerConfig(TypedDict):
    registry: Optional[str]
    username: Optional[str]
    password: Optional[str]
    max_workers: Optional[int]
    context: str

class AwsConfig(TypedDict):
    access_key_id: Optional[str]
    secret_access_key: Optional[str]
    profile: str

class NpmConfig(TypedDict):
    registry_url: str
    auth_token: Optional[str]

class ElasticBeanstalkConfig(TypedDict):
    pattern: Optional[str]
    timeout: int

class DefaultProjectConfig(TypedDict):
    docker: DockerConfig
    aws: AwsConfig
    npm: NpmConfig
    eb: ElasticBeanstalkConfig

DEFAULT_PROJECT_CONFIG: DefaultProjectConfig = {
    "docker": {
        "registry": None,  # 为空时使用 DockerRegistry 参数
        "username": None,
        "password": None,
        "max_workers": None,  # 为空时使用CPU核数
        "context": DEFAULT_BUILD_CONTEXT,
    },
    "aws": {
        "access_key_id": None,
        "secret_access_key": None,
        "profile": "eb-cli",
    },
    "npm": {
        "registry_url": "registry.npmjs.org/",
        "auth_token": None,
    },
    "eb": {
        "pattern": None,
        "timeout": 60,
    },
}

# 错误消息
class ErrorMessages(TypedDict):
    name_not_normalized: str
    tag_invalid: str
    fragment_invalid: str
    build_file_empty: str
    document_invalid: str
    parameter_missing: str
    normalize_empty: str
    credentials_missing: str
    config_validation: str

ERROR_MESSAGES: ErrorMessages = {
    "name_not_normalized": "镜像名称 '{}' 不是有效的Docker镜像名称（只能包含小写字母、数字、下划线和连字符）",
    "tag_invalid": "镜像 '{}' 的标签 '{}' 不是有效的Docker标签",
    "fragment_invalid": "无法解析镜像描述片段 '{}'",
    "build_file_empty": "镜像 '{}' 的Dockerfile路径不能为空",
    "document_invalid": "镜像描述文档格式错误: {}",
    "parameter_missing": "无法确定默认值: 缺少参数 {}",
    "normalize_empty": "无法将 '{}' 规范化为有效的镜像名称",
    "credentials_missing": "{} 是必需的，请通过参数或环境变量提供",
    "config_validation": "配置验证失败: {}",
}

LOG_FORMAT: str = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
