"""CLI命令行接口模块"""

import json
import sys
from typing import List, Optional

import typer
from loguru import logger

from .cli_utils import (
    ProjectContext,
    configure_logging,
    eb_cli_volumes,
    get_container_provider,
    get_image_manager,
    get_parameter_provider,
    select_images,
)
from .constants import CONTAINER_IMAGES
from .interactive import configure_project
from .managers.config_manager import ConfigManager
from .managers.credentials_manager import AwsCredentialsWriter, NpmCredentialsWriter
from .managers.eb_manager import ElasticBeanstalkDeployer
from .managers.image.base import ImagePushError
from .managers.s3_manager import S3Handler
from .utils import parse_build_args

# 创建CLI应用
app = typer.Typer(
    help="构建与部署自动化工具",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich"
)

IMAGES_HELP = "镜像描述，如 'api,api:v2,worker[worker.Dockerfile]' 或 JSON 文档"


@app.callback()
def main_callback(
    project_dir: str = typer.Option(None, "-C", "--project-dir", help="项目目录路径"),
    dry_run: bool = typer.Option(False, "--dry-run", help="只打印将要执行的命令"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="输出调试日志"),
):
    """构建与部署自动化工具"""
    configure_logging(verbose)
    ProjectContext.get_instance().reset(project_dir, dry_run)


@app.command("resolve")
def resolve_images(
    images: str = typer.Option(None, "-i", "--images", help=IMAGES_HELP),
    images_file: str = typer.Option(None, "--images-file", help="YAML/JSON格式的镜像描述文件"),
    default_tags: bool = typer.Option(False, "--default-tags", help="未指定镜像时包含提交哈希或版本号标签"),
):
    """显示镜像描述解析后的构建分组"""
    try:
        image_manager = get_image_manager()
        build_group = image_manager.resolve_images(
            select_images(image_manager, images, images_file, default_tags)
        )
        typer.echo(json.dumps(build_group, indent=2, ensure_ascii=False))
    except Exception as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)


@app.command("build")
def build_image(
    images: str = typer.Option(None, "-i", "--images", help=IMAGES_HELP),
    images_file: str = typer.Option(None, "--images-file", help="YAML/JSON格式的镜像描述文件"),
    default_tags: bool = typer.Option(False, "--default-tags", help="未指定镜像时包含提交哈希或版本号标签"),
    build_args: List[str] = typer.Option([], "--build-arg", help="构建参数，格式：KEY=VALUE", callback=lambda x: x or []),
    no_cache: bool = typer.Option(False, "--no-cache", help="禁用构建缓存"),
    pull: bool = typer.Option(True, "--pull/--no-pull", help="总是拉取最新的基础镜像"),
    push: bool = typer.Option(False, "-p", "--push", help="构建后推送镜像"),
    registry: str = typer.Option(None, "-r", "--registry", help="推送时使用的远程仓库地址"),
):
    """构建Docker镜像"""
    try:
        image_manager = get_image_manager()
        descriptor = select_images(image_manager, images, images_file, default_tags)

        image_manager.build_image(descriptor, parse_build_args(build_args), no_cache=no_cache, pull=pull)
        logger.success("镜像构建成功")

        if push:
            image_manager.push_image(descriptor, registry)
            logger.success("镜像推送成功")
    except Exception as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)


@app.command("push")
def push_image(
    images: str = typer.Option(None, "-i", "--images", help=IMAGES_HELP),
    images_file: str = typer.Option(None, "--images-file", help="YAML/JSON格式的镜像描述文件"),
    default_tags: bool = typer.Option(False, "--default-tags", help="未指定镜像时包含提交哈希或版本号标签"),
    registry: str = typer.Option(None, "-r", "--registry", help="远程仓库地址"),
):
    """推送镜像到远程仓库"""
    try:
        image_manager = get_image_manager()
        pushed = image_manager.push_image(
            select_images(image_manager, images, images_file, default_tags), registry
        )
        for reference in pushed:
            logger.info(f"  - {reference}")
    except ImagePushError as e:
        logger.error(f"错误：{str(e)}")
        for failure in e.failures:
            logger.error(f"  - {failure.target}: {failure.command} (退出码 {failure.return_code})")
        sys.exit(1)
    except Exception as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)


@app.command("login")
def login(
    username: str = typer.Option(None, "-u", "--username", help="仓库用户名，默认读取 DOCKER_USERNAME"),
    password: str = typer.Option(None, "-p", "--password", help="仓库密码，默认读取 DOCKER_PASSWORD"),
    registry: str = typer.Option(None, "-r", "--registry", help="远程仓库地址，默认读取 DOCKER_REGISTRY"),
):
    """登录Docker仓库"""
    try:
        get_image_manager().login(username, password, registry)
    except Exception as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)


@app.command("logout")
def logout(
    registry: str = typer.Option(None, "-r", "--registry", help="远程仓库地址"),
):
    """退出Docker仓库"""
    try:
        get_image_manager().logout(registry)
    except Exception as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)


@app.command("aws-credentials")
def create_aws_credentials(
    access_key_id: str = typer.Option(None, "--access-key-id", help="默认读取 AWS_ACCESS_KEY_ID"),
    secret_access_key: str = typer.Option(None, "--secret-access-key", help="默认读取 AWS_SECRET_ACCESS_KEY"),
    user_folder: str = typer.Option(None, "--user-folder", help="凭证目录，默认为 ~/.aws"),
):
    """写入AWS凭证文件"""
    try:
        settings = ProjectContext.get_instance().settings
        writer = AwsCredentialsWriter(
            settings.home_dir,
            access_key_id or settings.aws.access_key_id,
            secret_access_key or settings.aws.secret_access_key,
            profile=settings.aws.profile,
            user_folder=user_folder,
        )
        writer.create_credentials()
    except Exception as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)


@app.command("npm-credentials")
def create_npm_credentials(
    auth_token: str = typer.Option(None, "--auth-token", help="默认读取 NPM_AUTH_TOKEN"),
    registry_url: str = typer.Option(None, "--registry-url", help="默认读取 NPM_REGISTRY_URL"),
    user_folder: str = typer.Option(None, "--user-folder", help="凭证目录，默认为用户主目录"),
):
    """写入npm凭证文件"""
    try:
        settings = ProjectContext.get_instance().settings
        writer = NpmCredentialsWriter(
            settings.home_dir,
            auth_token or settings.npm.auth_token,
            registry_url or settings.npm.registry_url,
            user_folder=user_folder,
        )
        writer.create_credentials()
    except Exception as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)


def _get_s3_handler() -> S3Handler:
    settings = ProjectContext.get_instance().settings
    return S3Handler(
        get_container_provider(CONTAINER_IMAGES["aws_cli"]),
        settings.aws.access_key_id,
        settings.aws.secret_access_key,
    )


@app.command("s3-list")
def s3_list(bucket_name: str = typer.Argument(..., help="存储桶名称")):
    """列出S3存储桶内容"""
    try:
        typer.echo(_get_s3_handler().list(bucket_name))
    except Exception as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)


@app.command("s3-get")
def s3_get(
    file_uri: str = typer.Argument(..., help="以 s3:// 开头的文件地址"),
    target_path: Optional[str] = typer.Argument(None, help="本地目标路径"),
):
    """下载S3文件"""
    try:
        _get_s3_handler().get(file_uri, target_path)
    except Exception as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)


@app.command("eb-deploy")
def eb_deploy(
    pattern: str = typer.Option(None, "--pattern", help="部署规则，格式：分支名:环境名|分支名:环境名"),
    timeout: int = typer.Option(None, "--timeout", help="部署超时时间（分钟）"),
):
    """部署到当前分支对应的Elastic Beanstalk环境"""
    try:
        settings = ProjectContext.get_instance().settings
        deployer = ElasticBeanstalkDeployer(
            get_container_provider(CONTAINER_IMAGES["eb_cli"], eb_cli_volumes(settings)),
            get_parameter_provider(),
            default_pattern=settings.eb.pattern,
        )
        deployer.deploy(pattern, timeout or settings.eb.timeout)
    except Exception as e:
        logger.error(f"错误：{str(e)}")
        sys.exit(1)


@app.command("init")
def init_project():
    """交互式创建或更新项目配置文件"""
    try:
        config_manager = ConfigManager(ProjectContext.get_instance().project_dir)
        current_config = config_manager.load_config()
        config_updates = configure_project(current_config)
        config_manager.update_config(config_updates)
        logger.success(f"配置已保存到 {config_manager.config_file}")
    except Exception as e:
        logger.error(f"配置更新失败: {str(e)}")
        sys.exit(1)


def main():
    """主入口函数"""
    app()


if __name__ == "__main__":
    main()
