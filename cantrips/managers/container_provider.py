"""一次性容器执行器

S3、Elastic Beanstalk等插件在临时容器中运行第三方CLI，容器在命令结束后删除。
"""

from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union

import docker
from docker.client import DockerClient
from loguru import logger

from ..utils import CommandError

CONTAINER_WORKDIR = "/workspace"


class ContainerProvider(Protocol):
    """在容器中运行命令的能力"""

    def run(self, command: str, description: str = "") -> str:
        ...

    def add_environment_variable(self, name: str, value: str) -> None:
        ...


class DockerContainerProvider:
    """基于Docker SDK的一次性容器执行器"""

    docker_client: DockerClient

    def __init__(
        self,
        image: str,
        project_dir: Optional[Union[str, Path]] = None,
        volumes: Optional[List[str]] = None,
        docker_client: Optional[DockerClient] = None,
    ) -> None:
        """
        初始化容器执行器

        Args:
            image: 容器镜像
            project_dir: 挂载到容器工作目录的项目目录
            volumes: 额外挂载的卷，格式为 "宿主机路径:容器路径"
            docker_client: Docker客户端实例，为空时从环境创建
        """
        self.image = image
        self.project_dir = str(Path(project_dir or Path.cwd()).resolve())
        self.volumes = [f"{self.project_dir}:{CONTAINER_WORKDIR}"] + list(volumes or [])
        self.environment: Dict[str, str] = {}

        if docker_client is not None:
            self.docker_client = docker_client
            return

        # 初始化Docker客户端
        try:
            self.docker_client = docker.from_env()
            logger.debug("Docker客户端初始化成功")
        except Exception as e:
            logger.error(f"Docker客户端初始化失败: {e}")
            raise

    def add_environment_variable(self, name: str, value: str) -> None:
        self.environment[name] = value

    def run(self, command: str, description: str = "") -> str:
        """
        在一次性容器中运行命令

        Args:
            command: 要运行的shell命令
            description: 命令描述，仅用于日志

        Returns:
            str: 容器输出

        Raises:
            CommandError: 容器以非零退出码结束时抛出
        """
        if description:
            logger.info(description)
        logger.debug(f"在容器 {self.image} 中执行命令: {command}")

        try:
            output = self.docker_client.containers.run(
                self.image,
                command=["sh", "-c", command],
                environment=dict(self.environment),
                volumes=self.volumes,
                working_dir=CONTAINER_WORKDIR,
                remove=True,
                stdout=True,
                stderr=True,
            )
        except docker.errors.ContainerError as e:
            stderr = e.stderr.decode("utf-8", errors="replace") if isinstance(e.stderr, bytes) else str(e.stderr or "")
            logger.error(f"容器命令执行失败: {command}")
            logger.error(f"错误输出: {stderr}")
            raise CommandError(command, e.exit_status, "", stderr) from e

        if isinstance(output, bytes):
            return output.decode("utf-8", errors="replace")
        return str(output)
