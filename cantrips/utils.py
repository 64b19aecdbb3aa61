"""工具函数模块"""

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Tuple, Union

from loguru import logger

COMMAND_NOT_FOUND_EXIT_CODE = 127


class CommandError(Exception):
    """外部命令执行失败"""

    def __init__(self, command: str, return_code: int, stdout: str = "", stderr: str = "") -> None:
        self.command = command
        self.return_code = return_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"命令执行失败 (退出码 {return_code}): {command}")


@dataclass(frozen=True)
class CommandOutput:
    """外部命令的输出"""

    command: str
    return_code: int
    stdout: str
    stderr: str


class CommandRunner(Protocol):
    """执行外部命令的能力"""

    def run(self, command: str, description: str, input: Optional[str] = None) -> CommandOutput:
        ...


class ShellCommandRunner:
    """通过subprocess同步执行命令的执行器"""

    def __init__(self, cwd: Optional[Union[str, Path]] = None, shell: bool = False) -> None:
        """
        初始化命令执行器

        Args:
            cwd: 命令执行目录，默认为当前目录
            shell: 是否使用shell执行
        """
        self.cwd = str(cwd) if cwd else None
        self.shell = shell

    def run(self, command: str, description: str, input: Optional[str] = None) -> CommandOutput:
        """
        运行命令并返回结果

        Args:
            command: 要运行的命令
            description: 命令描述，仅用于日志
            input: 写入标准输入的内容

        Returns:
            CommandOutput: 命令输出

        Raises:
            CommandError: 命令无法启动或返回非零退出码时抛出
        """
        logger.info(description)
        logger.debug(f"执行命令: {command}")

        args = command if self.shell else shlex.split(command)
        try:
            process = subprocess.Popen(
                args,
                shell=self.shell,
                cwd=self.cwd,
                stdin=subprocess.PIPE if input is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                universal_newlines=True,
            )
        except OSError as e:
            # 可执行文件不存在等启动失败
            logger.error(f"无法启动命令: {command} ({e})")
            raise CommandError(command, COMMAND_NOT_FOUND_EXIT_CODE, "", str(e)) from e

        # 获取输出
        stdout, stderr = process.communicate(input=input)
        return_code = process.returncode

        if return_code != 0:
            logger.error(f"命令执行失败: {command}")
            logger.error(f"错误输出: {stderr}")
            raise CommandError(command, return_code, stdout, stderr)

        return CommandOutput(command, return_code, stdout, stderr)


class DryRunCommandRunner:
    """只记录命令而不执行的执行器"""

    def __init__(self) -> None:
        self.commands: List[str] = []

    def run(self, command: str, description: str, input: Optional[str] = None) -> CommandOutput:
        logger.info(f"[dry-run] {description}")
        logger.info(f"[dry-run] {command}")
        self.commands.append(command)
        return CommandOutput(command, 0, "", "")


def parse_build_args(build_args: Iterable[str]) -> Dict[str, str]:
    """
    解析 KEY=VALUE 形式的构建参数

    Args:
        build_args: 构建参数列表

    Returns:
        Dict[str, str]: 构建参数字典
    """
    build_args_dict: Dict[str, str] = {}
    for arg in build_args:
        try:
            key, value = arg.split("=", 1)
            build_args_dict[key.strip()] = value.strip()
        except ValueError:
            logger.warning(f"警告：忽略无效的构建参数 '{arg}'，正确格式为 KEY=VALUE")
    return build_args_dict


def build_arg_pairs(
    build_args: Optional[Union[Mapping[str, str], Iterable[Tuple[str, str]]]]
) -> List[Tuple[str, str]]:
    """将字典或键值对序列形式的构建参数统一为键值对列表"""
    if not build_args:
        return []
    if isinstance(build_args, Mapping):
        return [(str(key), str(value)) for key, value in build_args.items()]
    return [(str(key), str(value)) for key, value in build_args]
