"""Tests for the docker-SDK backed container provider."""

from __future__ import annotations

from unittest.mock import MagicMock

import docker
import pytest

from cantrips.managers import DockerContainerProvider
from cantrips.utils import CommandError


def test_run_starts_disposable_container(tmp_path) -> None:
    client = MagicMock()
    client.containers.run.return_value = b"listing\n"
    provider = DockerContainerProvider("garland/aws-cli-docker", tmp_path, ["/home/u/.aws:/root/.aws"], client)
    provider.add_environment_variable("AWS_ACCESS_KEY_ID", "AKID")

    assert provider.run("aws s3 ls bucket", "列出存储桶") == "listing\n"

    client.containers.run.assert_called_once_with(
        "garland/aws-cli-docker",
        command=["sh", "-c", "aws s3 ls bucket"],
        environment={"AWS_ACCESS_KEY_ID": "AKID"},
        volumes=[f"{tmp_path.resolve()}:/workspace", "/home/u/.aws:/root/.aws"],
        working_dir="/workspace",
        remove=True,
        stdout=True,
        stderr=True,
    )


def test_container_error_becomes_command_error(tmp_path) -> None:
    client = MagicMock()
    client.containers.run.side_effect = docker.errors.ContainerError(
        "container", 3, "sh -c false", "busybox", b"boom"
    )
    provider = DockerContainerProvider("busybox", tmp_path, docker_client=client)

    with pytest.raises(CommandError) as exc_info:
        provider.run("false")

    assert exc_info.value.return_code == 3
    assert exc_info.value.stderr == "boom"
    assert exc_info.value.command == "false"
