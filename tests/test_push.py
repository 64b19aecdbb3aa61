"""Tests for the push coordinator: tag with registry prefix, push, aggregate failures."""

from __future__ import annotations

from typing import Optional

import pytest

from cantrips.managers.image import (
    DefaultsResolver,
    DescriptorError,
    ImageDescriptorParser,
    ImagePusher,
    ImagePushError,
)
from cantrips.parameters import StaticParameterProvider
from cantrips.utils import CommandOutput, ShellCommandRunner

from .conftest import FakeCommandRunner


def test_push_with_registry_tags_then_pushes_each_target(runner, parser, defaults) -> None:
    pushed = ImagePusher(runner, parser, defaults).push("a,b:v1", registry="reg.io")

    assert pushed == ["reg.io/a:latest", "reg.io/b:v1"]
    assert runner.commands == [
        "docker tag a:latest reg.io/a:latest",
        "docker push reg.io/a:latest",
        "docker tag b:v1 reg.io/b:v1",
        "docker push reg.io/b:v1",
    ]


def test_push_without_registry_pushes_local_names(runner, parser, defaults) -> None:
    pushed = ImagePusher(runner, parser, defaults).push("a:v1")

    assert pushed == ["a:v1"]
    assert runner.commands == ["docker push a:v1"]


def test_push_uses_docker_registry_parameter_and_strips_trailing_slash(runner) -> None:
    defaults = DefaultsResolver(
        StaticParameterProvider({"ProjectName": "team/app", "DockerRegistry": "registry.example.com/"})
    )

    ImagePusher(runner, ImageDescriptorParser(defaults), defaults).push()

    assert runner.commands == [
        "docker tag team-app:latest registry.example.com/team-app:latest",
        "docker push registry.example.com/team-app:latest",
    ]


def test_explicit_registry_wins_over_parameter(runner) -> None:
    defaults = DefaultsResolver(StaticParameterProvider({"DockerRegistry": "default.io"}))

    ImagePusher(runner, ImageDescriptorParser(defaults), defaults).push("a", registry="explicit.io/")

    assert runner.commands[-1] == "docker push explicit.io/a:latest"


def test_failure_does_not_stop_remaining_targets(parser, defaults) -> None:
    runner = FakeCommandRunner(fail_on=lambda command, index: 1 if index == 0 else None)

    with pytest.raises(ImagePushError) as exc_info:
        ImagePusher(runner, parser, defaults).push("a,b", registry="reg.io")

    # 第一个镜像的tag失败后跳过其push，第二个镜像照常tag与push
    assert runner.commands == [
        "docker tag a:latest reg.io/a:latest",
        "docker tag b:latest reg.io/b:latest",
        "docker push reg.io/b:latest",
    ]
    [failure] = exc_info.value.failures
    assert failure.target == "reg.io/a:latest"
    assert failure.stage == "tag"
    assert failure.return_code == 1


def test_push_stage_failure_is_reported(parser, defaults) -> None:
    runner = FakeCommandRunner(fail_on=lambda command, index: 125 if command.startswith("docker push") else None)

    with pytest.raises(ImagePushError) as exc_info:
        ImagePusher(runner, parser, defaults).push("a,b")

    assert runner.commands == ["docker push a:latest", "docker push b:latest"]
    assert [failure.target for failure in exc_info.value.failures] == ["a:latest", "b:latest"]
    assert {failure.stage for failure in exc_info.value.failures} == {"push"}
    assert exc_info.value.failures[0].command == "docker push a:latest"


def test_empty_document_pushes_nothing(runner, parser, defaults) -> None:
    assert ImagePusher(runner, parser, defaults).push({"docker": {}}) == []
    assert runner.calls == []


def test_invalid_descriptor_issues_no_commands(runner, parser, defaults) -> None:
    with pytest.raises(DescriptorError):
        ImagePusher(runner, parser, defaults).push("a,B")

    assert runner.calls == []


def test_concurrent_push_keeps_result_order(runner, parser, defaults) -> None:
    pushed = ImagePusher(runner, parser, defaults, max_workers=3).push("a,b,c", registry="reg.io")

    assert pushed == ["reg.io/a:latest", "reg.io/b:latest", "reg.io/c:latest"]
    assert sorted(runner.commands) == sorted(
        [f"docker tag {name}:latest reg.io/{name}:latest" for name in "abc"]
        + [f"docker push reg.io/{name}:latest" for name in "abc"]
    )


class MissingDockerRunner(ShellCommandRunner):
    """Runs commands against a docker executable that does not exist."""

    def __init__(self, missing_binary: str) -> None:
        super().__init__()
        self.missing_binary = missing_binary

    def run(self, command: str, description: str, input: Optional[str] = None) -> CommandOutput:
        return super().run(command.replace("docker", self.missing_binary, 1), description, input)


def test_missing_docker_binary_is_reported_per_target(parser, defaults, tmp_path) -> None:
    runner = MissingDockerRunner(str(tmp_path / "docker"))

    with pytest.raises(ImagePushError) as exc_info:
        ImagePusher(runner, parser, defaults).push("a,b", registry="reg.io")

    assert [failure.target for failure in exc_info.value.failures] == ["reg.io/a:latest", "reg.io/b:latest"]
    assert {failure.stage for failure in exc_info.value.failures} == {"tag"}
    assert {failure.return_code for failure in exc_info.value.failures} == {127}
