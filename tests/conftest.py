"""Shared fakes and fixtures for the cantrips test suite."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

import pytest

from cantrips.managers.image import DefaultsResolver, ImageDescriptorParser
from cantrips.parameters import StaticParameterProvider
from cantrips.utils import CommandError, CommandOutput

FailurePredicate = Callable[[str, int], Optional[int]]


class FakeCommandRunner:
    """Records every command; `fail_on(command, index)` returns an exit code to simulate a failure."""

    def __init__(self, fail_on: Optional[FailurePredicate] = None, stdout: str = "") -> None:
        self.fail_on = fail_on
        self.stdout = stdout
        self.calls: List[Tuple[str, str, Optional[str]]] = []

    @property
    def commands(self) -> List[str]:
        return [command for command, _, _ in self.calls]

    def run(self, command: str, description: str, input: Optional[str] = None) -> CommandOutput:
        index = len(self.calls)
        self.calls.append((command, description, input))
        return_code = self.fail_on(command, index) if self.fail_on else None
        if return_code:
            raise CommandError(command, return_code, "", "simulated failure")
        return CommandOutput(command, 0, self.stdout, "")


class FakeContainerProvider:
    """Container provider double that records commands and injected environment."""

    def __init__(self, output: str = "ok") -> None:
        self.output = output
        self.environment: Dict[str, str] = {}
        self.commands: List[str] = []

    def add_environment_variable(self, name: str, value: str) -> None:
        self.environment[name] = value

    def run(self, command: str, description: str = "") -> str:
        self.commands.append(command)
        return self.output


@pytest.fixture
def runner() -> FakeCommandRunner:
    return FakeCommandRunner()


@pytest.fixture
def parameters() -> StaticParameterProvider:
    return StaticParameterProvider(
        {
            "ProjectName": "validUser/validRepoName",
            "BranchName": "work/myBranch",
            "ShortHash": "12345678",
            "IsRelease": "false",
            "ReleaseVersion": None,
            "DockerRegistry": None,
        }
    )


@pytest.fixture
def defaults(parameters: StaticParameterProvider) -> DefaultsResolver:
    return DefaultsResolver(parameters)


@pytest.fixture
def parser(defaults: DefaultsResolver) -> ImageDescriptorParser:
    return ImageDescriptorParser(defaults)
