"""Tests for the environment-backed parameter provider."""

from __future__ import annotations

from cantrips.parameters import EnvironmentParameterProvider

from .conftest import FakeCommandRunner

CI_ENV = {
    "CIRCLE_PROJECT_USERNAME": "validUser",
    "CIRCLE_PROJECT_REPONAME": "validRepoName",
    "CIRCLE_BRANCH": "work/myBranch",
    "CIRCLE_SHA1": "1234567890abcdef",
    "DOCKER_REGISTRY": "registry.example.com",
}


def test_ci_environment_values() -> None:
    provider = EnvironmentParameterProvider(CI_ENV)

    assert provider.get("ProjectName") == "validUser/validRepoName"
    assert provider.get("BranchName") == "work/myBranch"
    assert provider.get("ShortHash") == "12345678"
    assert provider.get("IsRelease") == "false"
    assert provider.get("ReleaseVersion") is None
    assert provider.get("DockerRegistry") == "registry.example.com"
    assert provider.get("Unknown") is None


def test_release_tag() -> None:
    provider = EnvironmentParameterProvider({**CI_ENV, "CIRCLE_TAG": "release-1.4.0"})

    assert provider.get("IsRelease") == "true"
    assert provider.get("ReleaseVersion") == "1.4.0"


def test_non_release_tag_is_ignored() -> None:
    provider = EnvironmentParameterProvider({**CI_ENV, "CIRCLE_TAG": "v1.4.0"})

    assert provider.get("IsRelease") == "false"


def test_project_name_falls_back_to_directory(tmp_path) -> None:
    project_dir = tmp_path / "my-service"
    project_dir.mkdir()

    provider = EnvironmentParameterProvider({}, project_dir=project_dir)

    assert provider.get("ProjectName") == "my-service"


def test_git_fallback_is_used_and_cached(tmp_path) -> None:
    runner = FakeCommandRunner(stdout="abcdef12\n")
    provider = EnvironmentParameterProvider({}, runner, tmp_path)

    assert provider.get("ShortHash") == "abcdef12"
    assert provider.get("ShortHash") == "abcdef12"
    assert runner.commands == ["git rev-parse --short=8 HEAD"]


def test_git_failure_yields_none(tmp_path) -> None:
    runner = FakeCommandRunner(fail_on=lambda command, index: 128)
    provider = EnvironmentParameterProvider({}, runner, tmp_path)

    assert provider.get("BranchName") is None
    assert runner.commands == ["git rev-parse --abbrev-ref HEAD"]


def test_without_runner_there_is_no_git_fallback(tmp_path) -> None:
    assert EnvironmentParameterProvider({}, project_dir=tmp_path).get("ShortHash") is None
