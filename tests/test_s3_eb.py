"""Tests for the S3 and Elastic Beanstalk plugins running inside containers."""

from __future__ import annotations

import pytest

from cantrips.managers import CredentialsError, DeploymentError, ElasticBeanstalkDeployer, S3Handler
from cantrips.managers.eb_manager import resolve_pattern_string
from cantrips.parameters import StaticParameterProvider

from .conftest import FakeContainerProvider


@pytest.fixture
def container() -> FakeContainerProvider:
    return FakeContainerProvider()


def test_s3_handler_injects_credentials(container) -> None:
    S3Handler(container, "AKID", "SECRET")

    assert container.environment == {"AWS_ACCESS_KEY_ID": "AKID", "AWS_SECRET_ACCESS_KEY": "SECRET"}


def test_s3_handler_requires_credentials(container) -> None:
    with pytest.raises(CredentialsError):
        S3Handler(container, "AKID", None)


def test_s3_list(container) -> None:
    assert S3Handler(container, "AKID", "SECRET").list("my-bucket") == "ok"
    assert container.commands == ["aws s3 ls my-bucket"]


def test_s3_get_defaults_target_to_basename(container) -> None:
    handler = S3Handler(container, "AKID", "SECRET")

    handler.get("s3://bucket/path/file.txt")
    handler.get("s3://bucket/other.txt", "out/renamed.txt")

    assert container.commands == [
        "aws s3 cp s3://bucket/path/file.txt ./file.txt",
        "aws s3 cp s3://bucket/other.txt out/renamed.txt",
    ]


def test_s3_get_rejects_non_s3_uri(container) -> None:
    with pytest.raises(ValueError):
        S3Handler(container, "AKID", "SECRET").get("https://bucket/file.txt")

    assert container.commands == []


def test_resolve_pattern_string_skips_invalid_fragments() -> None:
    assert resolve_pattern_string("master:prod|develop:staging|broken|a:b:c|:x") == {
        "master": "prod",
        "develop": "staging",
    }


def test_eb_deploy_selects_environment_for_branch(container, parameters) -> None:
    deployer = ElasticBeanstalkDeployer(container, parameters)

    deployer.deploy("master:prod|work/myBranch:feature-env", timeout=30)

    assert container.commands == ["init && eb deploy feature-env --timeout 30"]


def test_eb_deploy_uses_default_pattern(container, parameters) -> None:
    ElasticBeanstalkDeployer(container, parameters, default_pattern="work/myBranch:env").deploy()

    assert container.commands == ["init && eb deploy env --timeout 60"]


def test_eb_deploy_without_pattern_fails(container, parameters) -> None:
    with pytest.raises(DeploymentError):
        ElasticBeanstalkDeployer(container, parameters).deploy()


def test_eb_deploy_without_matching_branch_fails(container, parameters) -> None:
    with pytest.raises(DeploymentError):
        ElasticBeanstalkDeployer(container, parameters).deploy("master:prod")

    assert container.commands == []


def test_eb_deploy_without_branch_fails(container) -> None:
    with pytest.raises(DeploymentError):
        ElasticBeanstalkDeployer(container, StaticParameterProvider()).deploy("master:prod")
