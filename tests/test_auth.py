"""Tests for registry login / logout and image tagging."""

from __future__ import annotations

import pytest

from cantrips.managers import CredentialsError
from cantrips.managers.image import ImageTagger, RegistryAuthenticator, RegistryCredentials
from cantrips.managers.image.utils import normalize_registry, parse_image_name


def test_login_passes_password_on_stdin(runner) -> None:
    RegistryAuthenticator(runner).login("bob", "s3cret", "reg.io/")

    [(command, _, stdin)] = runner.calls
    assert command == "docker login -u bob --password-stdin reg.io"
    assert stdin == "s3cret"
    assert "s3cret" not in command


def test_login_falls_back_to_defaults(runner) -> None:
    authenticator = RegistryAuthenticator(
        runner, default_username="ci", default_password="token", default_registry="default.io"
    )

    authenticator.login()

    assert runner.calls == [("docker login -u ci --password-stdin default.io", "登录仓库 default.io", "token")]


def test_login_without_registry_targets_docker_hub(runner) -> None:
    RegistryAuthenticator(runner).login("bob", "pw")

    assert runner.commands == ["docker login -u bob --password-stdin"]


@pytest.mark.parametrize(("username", "password"), [(None, "pw"), ("bob", None), ("", "")])
def test_login_without_credentials_raises(runner, username, password) -> None:
    with pytest.raises(CredentialsError):
        RegistryAuthenticator(runner).login(username, password)

    assert runner.calls == []


def test_credentials_prefer_explicit_values() -> None:
    credentials = RegistryCredentials.resolve("explicit", None, "default", "default-pw")

    assert credentials == RegistryCredentials("explicit", "default-pw")


def test_logout(runner) -> None:
    authenticator = RegistryAuthenticator(runner, default_registry="default.io")

    authenticator.logout()
    authenticator.logout("other.io")

    assert runner.commands == ["docker logout default.io", "docker logout other.io"]


def test_tagger(runner) -> None:
    ImageTagger(runner).tag("a:latest", "reg.io/a:v1")

    assert runner.commands == ["docker tag a:latest reg.io/a:v1"]


@pytest.mark.parametrize(
    ("image", "registry", "expected"),
    [
        ("a:v1", "reg.io", "reg.io/a:v1"),
        ("a:v1", "reg.io/", "reg.io/a:v1"),
        ("a:v1", None, "a:v1"),
        ("a:v1", "", "a:v1"),
    ],
)
def test_add_registry_prefix(image, registry, expected) -> None:
    assert ImageTagger.add_registry_prefix(image, registry) == expected


def test_registry_and_image_name_helpers() -> None:
    assert normalize_registry("reg.io//") == "reg.io"
    assert normalize_registry("/") is None
    assert parse_image_name("api:v2") == ("api", "v2")
    assert parse_image_name("api") == ("api", "latest")
