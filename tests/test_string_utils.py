"""Tests for image-name normalization helpers."""

from __future__ import annotations

import pytest

from cantrips.string_utils import is_normalized, normalize

SAMPLES = [
    "validUser/validRepoName",
    "My  Project!!",
    "already-normalized_name",
    "--leading-and-trailing--",
    "a--b",
    "Feature/JIRA-123: Add [thing]",
    "12345678",
    "UPPER.case.With.Dots",
]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("validUser/validRepoName", "validuser-validreponame"),
        ("My  Project!!", "my-project"),
        ("a--b", "a-b"),
        ("keep_underscore", "keep_underscore"),
        ("Release 1.2.3", "release-1-2-3"),
        ("12345678", "12345678"),
    ],
)
def test_normalize_examples(raw: str, expected: str) -> None:
    assert normalize(raw) == expected


@pytest.mark.parametrize("raw", SAMPLES)
def test_normalize_is_idempotent_and_valid(raw: str) -> None:
    once = normalize(raw)

    assert normalize(once) == once
    assert is_normalized(once)


@pytest.mark.parametrize("raw", ["", "///", "   ", None])
def test_normalize_rejects_values_without_valid_characters(raw) -> None:
    with pytest.raises(ValueError):
        normalize(raw)


@pytest.mark.parametrize("value", ["abc", "abc-1_2", "0", "a_b-c"])
def test_is_normalized_accepts_image_safe_tokens(value: str) -> None:
    assert is_normalized(value)


@pytest.mark.parametrize("value", ["Abc", "a/b", "a:b", "a[b]", "a b", "", "a.b", "abc\n", None])
def test_is_normalized_rejects_other_values(value) -> None:
    assert not is_normalized(value)
