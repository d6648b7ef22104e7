"""Tests for local image lookup and pulling."""

import asyncio

import pytest

from conftest import command_error, fake_docker_client
from docker_service.errors import ImagePullFailure
from docker_service.images import ImageResolver


def test_present_image_is_not_pulled():
    client = fake_docker_client()
    resolver = ImageResolver("my-image", client)

    assert asyncio.run(resolver.ensure_present()) is False
    client.inspect_image.assert_awaited_once_with("my-image")
    client.pull_image.assert_not_awaited()


def test_absent_image_is_pulled():
    client = fake_docker_client()
    client.inspect_image.side_effect = command_error("docker inspect my-image", stderr="No such object")
    resolver = ImageResolver("my-image", client)

    assert asyncio.run(resolver.ensure_present()) is True
    client.pull_image.assert_awaited_once_with("my-image")


def test_any_inspect_failure_counts_as_absent():
    client = fake_docker_client()
    client.inspect_image.side_effect = command_error("docker inspect my-image", exit_code=125, stderr="daemon busy")

    assert asyncio.run(ImageResolver("my-image", client).is_present()) is False


def test_pull_failure_is_fatal():
    client = fake_docker_client()
    client.inspect_image.side_effect = command_error("docker inspect my-image")
    client.pull_image.side_effect = command_error("docker pull my-image", stderr="manifest unknown")
    resolver = ImageResolver("my-image", client)

    with pytest.raises(ImagePullFailure, match="manifest unknown") as excinfo:
        asyncio.run(resolver.ensure_present())
    assert excinfo.value.image == "my-image"
