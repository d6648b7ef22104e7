"""Tests for the JSON-lines EventLogger."""

import json

from docker_service.logger import EventLogger


def test_writes_json_lines(tmp_path):
    path = tmp_path / "logs" / "events.log"
    logger = EventLogger(path, name="svc", echo=False)

    logger.info("service started", stage="start", data={"image": "my-image"})
    logger.warning("cleanup failed", stage="cleanup")

    lines = [json.loads(line) for line in path.read_text().splitlines()]
    assert [entry["level"] for entry in lines] == ["info", "warning"]
    assert lines[0]["logger"] == "svc"
    assert lines[0]["stage"] == "start"
    assert lines[0]["data"] == {"image": "my-image"}
    assert lines[1]["context"] == {}


def test_echo_only_logger(capsys):
    logger = EventLogger(name="svc")
    logger.debug("Docker command: docker run my-image", stage="start")

    out = capsys.readouterr().out
    entry = json.loads(out)
    assert entry["level"] == "debug"
    assert entry["message"] == "Docker command: docker run my-image"


def test_no_echo(tmp_path, capsys):
    EventLogger(tmp_path / "e.log", echo=False).error("boom")
    assert capsys.readouterr().out == ""


def test_container_output_is_a_debug_record(tmp_path):
    path = tmp_path / "events.log"
    EventLogger(path, echo=False).container_output("stderr", "warning: low memory")

    entry = json.loads(path.read_text())
    assert entry["level"] == "debug"
    assert entry["stage"] == "container"
    assert entry["message"] == "warning: low memory"
    assert entry["data"] == {"stream": "stderr"}
