import json

import pytest

from bpm_sdk.configuration import (
    ConfigError,
    dump_meta,
    load_node,
    load_settings,
    resolve_env_vars,
    save_node,
)
from bpm_sdk.contracts import MetaInfo, Parameter


def test_load_node_binds_descriptor_and_reads_secrets(node_file):
    secrets_dir = node_file.parent / "secrets"
    secrets_dir.mkdir()
    (secrets_dir / "node-key").write_text("abcd\n", encoding="utf-8")
    (secrets_dir / "account.json").write_text('{"address": "0x1"}', encoding="utf-8")

    node = load_node(node_file)

    assert node.id == "node1"
    assert node.plugin_name == "test"
    assert node.node_directory == node_file.parent.absolute()
    assert node.secrets == {"account.json": {"address": "0x1"}, "node-key": "abcd\n"}


def test_load_node_keeps_binary_secrets(node_file):
    secrets_dir = node_file.parent / "secrets"
    secrets_dir.mkdir()
    (secrets_dir / "node.der").write_bytes(b"\x30\x82\x01\xff\xfe")

    node = load_node(node_file)

    assert node.secrets["node.der"].encode("utf-8", errors="surrogateescape") == b"\x30\x82\x01\xff\xfe"


def test_load_node_rejects_non_utf8_json_secrets(node_file):
    secrets_dir = node_file.parent / "secrets"
    secrets_dir.mkdir()
    (secrets_dir / "account.json").write_bytes(b"\xff\xfe{}")

    with pytest.raises(ConfigError, match="account.json is not valid JSON"):
        load_node(node_file)


def test_load_node_rejects_invalid_json(tmp_path):
    path = tmp_path / "node.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError, match="not valid JSON"):
        load_node(path)


def test_load_node_reports_validation_errors(tmp_path):
    path = tmp_path / "node.json"
    path.write_text(json.dumps({"plugin": "test"}), encoding="utf-8")

    with pytest.raises(ConfigError, match="node.id"):
        load_node(path)


def test_save_node_round_trips_descriptor_fields(node_file):
    node = load_node(node_file)
    node.version = "2.0.0"

    save_node(node)

    payload = json.loads(node_file.read_text(encoding="utf-8"))
    assert payload["version"] == "2.0.0"
    assert payload["plugin"] == "test"
    assert payload["str_parameters"]["docker-network"] == "bpm"
    assert (node_file.parent / "secrets").is_dir()
    assert (node_file.parent / "configs").is_dir()


def test_load_settings_defaults_without_env(monkeypatch):
    monkeypatch.delenv("BPM_SDK_SETTINGS", raising=False)

    settings = load_settings()

    assert settings.docker_base_url is None
    assert settings.timeouts.start == 180.0


def test_load_settings_reads_file_from_env(monkeypatch, tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "docker_base_url: ${DOCKER_URL}\ntimeouts:\n  start: 600\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("BPM_SDK_SETTINGS", str(path))
    monkeypatch.setenv("DOCKER_URL", "unix:///var/run/docker.sock")

    settings = load_settings()

    assert settings.docker_base_url == "unix:///var/run/docker.sock"
    assert settings.timeouts.start == 600.0
    assert settings.timeouts.stop == 120.0


def test_load_settings_rejects_unknown_keys(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("unknown: 1\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="settings.unknown"):
        load_settings(path)


def test_resolve_env_vars_reports_missing_variable(monkeypatch):
    monkeypatch.delenv("BPM_MISSING", raising=False)

    with pytest.raises(ConfigError, match=r"\$\.a\[0\]"):
        resolve_env_vars({"a": ["${BPM_MISSING}"]})


def test_dump_meta_keeps_field_order():
    meta = MetaInfo(
        name="test",
        version="1.0.0",
        description="A test plugin",
        parameters=(Parameter(name="subtype", type="string", default="watcher"),),
        supported=("upgrade",),
    )

    text = dump_meta(meta)

    assert text.splitlines()[0] == "name: test"
    assert "protocol_version: 1.1.0" in text
    assert "- upgrade" in text
