import pytest

from bpm_sdk.contracts import TemplateData
from bpm_sdk.templating import (
    TemplateRenderError,
    not_last,
    remove_if_present,
    render_all,
    render_if_absent,
    render_string,
)


def test_render_if_absent_never_overwrites(node):
    data = TemplateData(node=node)

    assert render_if_absent("configs/client.toml", "id = {{ node.id }}\n", data) is True
    assert render_if_absent("configs/client.toml", "something else\n", data) is False

    path = node.configs_directory / "client.toml"
    assert path.read_text(encoding="utf-8") == "id = node1\n"


def test_render_if_absent_keeps_user_edits(node):
    data = TemplateData(node=node)
    render_if_absent("configs/client.toml", "id = {{ node.id }}\n", data)
    path = node.configs_directory / "client.toml"
    path.write_text("edited by hand\n", encoding="utf-8")

    render_if_absent("configs/client.toml", "id = {{ node.id }}\n", data)

    assert path.read_text(encoding="utf-8") == "edited by hand\n"


def test_not_last_supports_comma_separated_output(node):
    data = TemplateData(node=node, plugin_data={"peers": ["a", "b", "c"]})
    template = (
        "{% for peer in plugin_data.peers %}"
        '"{{ peer }}"{% if not_last(loop.index0, plugin_data.peers) %},{% endif %}'
        "{% endfor %}"
    )

    assert render_string(template, data) == '"a","b","c"'
    assert not_last(0, [1]) is False


def test_render_string_rejects_undefined_values(node):
    with pytest.raises(TemplateRenderError, match="client.toml"):
        render_string("{{ plugin_data.missing }}", TemplateData(node=node), name="client.toml")


def test_render_all_fails_fast_and_keeps_earlier_files(node):
    templates = {
        "configs/a.txt": "a\n",
        "configs/b.txt": "{{ undefined_name }}",
        "configs/c.txt": "c\n",
    }

    with pytest.raises(TemplateRenderError):
        render_all(templates, TemplateData(node=node))

    assert (node.configs_directory / "a.txt").exists()
    assert not (node.configs_directory / "b.txt").exists()
    assert not (node.configs_directory / "c.txt").exists()


def test_render_all_returns_only_written_paths(node):
    templates = {"configs/a.txt": "a\n", "configs/b.txt": "b\n"}
    data = TemplateData(node=node)

    first = render_all(templates, data)
    second = render_all(templates, data)

    assert first == [node.configs_directory / "a.txt", node.configs_directory / "b.txt"]
    assert second == []


def test_remove_if_present_is_idempotent(node):
    render_if_absent("configs/a.txt", "a\n", TemplateData(node=node))

    assert remove_if_present("configs/a.txt", node) is True
    assert remove_if_present("configs/a.txt", node) is False
