import json

import pytest

from n64emu.config import (
    Config,
    InputConfig,
    assign_controller,
    bind_input_profile,
    clear_bindings,
    default_config_path,
)
from n64emu.input import InputProfile, default_profile


def _custom_config():
    config = Config()
    config.input.input_profiles["custom"] = InputProfile()
    config.input.input_profile_binding[2] = "custom"
    config.input.controller_assignment[1] = "guid-one"
    return config


def test_default_config_contents():
    config = Config()
    assert config.input.input_profiles == {"default": default_profile()}
    assert config.input.input_profile_binding == ["default"] * 4
    assert config.input.controller_assignment == [None] * 4


def test_dict_round_trip():
    config = _custom_config()
    assert Config.from_dict(config.to_dict()) == config


def test_dict_survives_json():
    config = _custom_config()
    restored = Config.from_dict(json.loads(json.dumps(config.to_dict())))
    assert restored == config


def test_from_dict_rejects_wrong_port_count():
    data = Config().to_dict()
    data["input"]["input_profile_binding"] = ["default"] * 3
    with pytest.raises(ValueError):
        Config.from_dict(data)


def test_from_dict_rejects_missing_section():
    with pytest.raises(ValueError):
        Config.from_dict({})


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = _custom_config()
    config.save(path)
    assert Config.load(path) == config
    assert json.loads(path.read_text())["input"]["controller_assignment"][1] == "guid-one"


def test_load_missing_file_gives_default(tmp_path):
    assert Config.load(tmp_path / "absent.json") == Config()


def test_load_invalid_json_gives_default(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert Config.load(path) == Config()


def test_clear_bindings():
    config = _custom_config()
    clear_bindings(config)
    assert config.input.input_profile_binding == ["default"] * 4
    assert config.input.controller_assignment == [None] * 4
    assert "custom" in config.input.input_profiles


def test_bind_input_profile():
    config = _custom_config()
    bind_input_profile(config, "custom", 1)
    assert config.input.input_profile_binding[0] == "custom"


def test_bind_unknown_profile():
    config = Config()
    with pytest.raises(ValueError, match="Invalid profile name"):
        bind_input_profile(config, "missing", 1)
    assert config.input.input_profile_binding == ["default"] * 4


@pytest.mark.parametrize("port", [0, 5])
def test_bind_rejects_bad_port(port):
    with pytest.raises(ValueError, match="Port"):
        bind_input_profile(Config(), "default", port)


def test_assign_controller():
    config = Config()
    assign_controller(config, 1, 4, ["first", "second"])
    assert config.input.controller_assignment == [None, None, None, "second"]


def test_assign_invalid_controller():
    config = Config()
    with pytest.raises(ValueError, match="Invalid controller number"):
        assign_controller(config, 2, 1, ["first", "second"])


def test_default_config_path_name():
    assert default_config_path().name == "config.json"


def test_input_config_lists_are_independent():
    first = InputConfig()
    second = InputConfig()
    first.input_profile_binding[0] = "changed"
    assert second.input_profile_binding[0] == "default"