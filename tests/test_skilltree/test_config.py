import pytest
from skilltree.config import SkillTreeConfig

def test_defaults():
    config = SkillTreeConfig()

    assert config.default_scale == 0.5
    assert (config.min_scale, config.max_scale) == (0.3, 3.0)
    assert (config.wheel_zoom_in, config.wheel_zoom_out) == (1.1, 0.9)
    assert (config.button_zoom_in, config.button_zoom_out) == (1.2, 0.8)
    assert config.grid_size == 150
    assert config.save_debounce == 0.5

def test_from_dict_ignores_unknown(caplog):
    config = SkillTreeConfig.from_dict({"node_radius": 40, "bogus": 1})

    assert config.node_radius == 40
    assert not hasattr(config, "bogus")
    assert "bogus" in caplog.text

def test_to_dict_round_trip():
    config = SkillTreeConfig(canvas_width=800)

    assert SkillTreeConfig.from_dict(config.to_dict()).canvas_width == 800
