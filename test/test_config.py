from pathlib import Path

import pydantic
import pytest

from scrollsplit.config import OutputConfig, Settings, SplittingConfig
from scrollsplit.splitting import SplitConfig


def test_defaults():
    config = SplittingConfig()

    assert config.desired_height == 2000
    assert config.tolerance == 80
    assert config.blank_run_length == 1
    assert OutputConfig().output_dir == Path("output")
    assert OutputConfig().image_format == "png"
    assert OutputConfig().max_image_pixels == 500_000_000
    assert OutputConfig(max_image_pixels=None).max_image_pixels is None


@pytest.mark.parametrize(
    "values",
    [
        {"desired_height": 0},
        {"tolerance": 256},
        {"tolerance": -1},
        {"blank_run_length": 0},
    ],
)
def test_splitting_config_rejects_out_of_range(values):
    with pytest.raises(pydantic.ValidationError):
        SplittingConfig(**values)


def test_output_config_rejects_unknown_format():
    with pytest.raises(pydantic.ValidationError):
        OutputConfig(image_format="gif")


def test_to_split_config():
    config = SplittingConfig(desired_height=1200, tolerance=200, blank_run_length=4)

    assert config.to_split_config() == SplitConfig(desired_height=1200, tolerance=200, blank_run_length=4)


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("SCROLLSPLIT_DEBUG", "true")
    monkeypatch.setenv("SCROLLSPLIT_SPLITTING__TOLERANCE", "120")
    monkeypatch.setenv("SCROLLSPLIT_OUTPUT__OUTPUT_DIR", "/tmp/segments")

    settings = Settings()

    assert settings.debug is True
    assert settings.splitting.tolerance == 120
    assert settings.splitting.desired_height == 2000
    assert settings.output.output_dir == Path("/tmp/segments")
