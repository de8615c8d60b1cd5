"""Tests for configuration objects and YAML loading."""
import threading

import pytest

from imgproc.core.config import (
    GlobalConfig,
    LoggingConfig,
    ProcessingConfig,
    config_from_dict,
    get_current_config,
    get_processing_config,
    load_config,
    set_current_config,
)
from imgproc.core.exceptions import InvalidArgError


class TestProcessingConfig:

    def test_defaults(self):
        config = ProcessingConfig()
        assert config.num_workers == 1
        assert config.lanczos_size == 3
        assert config.separability_tolerance == 1e-6
        assert config.histogram_precision == 1.0

    @pytest.mark.parametrize("kwargs", [
        {"num_workers": 0},
        {"separability_tolerance": -1.0},
        {"lanczos_size": 0},
        {"histogram_precision": 0.0},
    ])
    def test_validation(self, kwargs):
        with pytest.raises(InvalidArgError):
            ProcessingConfig(**kwargs)

    def test_logging_level_validation(self):
        assert LoggingConfig(level="debug").level == "debug"
        with pytest.raises(InvalidArgError):
            LoggingConfig(level="LOUD")


class TestCurrentConfig:

    def test_default_when_unset(self):
        assert get_current_config() == GlobalConfig()

    def test_set_and_reset(self):
        config = GlobalConfig(processing=ProcessingConfig(num_workers=3))
        set_current_config(config)
        assert get_processing_config().num_workers == 3
        set_current_config(None)
        assert get_processing_config().num_workers == 1

    def test_thread_local(self):
        set_current_config(GlobalConfig(processing=ProcessingConfig(num_workers=5)))
        seen = []
        thread = threading.Thread(target=lambda: seen.append(get_processing_config().num_workers))
        thread.start()
        thread.join()
        assert seen == [1]


class TestLoading:

    def test_from_dict(self):
        config = config_from_dict({"processing": {"lanczos_size": 2}, "logging": {"level": "DEBUG"}})
        assert config.processing.lanczos_size == 2
        assert config.processing.num_workers == 1
        assert config.logging.level == "DEBUG"

    def test_empty_document(self):
        assert config_from_dict(None) == GlobalConfig()

    def test_unknown_keys(self):
        with pytest.raises(InvalidArgError):
            config_from_dict({"processing": {"threads": 4}})
        with pytest.raises(InvalidArgError):
            config_from_dict({"output": {}})
        with pytest.raises(InvalidArgError):
            config_from_dict(["processing"])

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "imgproc.yaml"
        path.write_text("processing:\n  num_workers: 4\n  histogram_precision: 2.0\n")
        config = load_config(path)
        assert config.processing.num_workers == 4
        assert config.processing.histogram_precision == 2.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")
