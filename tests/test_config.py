"""Tests for configuration loading."""

import logging
from pathlib import Path

from wasaupdate.config import WasaupdateConfig, load_config
from wasaupdate.core.context import UpdateContext
from wasaupdate.core.logging_utils import configure_logging, normalize_log_level, prepare_log_file


def test_defaults_when_file_missing(tmp_path):
    config = load_config(tmp_path)
    assert config.script.path == "wasaupdate.py"
    assert config.network.timeout_seconds == 30.0
    assert config.post_update.command == []
    assert config.resolve_script_path() == tmp_path / "wasaupdate.py"


def test_load_full_file(tmp_path):
    (tmp_path / "wasaupdate.yaml").write_text(
        """
script:
  path: policies/update.py
logging:
  level: debug
network:
  timeout_seconds: 5
  chunk_size: 1024
  unknown_key: ignored
install:
  target_dir: bin
post_update:
  command: tool --serve
  background: true
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.resolve_script_path() == tmp_path / "policies" / "update.py"
    assert config.logging.level == "debug"
    assert config.network.timeout_seconds == 5
    assert config.network.chunk_size == 1024
    assert config.post_update.command == ["tool", "--serve"]
    assert config.post_update.background is True

    context = UpdateContext.from_config(config)
    assert context.timeout_seconds == 5
    assert context.target_dir == tmp_path / "bin"
    assert context.executable_dir == (tmp_path / "bin").resolve()


def test_script_shorthand_and_explicit_file(tmp_path):
    custom = tmp_path / "conf" / "custom.yaml"
    custom.parent.mkdir()
    custom.write_text("script: my_policy.py\n", encoding="utf-8")

    config = load_config(tmp_path, config_file="conf/custom.yaml")

    assert config.resolve_script_path() == custom.parent / "my_policy.py"


def test_malformed_file_falls_back_to_defaults(tmp_path):
    (tmp_path / "wasaupdate.yaml").write_text("- just\n- a list\n", encoding="utf-8")
    config = load_config(tmp_path)
    assert config == WasaupdateConfig(config_root=tmp_path)


def test_invalid_yaml_falls_back_to_defaults(tmp_path):
    (tmp_path / "wasaupdate.yaml").write_text("script: [unclosed\n", encoding="utf-8")
    assert load_config(tmp_path).script.path == "wasaupdate.py"


def test_absolute_script_path(tmp_path):
    config = WasaupdateConfig.from_dict({"script": {"path": str(tmp_path / "abs.py")}})
    assert config.resolve_script_path() == tmp_path / "abs.py"


class TestLogging:
    def test_normalize_log_level(self):
        assert normalize_log_level("warn") == "WARNING"
        assert normalize_log_level(" debug ") == "DEBUG"
        assert normalize_log_level(None) == "WARNING"
        assert normalize_log_level("chatty") == "WARNING"

    def test_prepare_log_file_reset(self, tmp_path):
        log = tmp_path / "logs" / "wasaupdate.log"
        log.parent.mkdir()
        log.write_text("old run\n", encoding="utf-8")
        prepare_log_file(log, reset_on_start=True)
        assert not log.exists()

    def test_prepare_log_file_separator(self, tmp_path):
        log = tmp_path / "wasaupdate.log"
        log.write_text("old run\n", encoding="utf-8")
        prepare_log_file(Path(log), reset_on_start=False)
        content = log.read_text(encoding="utf-8")
        assert content.startswith("old run\n")
        assert "=== WASAUPDATE RUN - " in content

    def test_configure_logging_creates_log_directory(self, tmp_path):
        log = tmp_path / "logs" / "nested" / "wasaupdate.log"
        root = logging.getLogger()
        previous_level = root.level
        try:
            assert configure_logging("info", log_file=log) == "INFO"
            logging.getLogger("wasaupdate.test").info("hello from the test")
        finally:
            for handler in list(root.handlers):
                if isinstance(handler, logging.FileHandler) and handler.baseFilename == str(log.resolve()):
                    root.removeHandler(handler)
                    handler.close()
            root.setLevel(previous_level)

        assert "hello from the test" in log.read_text(encoding="utf-8")
