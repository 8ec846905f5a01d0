import logging

import pydantic
import pytest

from collab_store.config import Settings, load_settings
from collab_store.logging_config import _SafeExtraFormatter, configure_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("TITLE", "LOG_LEVEL", "HOST", "PORT", "ENV_FILE"):
        monkeypatch.delenv(f"COLLAB_STORE_{name}", raising=False)


def test_defaults() -> None:
    settings = load_settings()
    assert settings.title == "collab-store"
    assert settings.log_level == "INFO"
    assert settings.port == 8000


def test_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("COLLAB_STORE_PORT", "9001")
    monkeypatch.setenv("COLLAB_STORE_LOG_LEVEL", "debug")
    monkeypatch.setenv("COLLAB_STORE_HOST", "0.0.0.0")

    settings = load_settings()

    assert settings.port == 9001
    assert settings.log_level == "DEBUG"
    assert settings.host == "0.0.0.0"


def test_env_file(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / "store.env"
    env_file.write_text("COLLAB_STORE_TITLE=docs\nCOLLAB_STORE_PORT=7000\n")
    monkeypatch.setenv("COLLAB_STORE_PORT", "7100")

    settings = load_settings(env_file)

    assert settings.title == "docs"
    # real environment variables win over the file
    assert settings.port == 7100


def test_missing_explicit_env_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "nope.env")


def test_invalid_env_value(monkeypatch) -> None:
    monkeypatch.setenv("COLLAB_STORE_PORT", "0")
    with pytest.raises(pydantic.ValidationError):
        load_settings()


def test_formatter_fills_missing_extras() -> None:
    formatter = _SafeExtraFormatter(fmt="%(message)s %(collection)s %(doc_id)s %(version)s")
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "hi", None, None)
    record.doc_id = "d1"

    assert formatter.format(record) == "hi - d1 -"


def test_configure_logging_quiets_noisy_libraries(monkeypatch) -> None:
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)

    configure_logging("DEBUG")

    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert logging.getLogger("uvicorn.access").level == logging.WARNING
