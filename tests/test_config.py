"""Settings and logger configuration tests."""

import json
import logging
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.config import Settings
from shortener.enums import AppEnv
from shortener.exceptions import StorageUnavailableError
from shortener.logger import LOGGER_NAME, get_logger, setup_logger
from shortener.models import ALIAS_MAX_LENGTH
from shortener.storage import URLStorage


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> pytest.MonkeyPatch:
    monkeypatch.chdir(tmp_path)
    for name in (
        "APP_ENV",
        "DATABASE_URL",
        "ALIAS_LENGTH",
        "ALIAS_MAX_ATTEMPTS",
        "REQUEST_TIMEOUT_SECONDS",
        "HTTP_USER",
        "HTTP_PASSWORD",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = get_logger()
    logger.handlers.clear()
    logger.propagate = True


# ============================================================================
# SETTINGS
# ============================================================================


def test_defaults(clean_env) -> None:
    settings = Settings(HTTP_PASSWORD="pw")
    assert settings.APP_ENV is AppEnv.LOCAL
    assert settings.DATABASE_URL == "sqlite+aiosqlite:///./storage.db"
    assert settings.ALIAS_LENGTH == 6
    assert settings.ALIAS_MAX_ATTEMPTS == 5
    assert settings.REQUEST_TIMEOUT_SECONDS == 4.0
    assert settings.HTTP_USER == "admin"
    assert settings.HTTP_PASSWORD.get_secret_value() == "pw"


def test_env_overrides(clean_env) -> None:
    clean_env.setenv("APP_ENV", "prod")
    clean_env.setenv("ALIAS_LENGTH", "8")
    clean_env.setenv("ALIAS_MAX_ATTEMPTS", "10")
    clean_env.setenv("HTTP_PASSWORD", "from-env")

    settings = Settings()
    assert settings.APP_ENV is AppEnv.PROD
    assert settings.ALIAS_LENGTH == 8
    assert settings.ALIAS_MAX_ATTEMPTS == 10
    assert settings.HTTP_PASSWORD.get_secret_value() == "from-env"


def test_dotenv_file_is_read(clean_env, tmp_path) -> None:
    (tmp_path / ".env").write_text("HTTP_PASSWORD=dotenv\nALIAS_LENGTH=7\n")
    settings = Settings()
    assert settings.HTTP_PASSWORD.get_secret_value() == "dotenv"
    assert settings.ALIAS_LENGTH == 7


def test_password_is_required(clean_env) -> None:
    with pytest.raises(ValidationError):
        Settings()


def test_password_is_not_printed(clean_env) -> None:
    assert "hunter2" not in repr(Settings(HTTP_PASSWORD="hunter2"))


@pytest.mark.parametrize(
    "overrides",
    [
        {"ALIAS_LENGTH": 0},
        {"ALIAS_LENGTH": ALIAS_MAX_LENGTH + 1},
        {"ALIAS_MAX_ATTEMPTS": 0},
        {"REQUEST_TIMEOUT_SECONDS": 0},
        {"APP_ENV": "staging"},
    ],
)
def test_invalid_values_rejected(clean_env, overrides) -> None:
    with pytest.raises(ValidationError):
        Settings(HTTP_PASSWORD="pw", **overrides)


# ============================================================================
# LOGGER
# ============================================================================


@pytest.mark.parametrize(
    "env, level",
    [(AppEnv.LOCAL, logging.DEBUG), (AppEnv.DEV, logging.DEBUG), (AppEnv.PROD, logging.INFO)],
)
def test_logger_level_per_env(env: AppEnv, level: int) -> None:
    logger = setup_logger(env)
    assert logger.name == LOGGER_NAME
    assert logger.level == level
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_setup_logger_is_idempotent() -> None:
    setup_logger("local")
    logger = setup_logger("local")
    assert len(logger.handlers) == 1


def test_local_format_is_text(capsys: pytest.CaptureFixture) -> None:
    setup_logger(AppEnv.LOCAL)
    get_logger().info("hello")
    out = capsys.readouterr().out.strip().splitlines()[-1]
    assert out.endswith(" - shortener - INFO - hello")


def test_json_format_carries_request_id(capsys: pytest.CaptureFixture) -> None:
    logger = setup_logger(AppEnv.DEV)
    logging.LoggerAdapter(logger, {"request_id": "abc"}).info("hello")
    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record["request_id"] == "abc"
    assert record["msg"] == "hello"
    assert record["level"] == "INFO"


def test_child_logger_records_get_default_request_id(capsys: pytest.CaptureFixture) -> None:
    setup_logger(AppEnv.PROD)
    get_logger(f"{LOGGER_NAME}.storage").info("child")
    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record["request_id"] == "-"
    assert record["logger"] == "shortener.storage"


@pytest.mark.parametrize("env", [AppEnv.DEV, AppEnv.PROD])
def test_json_lines_survive_quotes_and_newlines(capsys: pytest.CaptureFixture, env: AppEnv) -> None:
    setup_logger(env)
    message = 'insert failed: disk "full"\n[SQL: INSERT INTO urls (alias, url) VALUES (?, ?)]'
    get_logger().error(message)
    lines = capsys.readouterr().out.strip().splitlines()
    assert json.loads(lines[-1])["msg"] == message


@pytest.mark.asyncio
async def test_storage_failure_logs_one_json_line(capsys: pytest.CaptureFixture) -> None:
    setup_logger(AppEnv.PROD)
    session = AsyncMock(spec=AsyncSession)
    session.add = MagicMock()
    session.commit = AsyncMock(side_effect=OperationalError("INSERT INTO urls", {}, Exception('disk "full"')))

    @asynccontextmanager
    async def sessions():
        yield session

    storage = URLStorage(sessions, logger=get_logger(f"{LOGGER_NAME}.storage"))
    with pytest.raises(StorageUnavailableError):
        await storage.save_url("https://example.com", "ex1")

    lines = capsys.readouterr().out.strip().splitlines()
    record = json.loads(lines[-1])
    assert record["level"] == "ERROR"
    assert 'disk "full"' in record["msg"]
