from pathlib import Path

import pytest

from adr_registry.config import ConfigurationError, load_generator_config, load_github_app_config

_ENV_VARS = (
    "ADR_CONFIG_FILE",
    "ADR_ORGANIZATION",
    "ADR_OUTPUT_PATH",
    "ADR_BASE_URL",
    "ADR_LOCAL_PATH",
    "ADR_LOG_LEVEL",
    "GITHUB_APP_ID",
    "GITHUB_APP_INSTALLATION_ID",
    "GITHUB_APP_PRIVATE_KEY_PATH",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def _write_config(path: Path, body: str) -> Path:
    path.write_text(body, encoding="utf-8")
    return path


def test_defaults_when_default_file_is_missing() -> None:
    cfg = load_generator_config()

    assert cfg.organization == ""
    assert cfg.adr_path == "docs/adr"
    assert cfg.output_path == "docs"
    assert cfg.discover_all is True
    assert cfg.local_mode is False
    assert cfg.logging.level == "INFO"


def test_loads_default_location(tmp_path: Path) -> None:
    (tmp_path / "config").mkdir()
    _write_config(tmp_path / "config" / "config.yaml", "organization: acme\nbase_url: /adrs/\n")

    cfg = load_generator_config()

    assert cfg.organization == "acme"
    assert cfg.base_url == "/adrs"


def test_explicit_path_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_generator_config(str(tmp_path / "missing.yaml"))


def test_config_file_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _write_config(
        tmp_path / "custom.yaml",
        "organization: acme\ndiscover_all: false\ninclude: ['acme/api-*']\nadr_path: docs\\decisions\n",
    )
    monkeypatch.setenv("ADR_CONFIG_FILE", str(path))

    cfg = load_generator_config()

    assert cfg.discover_all is False
    assert cfg.include == ["acme/api-*"]
    assert cfg.adr_path == "docs/decisions"


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _write_config(
        tmp_path / "c.yaml",
        "organization: acme\noutput_path: site\nlogging:\n  file: null\n",
    )
    monkeypatch.setenv("ADR_ORGANIZATION", "globex")
    monkeypatch.setenv("ADR_OUTPUT_PATH", "public")
    monkeypatch.setenv("ADR_LOCAL_PATH", "/srv/repos")
    monkeypatch.setenv("ADR_LOG_LEVEL", "DEBUG")

    cfg = load_generator_config(str(path))

    assert cfg.organization == "globex"
    assert cfg.output_path == "public"
    assert cfg.local_mode is True
    assert cfg.local_path == "/srv/repos"
    assert cfg.logging.level == "DEBUG"
    assert cfg.logging.file is None


def test_empty_file_means_defaults(tmp_path: Path) -> None:
    cfg = load_generator_config(str(_write_config(tmp_path / "empty.yaml", "")))
    assert cfg.adr_path == "docs/adr"


@pytest.mark.parametrize("body", ["- just\n- a list\n", "request_delay: soon\n"])
def test_invalid_config_raises(tmp_path: Path, body: str) -> None:
    with pytest.raises(ConfigurationError):
        load_generator_config(str(_write_config(tmp_path / "bad.yaml", body)))


def test_github_app_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_APP_ID", "123")
    monkeypatch.setenv("GITHUB_APP_INSTALLATION_ID", "456")
    monkeypatch.setenv("GITHUB_APP_PRIVATE_KEY_PATH", "/keys/app.pem")

    cfg = load_github_app_config()

    assert cfg.app_id == 123
    assert cfg.installation_id == 456
    assert cfg.private_key_path == "/keys/app.pem"


def test_github_app_config_requires_every_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_APP_ID", "123")
    with pytest.raises(ConfigurationError, match="GITHUB_APP_INSTALLATION_ID"):
        load_github_app_config()


def test_github_app_config_rejects_non_numeric_ids(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_APP_ID", "abc")
    monkeypatch.setenv("GITHUB_APP_INSTALLATION_ID", "456")
    monkeypatch.setenv("GITHUB_APP_PRIVATE_KEY_PATH", "/keys/app.pem")
    with pytest.raises(ConfigurationError, match="GITHUB_APP_ID must be a valid integer"):
        load_github_app_config()
