from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def load_env_file(env_path: Path) -> None:
    if not env_path.exists():
        return

    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith("export "):
            line = line[len("export ") :]

        key, separator, value = line.partition("=")
        if not separator:
            continue

        env_key = key.strip()
        if not env_key:
            continue

        env_value = _strip_quotes(value.strip())
        os.environ.setdefault(env_key, env_value)


def _resolve_project_path(project_root: Path, raw_path: str | None) -> str | None:
    if raw_path is None:
        return None
    if not raw_path.strip():
        return None
    candidate = Path(raw_path.strip()).expanduser()
    if candidate.is_absolute():
        return str(candidate)
    return str((project_root / candidate).resolve())


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_mode(
    key: str,
    default: str,
    allowed: tuple[str, ...],
) -> str:
    value = os.getenv(key, default).strip().lower()
    if value not in allowed:
        allowed_csv = ", ".join(allowed)
        raise ValueError(f"{key} must be one of: {allowed_csv}")
    return value


def _env_optional(key: str) -> str | None:
    value = os.getenv(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    service_name: str
    service_version: str
    environment: str
    log_level: str
    host: str
    port: int
    translation_mode: str
    translation_api_url: str
    translation_api_host: str
    translation_api_key: str | None
    default_target_language: str
    history_store_mode: str
    history_store_path: str | None
    history_slot_key: str = "translationHistory"
    history_page_size: int = 30
    history_store_quota_bytes: int = 5 * 1024 * 1024
    translation_timeout_seconds: float = 0.0
    mock_translation_delay_seconds: float = 0.0

    @property
    def translation_configured(self) -> bool:
        if self.translation_mode == "mock":
            return True
        return bool(self.translation_api_key)

    @property
    def translation_timeout(self) -> float | None:
        if self.translation_timeout_seconds <= 0:
            return None
        return self.translation_timeout_seconds

    def redacted(self) -> dict[str, str | int | float | bool | None]:
        return {
            "service_name": self.service_name,
            "service_version": self.service_version,
            "environment": self.environment,
            "log_level": self.log_level,
            "host": self.host,
            "port": self.port,
            "translation_mode": self.translation_mode,
            "translation_api_url": self.translation_api_url,
            "translation_api_host": self.translation_api_host,
            "translation_configured": self.translation_configured,
            "translation_timeout_seconds": self.translation_timeout_seconds,
            "mock_translation_delay_seconds": self.mock_translation_delay_seconds,
            "default_target_language": self.default_target_language,
            "history_store_mode": self.history_store_mode,
            "history_store_path": self.history_store_path,
            "history_slot_key": self.history_slot_key,
            "history_page_size": self.history_page_size,
            "history_store_quota_bytes": self.history_store_quota_bytes,
        }


def build_settings(project_root: Path) -> Settings:
    load_env_file(project_root / ".env")

    return Settings(
        service_name=os.getenv("TEXTTRANSLATOR_SERVICE_NAME", "texttranslator"),
        service_version=os.getenv("TEXTTRANSLATOR_SERVICE_VERSION", "0.1.0"),
        environment=os.getenv("TEXTTRANSLATOR_ENV", "development"),
        log_level=os.getenv("TEXTTRANSLATOR_LOG_LEVEL", "INFO").upper(),
        host=os.getenv("TEXTTRANSLATOR_HOST", "127.0.0.1"),
        port=int(os.getenv("TEXTTRANSLATOR_PORT", "8000")),
        translation_mode=_env_mode(
            "TRANSLATION_MODE",
            "rapidapi",
            ("rapidapi", "mock"),
        ),
        translation_api_url=os.getenv(
            "TRANSLATION_API_URL",
            "https://openl-translate.p.rapidapi.com/translate",
        ).strip(),
        translation_api_host=os.getenv(
            "TRANSLATION_API_HOST",
            "openl-translate.p.rapidapi.com",
        ).strip(),
        translation_api_key=_env_optional("TRANSLATION_API_KEY"),
        translation_timeout_seconds=float(os.getenv("TRANSLATION_TIMEOUT_SECONDS", "0")),
        mock_translation_delay_seconds=float(
            os.getenv("MOCK_TRANSLATION_DELAY_SECONDS", "0.0")
        ),
        default_target_language=os.getenv("DEFAULT_TARGET_LANGUAGE", "fr").strip() or "fr",
        history_store_mode=_env_mode("HISTORY_STORE_MODE", "file", ("file", "memory")),
        history_store_path=_resolve_project_path(
            project_root,
            os.getenv("HISTORY_STORE_PATH", "data/local_storage.json"),
        ),
        history_slot_key=os.getenv("HISTORY_SLOT_KEY", "translationHistory").strip()
        or "translationHistory",
        history_page_size=max(1, int(os.getenv("HISTORY_PAGE_SIZE", "30"))),
        history_store_quota_bytes=max(
            0, int(os.getenv("HISTORY_STORE_QUOTA_BYTES", str(5 * 1024 * 1024)))
        ),
    )
