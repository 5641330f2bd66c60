"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Annotated, Callable, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .languages import LANGUAGE_PRESET_KEYS, get_language_preset
from .utils import normalize_language_tag, split_setting_list

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .services.coverage import TargetLanguageConfig
    from .services.tree import ContentNode


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="Dub Sub Scanner", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=8096, alias="PORT")

    database_url: str = Field(
        default="sqlite+aiosqlite:///./dubsub.db", alias="DATABASE_URL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    target_language: str = Field(default="english", alias="TARGET_LANGUAGE")
    target_language_aliases: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(), alias="TARGET_LANGUAGE_ALIASES"
    )
    scan_collections: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(), alias="SCAN_COLLECTIONS"
    )
    scan_concurrency: int = Field(default=1, alias="SCAN_CONCURRENCY", ge=1, le=16)
    scan_timeout_seconds: float | None = Field(
        default=None, alias="SCAN_TIMEOUT", gt=0
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("target_language", mode="before")
    @classmethod
    def _parse_target_language(cls, value: object) -> str:
        """Accept preset keys case-insensitively."""

        key = str(value or "").strip().lower() or "english"
        if key not in LANGUAGE_PRESET_KEYS:
            raise ValueError("Unknown target language configured")
        return key

    @field_validator("target_language_aliases", mode="before")
    @classmethod
    def _parse_aliases(cls, value: object) -> tuple[str, ...]:
        entries = split_setting_list(value, name="TARGET_LANGUAGE_ALIASES")
        aliases: list[str] = []
        for entry in entries:
            alias = normalize_language_tag(entry)
            if alias and alias not in aliases:
                aliases.append(alias)
        return tuple(aliases)

    @field_validator("scan_collections", mode="before")
    @classmethod
    def _parse_collections(cls, value: object) -> tuple[str, ...]:
        return tuple(split_setting_list(value, name="SCAN_COLLECTIONS"))

    @model_validator(mode="after")
    def _fill_preset_aliases(self) -> "Settings":
        """Fall back to the preset aliases when no override is configured."""

        if not self.target_language_aliases:
            preset = get_language_preset(self.target_language)
            self.target_language_aliases = preset.aliases
        return self

    @property
    def target_language_config(self) -> "TargetLanguageConfig":
        """Return the classifier configuration for the selected language."""

        from .services.coverage import TargetLanguageConfig

        return TargetLanguageConfig.from_aliases(self.target_language_aliases)

    def collection_filter(self) -> Callable[["ContentNode"], bool]:
        """Return the root-eligibility predicate for scans.

        With no ``SCAN_COLLECTIONS`` configured every visible collection is
        eligible; otherwise names are compared case-insensitively.
        """

        wanted = {name.casefold() for name in self.scan_collections}

        def _is_eligible(collection: "ContentNode") -> bool:
            if not wanted:
                return True
            return (collection.name or "").strip().casefold() in wanted

        return _is_eligible

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
