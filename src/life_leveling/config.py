"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from config/settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        if 'server' in data:
            flattened['host'] = data['server'].get('host')
            flattened['port'] = data['server'].get('port')
        if 'cache' in data:
            cache = data['cache']
            flattened['redis_url'] = cache.get('redis_url')
            flattened['cache_prefix'] = cache.get('prefix')
            flattened['simulation_cache_ttl_seconds'] = cache.get('simulation_ttl_seconds')
            flattened['comparison_cache_ttl_seconds'] = cache.get('comparison_ttl_seconds')
            flattened['scenario_cache_ttl_seconds'] = cache.get('scenario_ttl_seconds')

        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Authentication (optional: None disables auth)
    app_secret: str | None = Field(default=None)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Result cache (None falls back to an in-process cache)
    redis_url: str | None = Field(default=None)
    cache_prefix: str = Field(default="life_leveling:")
    simulation_cache_ttl_seconds: int = Field(default=30 * 60)
    comparison_cache_ttl_seconds: int = Field(default=60 * 60)
    scenario_cache_ttl_seconds: int = Field(default=7 * 24 * 60 * 60)

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)

    @property
    def users_dir(self) -> Path:
        d = self.project_root / "data" / "users"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @property
    def scenarios_dir(self) -> Path:
        d = self.project_root / "data" / "scenarios"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init args, environment, .env, settings.yaml, secrets."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()
