import argparse
from enum import StrEnum
import os
import sys
import typing as t
from pathlib import Path

from pydantic import (
    BaseModel,
    Field,
    RedisDsn,
    model_validator,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

PORT = t.Annotated[int, Field(gt=0, le=65535)]


class ConfigMode(StrEnum):
    LOCAL = "local"
    TESTS = "tests"
    PROD = "prod"


class StorageBackend(StrEnum):
    MEMORY = "memory"
    REDIS = "redis"


class _Server(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: PORT = Field(default=8000)
    # browser origins allowed through CORS, empty disables the middleware
    allow_origins: list[str] = Field(default_factory=list)


class _Storage(BaseModel):
    backend: StorageBackend = StorageBackend.MEMORY
    redis_dsn: RedisDsn | None = None
    key_prefix: str = ""

    @model_validator(mode="after")
    def _check_redis_dsn(self) -> t.Self:
        if self.backend == StorageBackend.REDIS and self.redis_dsn is None:
            raise ValueError("redis_dsn is required for redis storage backend")
        return self


class _Logging(BaseModel):
    name: str = Field(default="cartstore", min_length=1)
    # warnings and errors also go here outside of debug mode
    error_log_path: Path = Path("logs") / "errors.log"


class _Cart(BaseModel):
    storage_key: str = Field(default="@GoMarketplace:products", min_length=1)
    # adding an already present product resets quantity of other items to 1
    legacy_merge: bool = True


class Config(BaseSettings):
    model_config = SettingsConfigDict(extra="allow", env_nested_delimiter="__")
    api_version: str = "1.0.0"
    mode: ConfigMode
    server: _Server = Field(default=_Server())
    storage: _Storage = Field(default=_Storage())
    cart: _Cart = Field(default=_Cart())
    logging: _Logging = Field(default=_Logging())

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        yaml_file_path = init_settings.init_kwargs.get("yaml_file")  # type: ignore
        if not yaml_file_path:
            raise Exception("Missing required init arg: yaml_file")
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file_path),
        )

    @property
    def debug(self):
        return self.mode != ConfigMode.PROD


def init_config(
    parse_cli: bool = True, config_path: Path | str | None = None
) -> Config:
    cli_args = None
    if parse_cli:
        parser = argparse.ArgumentParser()
        parser.add_argument(
            "--config-path",
            help="Path to the configuration file",
            dest="config_path",
        )
        parser.add_argument("--host", help="Server host", dest="host")
        parser.add_argument("--port", help="Server port", dest="port", type=int)
        cli_args, _ = parser.parse_known_args(sys.argv[1:])
    final_cfg_path = (
        config_path
        or getattr(cli_args, "config_path", None)
        or os.environ.get("CONFIG_PATH")
    )
    if env_mode := os.environ.get("MODE"):
        final_cfg_path = final_cfg_path or (Path() / "config" / (env_mode + ".yaml"))
    if not final_cfg_path:
        raise ValueError(
            """Missing config_path. Provide it using a cli flag --config-path, CONFIG_PATH env variable or a function arg.
            Also you can specify MODE env variable to find config by its value"""
        )
    if not Path(final_cfg_path).exists():
        raise ValueError("Config path doesn't exist: %s" % final_cfg_path)
    cfg = Config(yaml_file=final_cfg_path)  # type: ignore
    if cli_args:
        cfg.server.host = cli_args.host or cfg.server.host
        cfg.server.port = cli_args.port or cfg.server.port
    return cfg
