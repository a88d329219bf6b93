"""Configuration schema using Pydantic.

Persisted as camelCase JSON at ~/.icxclient/config.json; ``ICX_`` environment
variables (nested with ``__``, e.g. ``ICX_ENDPOINT__URL``) override the file.
"""

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EndpointConfig(BaseModel):
    """Node endpoint."""
    url: str = "http://localhost:9000/api/v3"
    nid: int = 1  # Network id: 1 mainnet, 2 and up for test networks
    timeout: float = 20.0
    ping_interval: float | None = 20.0  # Websocket keepalive for monitors; None disables


class KeystoreConfig(BaseModel):
    """Where keystore files go and how expensive their key derivation is."""
    directory: str = "~/.icxclient/keystore"
    n: int = 1 << 14
    r: int = 8
    p: int = 1

    @property
    def path(self) -> Path:
        return Path(self.directory).expanduser()


class ClientConfig(BaseSettings):
    """Root configuration for icxclient."""
    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    keystore: KeystoreConfig = Field(default_factory=KeystoreConfig)

    model_config = SettingsConfigDict(
        env_prefix="ICX_",
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment beats values loaded from the config file.
        return env_settings, init_settings, file_secret_settings
