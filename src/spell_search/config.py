from typing import Optional

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PUBLIC_TYPESENSE_* are the names older deployments export
    typesense_host: str = Field(
        default="localhost",
        validation_alias=AliasChoices("typesense_host", "public_typesense_host"),
    )
    typesense_port: int = Field(
        default=8108,
        validation_alias=AliasChoices("typesense_port", "public_typesense_port"),
    )
    typesense_protocol: str = Field(
        default="http",
        validation_alias=AliasChoices("typesense_protocol", "public_typesense_protocol"),
    )
    typesense_api_key: Optional[SecretStr] = None  # no safe default
    typesense_connection_timeout: float = 10.0  # seconds, connect phase only

    collection_name: str = "spells"

    # Ingestion
    data_dir: str = "data/spells"
    source_glob: str = "spells-*.json"
    import_batch_size: int = 500

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def typesense_url(self) -> str:
        return f"{self.typesense_protocol}://{self.typesense_host}:{self.typesense_port}"

    @property
    def api_key_value(self) -> str:
        if self.typesense_api_key is None:
            return ""
        return self.typesense_api_key.get_secret_value().strip()

settings = Settings()
