from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Payload formatting settings loaded from environment variables.

    Pydantic Settings reads env vars prefixed with PAYLOADGUARD_ (case-insensitive).
    In development, it also reads from .env file if present.
    """

    # Name of the document element wrapping XML-serialized content
    xml_root_node_name: str = "response"
    # Version written in the <?xml ...?> declaration
    xml_version: str = "1.0"

    # Distinct JSON schema texts whose dereferenced tree is kept in memory
    json_schema_cache_size: int = 128

    model_config = SettingsConfigDict(
        env_prefix="PAYLOADGUARD_",
        env_file=".env",  # Load from .env in development
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


settings = Settings()
