from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    SECURITY_TOKEN: str | None = None
    DISPATCH_PATH: str = "/__dispatch"
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CALLFN_",
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
