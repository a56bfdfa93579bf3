from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_name: str = "orus-builder"
    api_host: str = "0.0.0.0"
    port: int = 8080

    database_url: str = "sqlite:///./orus_builder.db"
    redis_url: str = "redis://localhost:6379/0"

    # Reserved for the auth layer in front of the API.
    jwt_secret: str | None = None

    groq_api_key: str | None = None
    groq_model: str = "llama-3.3-70b-versatile"
    groq_api_base: str = "https://api.groq.com/openai/v1"
    llm_timeout: float = 60.0
    llm_temperature: float = 0.3
    llm_max_tokens: int = 4000

    history_max_size: int = 10000
    history_retention_days: int = 180

settings = Settings()
