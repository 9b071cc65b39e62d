from typing import Literal, Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import PostgresDsn


AnswerPolicyName = Literal["best_effort", "strict"]


class PostgresSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    host: str = Field(default="localhost", alias="POSTGRES_HOST")
    port: int = Field(default=5432, alias="POSTGRES_DB_PORT")
    db_name: str = Field(default="studygen", alias="POSTGRES_DB_NAME")
    user: str = Field(default="postgres", alias="POSTGRES_DB_USER")
    password: str = Field(default="postgres", alias="POSTGRES_DB_PASSWORD")

    @computed_field
    def connection_string(self) -> PostgresDsn:
        return PostgresDsn(
            f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db_name}"
        )


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="studygen", alias="APP_NAME")
    version: str = Field(default="v1", alias="API_VERSION")
    port: int = Field(default=9000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")

    @computed_field
    def is_production(self) -> bool:
        return self.mode != "dev"

    @computed_field
    def is_testing(self) -> bool:
        return self.mode == "test"


class GenerationSettings(BaseSettings):
    """Provider roster, model ids and per-kind item bounds."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # Ordered roster used by the round-robin router, e.g. "gemini,groq"
    providers: str = Field(default="gemini,groq", alias="GENERATION_PROVIDERS")

    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    groq_api_key: Optional[str] = Field(default=None, alias="GROQ_API_KEY")
    openrouter_api_key: Optional[str] = Field(default=None, alias="OPENROUTER_API_KEY")

    gemini_model: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL")
    groq_model: str = Field(default="llama-3.1-8b-instant", alias="LLAMA_MODEL_NAME")
    openrouter_model: str = Field(
        default="x-ai/grok-code-fast-1", alias="OPENROUTER_MODEL"
    )
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1", alias="OPENROUTER_BASE_URL"
    )

    temperature: float = Field(default=0.7, alias="GENERATION_TEMPERATURE")
    max_output_tokens: int = Field(default=8192, alias="GENERATION_MAX_OUTPUT_TOKENS")
    provider_timeout_seconds: float = Field(
        default=60.0, alias="PROVIDER_TIMEOUT_SECONDS"
    )

    quiz_min_items: int = Field(default=10, alias="QUIZ_MIN_ITEMS")
    quiz_max_items: int = Field(default=50, alias="QUIZ_MAX_ITEMS")
    quiz_default_items: int = Field(default=15, alias="QUIZ_DEFAULT_ITEMS")

    flashcards_min_items: int = Field(default=5, alias="FLASHCARDS_MIN_ITEMS")
    flashcards_max_items: int = Field(default=30, alias="FLASHCARDS_MAX_ITEMS")
    flashcards_default_items: int = Field(default=10, alias="FLASHCARDS_DEFAULT_ITEMS")

    study_set_min_items: int = Field(default=3, alias="STUDY_SET_MIN_ITEMS")
    study_set_max_items: int = Field(default=10, alias="STUDY_SET_MAX_ITEMS")
    study_set_default_items: int = Field(default=5, alias="STUDY_SET_DEFAULT_ITEMS")

    # "best_effort" repairs a bad answer index to 0, "strict" drops the question
    quiz_answer_policy: AnswerPolicyName = Field(
        default="best_effort", alias="QUIZ_ANSWER_POLICY"
    )
    study_set_answer_policy: AnswerPolicyName = Field(
        default="best_effort", alias="STUDY_SET_ANSWER_POLICY"
    )

    @computed_field
    def provider_names(self) -> list[str]:
        return [p.strip().lower() for p in self.providers.split(",") if p.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    postgres: PostgresSettings = Field(default_factory=lambda: PostgresSettings())
    generation: GenerationSettings = Field(
        default_factory=lambda: GenerationSettings()
    )


settings = Settings()
