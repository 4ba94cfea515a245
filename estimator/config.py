from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    COMPANY_NAME: str = "Estimator"
    DEFAULT_ZIP_CODE: str = "00000"
    LABOR_RATE_DEFAULT: float = 65.00

    # OpenAI-compatible chat completions (DeepSeek works with OPENAI_BASE_URL)
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4"

    PRICING_TIMEOUT_SECONDS: float = 30.0
    PRICING_RETRIES: int = 1
    PRICING_BACKOFF_SECONDS: float = 1.0
    PRICE_CACHE_TTL_DAYS: int = 7

    class Config:
        env_file = ".env"


settings = Settings()
