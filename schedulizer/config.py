import logging

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)

DEV_SECRET_KEY = "dev-only-secret-key-change-me-before-deploying"


class Settings(BaseSettings):
    environment: str = "development"

    database_url: str = "sqlite:///./schedulizer.db"

    # JWT
    secret_key: str = Field(default=DEV_SECRET_KEY, min_length=32)
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(default=30, gt=0)

    frontend_url: str = "http://localhost:5173"

    # página pública de agendamento
    booking_max_future_days: int = Field(default=60, gt=0)

    # billing
    trial_days: int = Field(default=14, ge=0)
    stripe_price_essential_monthly: str = ""
    stripe_price_essential_yearly: str = ""
    stripe_price_professional_monthly: str = ""
    stripe_price_professional_yearly: str = ""

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="SCHEDULIZER_", env_file=".env", extra="ignore")

    @model_validator(mode="after")
    def _no_dev_secret_in_production(self) -> "Settings":
        if self.environment == "production" and self.secret_key == DEV_SECRET_KEY:
            raise ValueError("secret_key precisa ser definido em produção")
        return self


def load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        fields = [".".join(str(p) for p in err["loc"]) or "settings" for err in exc.errors()]
        logger.error("Variáveis de ambiente inválidas: %s", ", ".join(fields))
        raise


settings = load_settings()


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
