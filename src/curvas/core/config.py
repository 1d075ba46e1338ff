import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


def _default_database_url() -> str:
    """Default DB path: a SQLite file in the working directory."""
    return "sqlite+aiosqlite:///./curvas.db"


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


@dataclass
class Settings:
    """Application settings loaded from environment variables with safe defaults."""

    app_name: str = "Curvas"
    env: str = "dev"
    database_url: str = ""  # set from from_env
    log_level: str = "INFO"

    # Allocation
    random_seed: Optional[int] = None
    allocation_max_retries: int = 5
    ticket_number_start: int = 1000

    # Physical-sale commissions
    staff_commission_percentage: float = 2.5
    transaction_cost: float = 700.0
    gateway_commission_percentage: float = 19.0

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""
        db_url = os.getenv("DATABASE_URL") or _default_database_url()
        return cls(
            app_name=os.getenv("APP_NAME", cls.app_name),
            env=os.getenv("ENV", cls.env),
            database_url=db_url,
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            random_seed=_optional_int("CURVAS_RANDOM_SEED"),
            allocation_max_retries=int(
                os.getenv("ALLOCATION_MAX_RETRIES", cls.allocation_max_retries)
            ),
            ticket_number_start=int(
                os.getenv("TICKET_NUMBER_START", cls.ticket_number_start)
            ),
            staff_commission_percentage=float(
                os.getenv("STAFF_COMMISSION_PERCENTAGE", cls.staff_commission_percentage)
            ),
            transaction_cost=float(os.getenv("TRANSACTION_COST", cls.transaction_cost)),
            gateway_commission_percentage=float(
                os.getenv("GATEWAY_COMMISSION_PERCENTAGE", cls.gateway_commission_percentage)
            ),
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings.from_env()
