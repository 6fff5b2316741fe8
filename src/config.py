from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "MORTGAGE_"}

    # Amortization engine
    balance_epsilon: Decimal = Decimal("0.01")  # Balance at or below this counts as repaid
    iteration_cap_factor: int = 2  # Hard cap = term months * factor
    max_term_years: int = 50

    # Scenario sharing
    max_scenarios: int = 3
    share_base_url: str = "http://localhost:8000/"

    # App
    debug: bool = False
    log_level: str = "INFO"


settings = Settings()
