from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage settings
    item_store_path: str = "data/features.json"

    # Link settings
    # When False, create_link neither validates input nor refuses circular
    # dependencies; callers check with validate / would_create_circular first.
    enforce_acyclic: bool = True

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
