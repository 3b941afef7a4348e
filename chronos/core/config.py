import os


class Settings:
    # Package Settings
    PROJECT_NAME: str = "Chronos"
    VERSION: str = "0.4.0"
    ENABLED: bool = os.getenv("CHRONOS_ENABLED", "true").lower() == "true"

    # Measure Settings
    AUTO_SAVE_ON_STOP: bool = os.getenv("CHRONOS_AUTO_SAVE_ON_STOP", "true").lower() == "true"
    DEBUG: bool = os.getenv("CHRONOS_DEBUG", "false").lower() == "true"

    # Idle Scheduling Settings
    IDLE_TIMEOUT_MS: float = float(os.getenv("CHRONOS_IDLE_TIMEOUT_MS", 2000))  # max deferral of a flush slice
    IDLE_BUDGET_MS: float = float(os.getenv("CHRONOS_IDLE_BUDGET_MS", 50))  # budget granted per slice
    IDLE_DELAY_MS: float = float(os.getenv("CHRONOS_IDLE_DELAY_MS", 1))

    # Logging Settings
    LOG_LEVEL: str = os.getenv("CHRONOS_LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("CHRONOS_LOG_FILE", "")


settings = Settings()
