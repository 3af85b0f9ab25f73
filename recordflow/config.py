"""Configuration settings for the recordflow service"""
import logging
from pydantic_settings import BaseSettings

from recordflow.services.recording.vocabulary import DetectorTuning, RecognitionVocabulary

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings.

    Priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values

    Nested tables (VOCABULARY, TUNING) are read from JSON, e.g.
    ``TUNING='{"search_window": 12}'``.
    """

    # Service Identity
    SERVICE_NAME: str = "recordflow"
    SERVICE_PORT: int = 5002
    API_PREFIX: str = "/api/recordflow"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Largest recording accepted by the HTTP API, in characters
    MAX_SOURCE_LENGTH: int = 500_000

    # Recognition tables; defaults target an HR back-office application
    VOCABULARY: RecognitionVocabulary = RecognitionVocabulary()

    # Detector windows and confidences
    TUNING: DetectorTuning = DetectorTuning()

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def log_settings():
    """Log the effective configuration at startup."""
    logger.info(f"Service: {settings.SERVICE_NAME}")
    logger.info(f"Port: {settings.SERVICE_PORT}")
    logger.info(f"Modules: {', '.join(settings.VOCABULARY.module_keywords)}")
    logger.info(
        f"Windows: login={settings.TUNING.login_window}, "
        f"modal={settings.TUNING.modal_window}, search={settings.TUNING.search_window}"
    )
