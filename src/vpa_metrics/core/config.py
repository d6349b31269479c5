# src/vpa_metrics/core/config.py

import logging
import os
import re

from dotenv import load_dotenv

# Load environment variables from a .env file located in the project root
dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", "..", ".env")
load_dotenv(dotenv_path=dotenv_path)


class Config:
    """
    Handles the application's configuration by loading values from environment variables.
    """

    # Prefix shared by every metric exported by the recommender.
    METRICS_NAMESPACE = "vpa_recommender"

    # --- Logging variables ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # --- Exposition variables ---
    METRICS_ADDRESS = os.getenv("METRICS_ADDRESS", "0.0.0.0")
    METRICS_PORT = int(os.getenv("METRICS_PORT", "8942"))

    # --- Recommender loop variables ---
    RECOMMENDER_INTERVAL = os.getenv("RECOMMENDER_INTERVAL", "1m")

    # --- Tracing variables ---
    # Empty means spans are created by the no-op tracer and never exported.
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "")

    def validate_instance(self):
        if not 0 < self.METRICS_PORT < 65536:
            raise ValueError(f"METRICS_PORT must be between 1 and 65535, got {self.METRICS_PORT}.")
        if not re.match(r"^(\d+)([smh])$", self.RECOMMENDER_INTERVAL.lower()):
            raise ValueError("RECOMMENDER_INTERVAL format is invalid. Use 's', 'm', or 'h'.")
        if not self.OTEL_EXPORTER_OTLP_ENDPOINT:
            logging.getLogger(__name__).debug("OTEL_EXPORTER_OTLP_ENDPOINT is not set; tracing is disabled.")


# Instantiate the config to be imported by other modules
config = Config()
config.validate_instance()
