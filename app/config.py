"""
Configuration Management
Environment-based configuration for the backend, telemetry and logging
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
import logging

from app.models.outcomes import BackendConfig

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Frontend edge configuration"""

    # Service info
    service_name: str = "frontend"
    service_version: str = "1.0.0"
    deployment_environment: str = "development"
    application_name: str = "frontend-web"

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8080

    # Backend
    backend_url: str = "http://backend.default.svc.cluster.local:8080"
    backend_timeout_ms: int = 30000

    # OpenTelemetry
    otel_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "otel-collector.observability.svc.cluster.local:4317"
    otel_metric_export_interval_ms: int = 10000

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    logging_config_path: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator('port')
    @classmethod
    def validate_port(cls, v):
        if not 1 <= v <= 65535:
            raise ValueError('Port must be between 1 and 65535')
        return v

    @field_validator('backend_timeout_ms', 'otel_metric_export_interval_ms')
    @classmethod
    def validate_positive_millis(cls, v):
        if v < 1:
            raise ValueError('Intervals must be at least 1 millisecond')
        return v

    @field_validator('backend_url')
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip('/')

    def backend_config(self) -> BackendConfig:
        """Build the immutable backend configuration"""
        return BackendConfig(
            base_url=self.backend_url,
            default_timeout_ms=self.backend_timeout_ms,
        )

    def telemetry_active(self) -> bool:
        return self.otel_enabled and bool(self.otel_exporter_otlp_endpoint)

    def log_config(self):
        """Log configuration summary"""
        logger.info(f"Service: {self.service_name} {self.service_version} ({self.deployment_environment})")
        logger.info(f"Backend: {self.backend_url} (default timeout {self.backend_timeout_ms}ms)")
        logger.info(f"OpenTelemetry: {'enabled' if self.telemetry_active() else 'disabled'} -> {self.otel_exporter_otlp_endpoint}")


# Global configuration instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
