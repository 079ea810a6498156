"""
Development environment configuration overrides
"""

from dataclasses import dataclass
from config.app_config import AppConfig, SupabaseConfig, WebhookConfig, AuthConfig


@dataclass
class DevelopmentConfig(AppConfig):
    """Development environment configuration"""

    def __post_init__(self):
        self.environment = "development"
        self.debug = True

        # Credentials still come from secrets/environment
        self.supabase = SupabaseConfig.from_secrets()
        self.webhook = WebhookConfig.from_secrets()
        self.auth = AuthConfig.from_secrets()

        self.logging.level = "DEBUG"
        self.logging.enable_file_logging = True
        self.logging.log_file = "logs/dev-app.log"

        self.ui.app_title = "🧪 Suporte Offshore (DEV)"

        # Fail fast on slow lookups while developing
        self.lookup.timeout_seconds = 3.0


def get_development_config() -> DevelopmentConfig:
    """Get development-specific configuration"""
    return DevelopmentConfig()
