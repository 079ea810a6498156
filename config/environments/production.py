"""
Production environment configuration overrides
"""

from dataclasses import dataclass
from config.app_config import AppConfig, SupabaseConfig, WebhookConfig, AuthConfig


@dataclass
class ProductionConfig(AppConfig):
    """Production environment configuration"""

    def __post_init__(self):
        self.environment = "production"
        self.debug = False

        self.supabase = SupabaseConfig.from_secrets()
        self.webhook = WebhookConfig.from_secrets()
        self.auth = AuthConfig.from_secrets()

        # Production logging - less verbose, focus on errors
        self.logging.level = "INFO"
        self.logging.enable_file_logging = True
        self.logging.log_file = "logs/prod-app.log"

        self.ui.app_title = "Suporte Offshore"
        self.auth.access_log_enabled = True


def get_production_config() -> ProductionConfig:
    """Get production-specific configuration"""
    return ProductionConfig()
