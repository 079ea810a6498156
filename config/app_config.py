"""
Unified Configuration System for Suporte Offshore

This module provides a centralized configuration system that consolidates all application settings,
supports environment-based overrides, and provides type-safe configuration access.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List
import streamlit as st
import os
from pathlib import Path


def _read_setting(name: str, default: str = "") -> str:
    """Read a setting from Streamlit secrets, falling back to the environment"""
    # In test environment, prefer environment variables
    if os.getenv("PYTEST_CURRENT_TEST") is not None:
        return os.getenv(name, default)

    try:
        return st.secrets.get(name, os.getenv(name, default))
    except Exception:
        # No secrets.toml available
        return os.getenv(name, default)


@dataclass
class SupabaseConfig:
    """Backend-as-a-service connection settings"""
    url: str = ""
    anon_key: str = ""
    attachments_bucket: str = "chat-attachments"

    @classmethod
    def from_secrets(cls) -> 'SupabaseConfig':
        """Load Supabase config from Streamlit secrets or environment"""
        return cls(
            url=_read_setting("SUPABASE_URL"),
            anon_key=_read_setting("SUPABASE_ANON_KEY"),
            attachments_bucket=_read_setting("SUPABASE_ATTACHMENTS_BUCKET", "chat-attachments"),
        )


@dataclass
class WebhookConfig:
    """Reply webhook settings"""
    url: str = "https://n8n-webhook.2yhtoy.easypanel.host/webhook/robo"
    # None keeps the transport default (no timeout)
    timeout_seconds: Optional[float] = None
    anonymous_user_id: str = "anonymous"

    @classmethod
    def from_secrets(cls) -> 'WebhookConfig':
        defaults = cls()
        return cls(url=_read_setting("REPLY_WEBHOOK_URL", defaults.url))


@dataclass
class ChatConfig:
    """Chat behaviour settings"""
    title_max_length: int = 30
    default_title: str = "Nova Conversa"
    no_text_reply: str = "Recebido, mas sem resposta de texto."
    welcome_message: str = (
        "Olá! Sou seu assistente virtual da Suporte Offshore. "
        "Como posso ajudar você hoje com seus investimentos?"
    )
    accepted_file_types: List[str] = field(default_factory=lambda: [
        "png", "jpg", "jpeg", "gif", "webp", "pdf", "txt", "csv", "xlsx", "docx"
    ])


@dataclass
class LookupConfig:
    """Third-party lookup services used during login and onboarding"""
    ip_lookup_url: str = "https://ipwho.is/"
    postal_code_url: str = "https://viacep.com.br/ws/{cep}/json/"
    timeout_seconds: float = 5.0


@dataclass
class AuthConfig:
    """Authentication and onboarding configuration"""
    password_min_length: int = 6
    password_reset_redirect_url: str = ""
    access_log_enabled: bool = True

    @classmethod
    def from_secrets(cls) -> 'AuthConfig':
        return cls(password_reset_redirect_url=_read_setting("PASSWORD_RESET_REDIRECT_URL"))


@dataclass
class UIConfig:
    """User interface configuration"""
    app_title: str = "Suporte Offshore"
    tagline: str = "Comece sua jornada de investimentos hoje."
    footer: str = "Suporte Offshore. Todos os direitos reservados."
    page_icon: str = "💼"


@dataclass
class LoggingConfig:
    """Logging and monitoring configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    enable_file_logging: bool = True
    log_file: str = "logs/app.log"


@dataclass
class AppConfig:
    """Main application configuration"""
    supabase: SupabaseConfig = field(default_factory=SupabaseConfig)
    webhook: WebhookConfig = field(default_factory=WebhookConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    lookup: LookupConfig = field(default_factory=LookupConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Environment settings
    environment: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    @classmethod
    def load(cls) -> 'AppConfig':
        """Load configuration with environment overrides"""
        config = cls()

        config.supabase = SupabaseConfig.from_secrets()
        config.webhook = WebhookConfig.from_secrets()
        config.auth = AuthConfig.from_secrets()

        if config.environment == "production":
            config.debug = False
            config.logging.level = "INFO"
        elif config.environment == "development":
            config.debug = True
            config.logging.level = "DEBUG"

        return config

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors"""
        errors = []

        if not self.supabase.url:
            errors.append("Supabase URL is required")
        if not self.supabase.anon_key:
            errors.append("Supabase anon key is required")
        if not self.webhook.url:
            errors.append("Reply webhook URL is required")
        if self.chat.title_max_length <= 0:
            errors.append("Conversation title limit must be positive")

        if self.logging.enable_file_logging:
            log_dir = Path(self.logging.log_file).parent
            if not log_dir.exists():
                log_dir.mkdir(parents=True, exist_ok=True)

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Non-secret settings, for diagnostics"""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "supabase_url": self.supabase.url,
            "attachments_bucket": self.supabase.attachments_bucket,
            "webhook_url": self.webhook.url,
            "log_level": self.logging.level,
        }


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance"""
    global _config
    if _config is None:
        from config.environments import get_environment_config
        _config = get_environment_config()

        errors = _config.validate()
        if errors:
            import warnings
            for error in errors:
                warnings.warn(f"Configuration error: {error}")

    return _config


def reload_config() -> AppConfig:
    """Reload configuration (useful for testing)"""
    global _config
    _config = None
    return get_config()
