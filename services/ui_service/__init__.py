"""
UI service - handles user interface components and interactions.
"""

from .navigation import PROTECTED_VIEWS, ViewState, get_current_view, navigate
from .notifications import NotificationChannel, get_notification_channel, render_notifications


# Lazy imports to avoid a circular dependency with the chat and auth services
def get_chat_interface_class():
    from .chat_interface import ChatInterface
    return ChatInterface


def get_auth_interface_class():
    from .auth_views import AuthInterface
    return AuthInterface


def get_onboarding_wizard_class():
    from .onboarding_wizard import OnboardingWizard
    return OnboardingWizard


__all__ = [
    'PROTECTED_VIEWS',
    'ViewState',
    'get_current_view',
    'navigate',
    'NotificationChannel',
    'get_notification_channel',
    'render_notifications',
    'get_chat_interface_class',
    'get_auth_interface_class',
    'get_onboarding_wizard_class',
]
