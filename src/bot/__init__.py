"""
Bot package for the Maker Update bot.

This package contains the Slack wizard components:
- wizard.py: Header -> entries -> post state machine
- webhook.py: Slack payload routing
- views.py / fields.py: Step views and field identifiers
- state_token.py: Stateless state transport
- rich_text.py: Rich text normalization
- composer.py / delivery.py: Final message and posting

Usage:
    from src.bot import WizardController, SlackInteractionHandler
"""

from src.bot.composer import RenderedMessage, compose
from src.bot.delivery import Delivery, DeliveryResult
from src.bot.state_token import StateTokenCodec
from src.bot.webhook import ALLOWED_ACTIONS, SlackInteractionHandler
from src.bot.wizard import WizardController

__all__ = [
    # Wizard
    "WizardController",
    "StateTokenCodec",
    # Webhook
    "SlackInteractionHandler",
    "ALLOWED_ACTIONS",
    # Output
    "RenderedMessage",
    "compose",
    "Delivery",
    "DeliveryResult",
]
