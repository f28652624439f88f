"""Approval Notifier.

Works out which stage of a multi-stage approval workflow acted last, and turns
workflow status changes into role-targeted email notifications:
- configuration loaded from `.env`
- structured logging
- a last-actor resolver and a notification rule engine
"""

__version__ = "0.1.0"

from approval_notifier.config import NotifierSettings

__all__ = ["__version__", "NotifierSettings"]
