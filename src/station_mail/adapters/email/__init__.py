"""Email adapter - outbound SMTP delivery of logbook exports.

Structure:
    * :mod:`.config` - Email configuration model and loader
    * :mod:`.validation` - Configuration checks run at initialisation
    * :mod:`.identity` - Local EHLO / Message-ID identity
    * :mod:`.composer` - MIME composition of the export message
    * :mod:`.transport` - TLS-only SMTP negotiation over smtplib
    * :mod:`.service` - Lifecycle guard and retrying delivery orchestrator

Contents:
    * :class:`.config.EmailConfig` - Email configuration container
    * :func:`.config.load_email_config_from_dict` - Config dict loader
    * :func:`.composer.compose_export_message` - Build an export message
    * :func:`.transport.deliver_with_tls` - One delivery attempt
    * :class:`.service.EmailService` - Initialise once, send with retries
"""

from __future__ import annotations

from .composer import attachment_filename, compose_export_message, new_boundary
from .config import EmailConfig, load_email_config_from_dict
from .identity import local_identity
from .service import EmailConfigProvider, EmailService
from .transport import SMTP_ERRORS, Dialer, SmtpDialer, deliver_with_tls
from .validation import validate_email_config

__all__ = [
    "SMTP_ERRORS",
    "Dialer",
    "EmailConfig",
    "EmailConfigProvider",
    "EmailService",
    "SmtpDialer",
    "attachment_filename",
    "compose_export_message",
    "deliver_with_tls",
    "load_email_config_from_dict",
    "local_identity",
    "new_boundary",
    "validate_email_config",
]
