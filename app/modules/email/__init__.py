"""
Módulo de email.
"""

from .service import email_service

__all__ = [
    'email_service',
]
