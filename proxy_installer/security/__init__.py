"""Helpers that keep secrets out of logs."""

from proxy_installer.security.redact import redact_text

__all__ = ["redact_text"]
