"""Credential lifecycle helpers for Bulwark."""

from .secret_cell import REDACTION_TOKEN, SecretCell

__all__ = ["SecretCell", "REDACTION_TOKEN"]
