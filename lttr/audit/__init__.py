"""Audit logging package."""

from lttr.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
