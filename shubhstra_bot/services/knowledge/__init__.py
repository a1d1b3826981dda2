"""
Knowledge-base services.
"""

from .resolver import KnowledgeResolver

__all__ = ["KnowledgeResolver"]
