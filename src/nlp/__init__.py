"""
Lightweight text analysis attached to documents at ingestion time.

Components:
- metadata_extractor: rule-based entity and topic extraction
"""

from .metadata_extractor import analyze, extract_entities, extract_topics

__all__ = [
    "analyze",
    "extract_entities",
    "extract_topics",
]
