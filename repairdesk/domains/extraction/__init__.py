"""
Extraction Domain - Free text to structured inventory data.

This domain handles:
- Single part extraction (form auto-fill)
- Multi-part extraction (dictated bulk import)
- Name/category normalization suggestions for stored parts
"""

from .contracts import PartExtractor, StructuredGenerator
from .extractor import GeminiPartExtractor
from .models import NameSuggestion, PartCandidate
from .schemas import part_list_schema, part_schema, suggestion_list_schema

__all__ = [
    # Contracts
    "PartExtractor",
    "StructuredGenerator",
    # Models
    "PartCandidate",
    "NameSuggestion",
    # Schemas
    "part_schema",
    "part_list_schema",
    "suggestion_list_schema",
    # Implementations
    "GeminiPartExtractor",
]
