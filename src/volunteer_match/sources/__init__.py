"""Opportunity source implementations and registry."""

from .base import OpportunityQuery, OpportunitySource
from .file_source import FileOpportunitySource
from .http_source import HttpOpportunitySource
from .registry import (
    SourceRegistrationError,
    create_source,
    register_source,
    registered_source_types,
)

__all__ = [
    "FileOpportunitySource",
    "HttpOpportunitySource",
    "OpportunityQuery",
    "OpportunitySource",
    "SourceRegistrationError",
    "create_source",
    "register_source",
    "registered_source_types",
]
