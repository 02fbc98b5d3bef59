"""Eligibility filter implementations."""

from .base import Filter, FilterResult
from .eligibility import CandidateFilter

__all__ = ["CandidateFilter", "Filter", "FilterResult"]
