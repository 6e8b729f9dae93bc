"""Fetch orchestration and fallback chains."""

from .fallback_chain import FallbackChain, FallbackStep
from .models import ChainResult, DataSource, Freshness, FreshnessResult
from .orchestrator import FetchOrchestrator, Producer

__all__ = [
    "ChainResult",
    "DataSource",
    "FallbackChain",
    "FallbackStep",
    "FetchOrchestrator",
    "Freshness",
    "FreshnessResult",
    "Producer",
]
