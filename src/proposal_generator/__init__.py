"""Proposal Generator - AI-powered Upwork cover letters with API key rotation."""

__version__ = "0.1.0"

# Expose main classes and functions for external use
from .cancellation import CancellationToken
from .config import Settings, load_settings
from .context import AssembledContext, ContextAssembler
from .generator import LetterGenerator
from .key_pool import KeyPool, is_quota_error
from .model_service import create_model_service
from .orchestrator import ProposalArtifact, ProposalOrchestrator
from .records import JsonRecordStore, PortfolioItem
from .retry import RetryExecutor
from .revision import ConversationTurn, RevisionEngine, RevisionSession
from .selector import RelevanceSelector

__all__ = [
    "AssembledContext",
    "CancellationToken",
    "ContextAssembler",
    "ConversationTurn",
    "JsonRecordStore",
    "KeyPool",
    "LetterGenerator",
    "PortfolioItem",
    "ProposalArtifact",
    "ProposalOrchestrator",
    "RelevanceSelector",
    "RetryExecutor",
    "RevisionEngine",
    "RevisionSession",
    "Settings",
    "create_model_service",
    "is_quota_error",
    "load_settings",
]
