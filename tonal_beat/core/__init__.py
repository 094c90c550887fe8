"""Core components for the Tonal Beat application."""

# Import interfaces for easier access
from .interfaces import (
    IAudioInput,
    IAnalysisService,
)

__all__ = ["IAudioInput", "IAnalysisService"]
