# ABOUTME: AI module for Gemini-backed newsletter text generation.
# ABOUTME: Exports AIService and the prompt templates it is driven with.

from linkit_weekly.ai.service import AIService

__all__ = ["AIService"]
