"""
Analysis component for the Listing Reader.

Prompt construction for a buyer's purchase file and the client for the
external reasoning service that reads it.
"""
from .prompt_builder import PurchaseFile, SubmittedFile, build_content_blocks, build_user_message
from .reasoning_client import ReasoningClient, parse_analysis

__all__ = [
    "PurchaseFile",
    "SubmittedFile",
    "build_content_blocks",
    "build_user_message",
    "ReasoningClient",
    "parse_analysis",
]
