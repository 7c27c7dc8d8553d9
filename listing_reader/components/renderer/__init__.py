"""
Renderer component for the Listing Reader.

This sub-package owns the headless browser used to load listing pages,
including its launch configuration and crash recovery.
"""
from .engine_manager import EngineHandle, EngineState, RenderEngineManager

__all__ = [
    "EngineHandle",
    "EngineState",
    "RenderEngineManager",
]
