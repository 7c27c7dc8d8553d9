"""
Custom exception classes for the Listing Reader.
"""
from typing import Optional


class ListingReaderError(Exception):
    """
    Base class for all custom exceptions in the Listing Reader.

    Attributes:
        message (str): A human-readable description of the error.
    """
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.message}"

# --- Configuration Related Exceptions ---

class ConfigurationError(ListingReaderError):
    """
    Raised for errors related to application configuration, such as a missing
    or invalid value needed by a component.
    """
    def __init__(self, message: str):
        super().__init__(message)

# --- Component Related Exceptions ---

class ComponentError(ListingReaderError):
    """
    A general base class for errors originating from within a specific component
    (e.g., Renderer, Extractor, Reasoning).

    Attributes:
        component_name (str): Name of the component where the error originated.
    """
    def __init__(self, component_name: str, message: str):
        full_message = f"Error in component '{component_name}': {message}"
        super().__init__(full_message)
        self.component_name = component_name

class RendererError(ComponentError):
    """Raised when the rendering engine cannot be launched or used."""
    def __init__(self, message: str):
        super().__init__(component_name="Renderer", message=message)

class ExtractorError(ComponentError):
    """Raised for errors specific to the Extractor component (e.g., unusable input)."""
    def __init__(self, message: str):
        super().__init__(component_name="Extractor", message=message)

class ReasoningError(ComponentError):
    """
    Raised when the external reasoning service fails or returns a response
    that cannot be interpreted.

    Attributes:
        original_exception (Optional[Exception]): The underlying exception, if any.
    """
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        self.original_exception = original_exception
        if original_exception:
            message += f" (Original exception: {str(original_exception)})"
        super().__init__(component_name="Reasoning", message=message)

# --- Analysis Related Exceptions ---

class InsufficientInformationError(ListingReaderError):
    """
    Raised when a purchase file does not carry enough material (text, files,
    or a usable listing) to produce a factual analysis.
    """
    def __init__(self, message: str = "Insufficient information to analyze."):
        super().__init__(message)
