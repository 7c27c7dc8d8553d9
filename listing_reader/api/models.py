from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# --- Response Models ---

class HealthResponse(BaseModel):
    """
    Response model for the health endpoint.
    `browser` reports the rendering engine as "connected" or "disconnected".
    """
    status: str = "ok"
    browser: str


class ErrorResponse(BaseModel):
    """User-facing error payload; the message is shown as-is by the front end."""
    erreur: str


class AnalysisReport(BaseModel):
    """
    The reasoning service's consistency reading of a purchase file.

    Every field is optional: the service may instead answer with `erreur`
    alone, and unexpected keys are passed through untouched.
    """
    model_config = ConfigDict(extra="allow")

    elements_coherents: Optional[List[str]] = Field(default=None, alias="elementsCoherents")
    incoherences_potentielles: Optional[List[str]] = Field(default=None, alias="incoherencesPotentielles")
    zones_ombre: Optional[List[str]] = Field(default=None, alias="zonesOmbre")
    questions_a_poser: Optional[List[str]] = Field(default=None, alias="questionsAPoser")
    lecture_globale: Optional[str] = Field(default=None, alias="lectureGlobale")
    erreur: Optional[str] = None
