"""
Prompt construction for the vehicle purchase-file analysis.

Builds the system prompt, the French user message describing what the buyer
submitted (listing link and its extracted content, free-text description,
documents and photos), and the multimodal content blocks sent to the
reasoning service.
"""
import base64
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

SYSTEM_PROMPT = """Tu es un assistant spécialisé dans l'analyse factuelle de dossiers d'achat de véhicules de passion ou de collection.

Ton rôle est de produire une lecture de cohérence basée UNIQUEMENT sur les éléments fournis par l'utilisateur.

RÈGLES STRICTES :
- Tu ne donnes JAMAIS d'avis d'achat
- Tu ne certifies JAMAIS l'état du véhicule
- Tu ne remplaces JAMAIS une expertise mécanique
- Tu ne garantis RIEN
- Tu restes TOUJOURS factuel et neutre
- Tu n'utilises JAMAIS de jargon automobile complexe
- Tu ne fais AUCUNE accusation envers le vendeur
- Tu formules les incohérences de manière neutre : "X est annoncé, mais Y suggère autre chose"

FORMAT DE RÉPONSE (respecte STRICTEMENT cette structure JSON) :
{
  "elementsCoherents": [
    "Description factuelle d'un élément cohérent",
    "..."
  ],
  "incoherencesPotentielles": [
    "Description neutre d'une incohérence potentielle",
    "..."
  ],
  "zonesOmbre": [
    "Information manquante ou insuffisante",
    "..."
  ],
  "questionsAPoser": [
    "Question factuelle à poser au vendeur",
    "..."
  ],
  "lectureGlobale": "2-3 phrases maximum résumant la lecture de cohérence, SANS recommandation d'achat."
}

Si les informations fournies sont insuffisantes pour produire une analyse utile, réponds :
{
  "erreur": "Les informations fournies sont insuffisantes pour produire une analyse factuelle utile."
}

IMPORTANT : Réponds UNIQUEMENT avec le JSON, sans texte avant ou après."""

INSUFFICIENT_INFORMATION = "Les informations fournies sont insuffisantes pour produire une analyse factuelle utile."
ANALYSIS_FAILED = "Une erreur s'est produite lors de l'analyse. Veuillez réessayer."
LISTING_UNAVAILABLE_NOTE = (
    "(Le contenu de l'annonce n'a pas pu être récupéré automatiquement. "
    "Seul le lien est disponible.)"
)

MIN_DESCRIPTION_LENGTH = 20
MIN_LINK_LENGTH = 10
DEFAULT_MAX_IMAGES = 10


@dataclass
class SubmittedFile:
    """An uploaded document or photo, fully read into memory."""
    filename: str
    content_type: str
    data: bytes

    @property
    def is_image(self) -> bool:
        return (self.content_type or "").startswith("image/")


@dataclass
class PurchaseFile:
    """Everything a buyer submitted for one analysis."""
    listing_url: Optional[str] = None
    description: Optional[str] = None
    documents: List[SubmittedFile] = field(default_factory=list)
    photos: List[SubmittedFile] = field(default_factory=list)

    @property
    def has_description(self) -> bool:
        return bool(self.description) and len(self.description.strip()) > MIN_DESCRIPTION_LENGTH

    @property
    def has_link(self) -> bool:
        return bool(self.listing_url) and len(self.listing_url.strip()) > MIN_LINK_LENGTH

    def is_sufficient(self) -> bool:
        """True when at least one piece of material is worth analyzing."""
        return self.has_description or bool(self.documents) or bool(self.photos) or self.has_link


def build_user_message(purchase_file: PurchaseFile, listing_content: Optional[str] = None) -> str:
    """
    Renders the text part of the request.

    The listing content, when extracted, is embedded verbatim under the link;
    otherwise the link is followed by a note that it could not be read.
    """
    message = "Analyse ce dossier d'achat de véhicule :\n\n"

    if purchase_file.listing_url:
        message += f"LIEN DE L'ANNONCE :\n{purchase_file.listing_url}\n\n"
        if listing_content:
            message += f"CONTENU EXTRAIT DE L'ANNONCE ({purchase_file.listing_url}) :\n{listing_content}\n\n"
        else:
            message += f"{LISTING_UNAVAILABLE_NOTE}\n\n"

    if purchase_file.description:
        message += f"DESCRIPTION ET ÉCHANGES :\n{purchase_file.description}\n\n"

    if purchase_file.documents:
        message += f"DOCUMENTS FOURNIS : {len(purchase_file.documents)} fichier(s)\n"
        for document in purchase_file.documents:
            message += f"- {document.filename}\n"
        message += "\n"

    if purchase_file.photos:
        message += f"PHOTOS FOURNIES : {len(purchase_file.photos)} photo(s)\n"
        for photo in purchase_file.photos:
            message += f"- {photo.filename}\n"
        message += "\n"

    return message


def build_content_blocks(purchase_file: PurchaseFile, user_message: str,
                         max_images: int = DEFAULT_MAX_IMAGES) -> List[Dict[str, Any]]:
    """
    Builds the message content: base64 image blocks first (photos, then
    image documents, capped at `max_images`), then the text block.
    """
    images = purchase_file.photos + [doc for doc in purchase_file.documents if doc.is_image]

    blocks: List[Dict[str, Any]] = []
    for image in images[:max_images]:
        blocks.append({
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": image.content_type,
                "data": base64.b64encode(image.data).decode("ascii"),
            },
        })
    blocks.append({"type": "text", "text": user_message})
    return blocks
