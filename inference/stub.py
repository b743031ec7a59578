"""
Deterministic demo backend used when no credential is configured.

Content is chosen by the explicit `section_type` on the request and
never by inspecting prompt text.
"""

import logging

from .base import CompletionBackend
from .types import CompletionRequest, DEMO_MODEL, RawCompletion


logger = logging.getLogger(__name__)

DEMO_USAGE = {
    "prompt_tokens": 100,
    "completion_tokens": 200,
    "total_tokens": 300,
}

DEFAULT_DEMO_CONTENT = (
    "Demo inhoud voor EduPack sectie. Voor volledige AI-gegenereerde content, "
    "configureer uw OpenAI API sleutel."
)

DEMO_CONTENT = {
    "introduction": """Beste patiënt,

Hartelijk welkom bij uw fysiotherapie behandeling. Deze samenvatting geeft u een duidelijk overzicht van uw bezoek van vandaag en wat u kunt verwachten in de komende periode.

Wij zijn er om u te helpen bij uw herstel en staan altijd klaar voor uw vragen.""",

    "session_summary": """Tijdens ons gesprek vandaag hebben we uw klachten uitgebreid besproken:

• Pijn in de onderrug die ongeveer 3 weken geleden is begonnen
• Stijfheid 's ochtends die na ongeveer 30 minuten vermindert
• Moeite met bukken en tillen
• Geen uitstraling naar de benen
• Klachten zijn ontstaan na het verhuizen

Bij het onderzoek vonden we beperkte bewegelijkheid in de lage rug en gespannen spieren.""",

    "diagnosis": """Wat er aan de hand is:

U heeft last van een niet-specifieke lage rugpijn. Dit betekent dat uw rugspieren en gewrichten gespannen en geprikkeld zijn geraakt, waarschijnlijk door de ongewone belasting tijdens het verhuizen.

Dit is een veelvoorkomende aandoening die goed te behandelen is. Uw ruggengraat zelf is niet beschadigd. Het gaat om spier- en gewrichtsproblematiek die met de juiste aanpak goed herstelt.""",

    "treatment_plan": """Uw behandelplan:

Wij gaan werken aan het verminderen van uw pijn en het herstellen van uw bewegelijkheid. Het behandelplan bestaat uit:

1. Manuele therapie om uw gewrichten soepeler te maken
2. Oefeningen om uw rugspieren te versterken
3. Advisering over goede houdingen en bewegingen
4. Geleidelijke opbouw van uw normale activiteiten

We verwachten dat u binnen 4 tot 6 weken duidelijke verbetering zult merken.""",

    "self_care": """Wat u zelf kunt doen:

**Dagelijkse oefeningen:**
1. Knie-borst oefening: trek uw knieën naar uw borst, houd 30 seconden vast (5x)
2. Bekkenkantel: lig op uw rug, span buikspieren aan, druk onderrug tegen de grond (10x)
3. Lopen: begin met 10 minuten per dag, bouw langzaam op

**Belangrijke tips:**
• Gebruik warmte (warme douche of warmtepack) voor stijfheid
• Vermijd lang zitten, sta elke 30 minuten op
• Til met gebogen knieën, niet met uw rug
• Blijf actief binnen uw pijngrens""",

    "warning_signs": """Neem contact met ons op als u:

• Plotseling veel meer pijn krijgt
• Tintelingen of gevoelloosheid in uw benen ontwikkelt
• Moeite krijgt met plassen of ontlasting
• Pijn uitstraalt naar beide benen
• Koorts krijgt in combinatie met rugpijn

Bij dringende klachten kunt u ons bellen op 020-1234567. Voor niet-urgente vragen kunt u mailen naar info@fysiohysio.nl""",

    "follow_up": """Vervolgafspraken:

Uw volgende afspraak is over 1 week. We gaan dan kijken hoe u reageert op de behandeling en passen waar nodig het plan aan.

Tussen nu en de volgende afspraak kunt u:
• Uw oefeningen dagelijks doen
• Contact opnemen bij vragen of zorgen
• Uw activiteiten geleidelijk uitbreiden

U kunt online een afspraak inplannen via onze website of bellen naar 020-1234567.""",
}

SECTION_TYPES = tuple(DEMO_CONTENT)


class DemoCompletionBackend(CompletionBackend):
    """
    Static content for degraded mode.

    Fast, deterministic, never touches the network.
    """

    async def complete(self, request: CompletionRequest) -> RawCompletion:
        return RawCompletion(
            content=demo_content_for(request.section_type),
            model=DEMO_MODEL,
            usage=dict(DEMO_USAGE),
        )


def demo_content_for(section_type) -> str:
    """Static content for a section type; unknown types get the generic text."""
    if not section_type:
        return DEFAULT_DEMO_CONTENT
    if section_type not in SECTION_TYPES:
        logger.warning(
            f"Unknown section type '{section_type}' for demo content, "
            f"expected one of {', '.join(SECTION_TYPES)}"
        )
        return DEFAULT_DEMO_CONTENT
    return DEMO_CONTENT[section_type]
