"""Synthesis request domain entity."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SynthesisParams:
    """Internal form of a text-to-speech request.

    Attributes:
        text: The text to speak
        language: Voice locale (xml:lang), e.g. "en-US"
        gender: Voice gender hint
        name: Provider voice name, e.g. "en-US-JennyNeural"
        style: Speaking style
        credential: Provider subscription key
        region: Provider region, e.g. "westeurope"
    """

    text: str
    credential: str = field(repr=False)
    region: str
    language: str = ""
    gender: str = ""
    name: str = ""
    style: str = ""
