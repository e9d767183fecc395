"""Cache key derivation."""

import json

from tts_cache.entities import SynthesisParams


def build_cache_key(params: SynthesisParams) -> str:
    """Build the cache key for a synthesis request.

    Every parameter that changes the rendered audio is part of the key, so the
    same text spoken by two different voices is cached twice. Credentials and
    region are left out: they select who renders the audio, not what it sounds
    like. Values are used verbatim.

    Args:
        params: The synthesis parameters

    Returns:
        A JSON array string, e.g. '["hello","en-US","Female","en-US-JennyNeural",""]'
    """
    return json.dumps(
        [params.text, params.language, params.gender, params.name, params.style],
        ensure_ascii=False,
        separators=(",", ":"),
    )
