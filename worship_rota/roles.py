"""
Role keys for the worship team: canonical keys, display labels, legacy
aliases and the vocal/instrumental classification.

Every key stored on a Member or RoleSlot goes through normalize_role_key().
"""

import re
from typing import Iterable, List

LEAD_VOCALIST = "lead-vocalist"
BACKING_VOCALIST = "backing-vocalist"
ACOUSTIC_GUITAR = "acoustic-guitar"
ELECTRIC_GUITAR = "electric-guitar"
BASS = "bass"
KEYS = "keys"
DRUMS = "drums"
MEDIA = "media"
SOUND_DESK = "sound-desk"

# Display order used by the CLI and the data-entry sheets
ROLE_LABELS = {
    LEAD_VOCALIST: "Lead Vocalist",
    ACOUSTIC_GUITAR: "Acoustic Guitar",
    BACKING_VOCALIST: "Backing Vocalist",
    ELECTRIC_GUITAR: "Electric Guitar",
    BASS: "Bass",
    KEYS: "Keys",
    DRUMS: "Drums",
    MEDIA: "Media",
    SOUND_DESK: "Sound Desk",
}

VOCAL_ROLES = frozenset({LEAD_VOCALIST, BACKING_VOCALIST})

# Older exports and the publishing service use these spellings.
# Keys are already whitespace/case normalized.
ROLE_ALIASES = {
    "vocalist": LEAD_VOCALIST,
    "vocals": LEAD_VOCALIST,
    "lead": LEAD_VOCALIST,
    "vocalista": LEAD_VOCALIST,
    "backing": BACKING_VOCALIST,
    "backing-vocals": BACKING_VOCALIST,
    "acoustic": ACOUSTIC_GUITAR,
    "violão": ACOUSTIC_GUITAR,
    "violao": ACOUSTIC_GUITAR,
    "guitar": ELECTRIC_GUITAR,
    "guitarra": ELECTRIC_GUITAR,
    "bass-guitar": BASS,
    "baixo": BASS,
    "keyboard": KEYS,
    "keyboards": KEYS,
    "teclado": KEYS,
    "drum-kit": DRUMS,
    "bateria": DRUMS,
    "mídia": MEDIA,
    "midia": MEDIA,
    "mesa": SOUND_DESK,
    "mesa-de-som": SOUND_DESK,
    "sound": SOUND_DESK,
}

_SEPARATORS = re.compile(r"[\s_]+")


def normalize_role_key(text: str) -> str:
    """Canonical role key: trimmed, case-folded, '-' separated, aliases collapsed."""
    key = _SEPARATORS.sub("-", str(text or "").strip().casefold())
    return ROLE_ALIASES.get(key, key)


def normalize_role_keys(values: Iterable[str]) -> List[str]:
    """Canonicalize a list of keys, dropping blanks and later duplicates."""
    seen = []
    for value in values:
        key = normalize_role_key(value)
        if key and key not in seen:
            seen.append(key)
    return seen


def role_label(key: str) -> str:
    canonical = normalize_role_key(key)
    return ROLE_LABELS.get(canonical, key)


def is_vocal_role(key: str) -> bool:
    return normalize_role_key(key) in VOCAL_ROLES
