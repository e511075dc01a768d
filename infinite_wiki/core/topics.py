"""Topic helpers: the curated random list, word cleaning and fallback art."""

from __future__ import annotations

import random
import re
from typing import List, Optional, Sequence

from .models import AsciiArtData

_PREDEFINED_WORDS: Sequence[str] = (
    # Polarities
    "Balance", "Harmony", "Discord", "Unity", "Fragmentation", "Clarity", "Ambiguity",
    "Presence", "Absence", "Creation", "Destruction", "Light", "Shadow", "Beginning",
    "Ending", "Rising", "Falling", "Connection", "Isolation", "Hope", "Despair",
    "Order and chaos", "Light and shadow", "Sound and silence", "Form and formlessness",
    "Being and nonbeing", "Presence and absence", "Motion and stillness",
    "Unity and multiplicity", "Finite and infinite", "Sacred and profane",
    "Memory and forgetting", "Question and answer", "Search and discovery",
    "Journey and destination", "Dream and reality", "Time and eternity", "Self and other",
    "Known and unknown", "Spoken and unspoken", "Visible and invisible",
    # Shapes and motion
    "Zigzag", "Waves", "Spiral", "Bounce", "Slant", "Drip", "Stretch", "Squeeze", "Float",
    "Fall", "Spin", "Melt", "Rise", "Twist", "Explode", "Stack", "Mirror", "Echo", "Vibrate",
    # Physics
    "Gravity", "Friction", "Momentum", "Inertia", "Turbulence", "Pressure", "Tension",
    "Oscillate", "Fractal", "Quantum", "Entropy", "Vortex", "Resonance", "Equilibrium",
    "Centrifuge", "Elastic", "Viscous", "Refract", "Diffuse", "Cascade", "Levitate",
    "Magnetize", "Polarize", "Accelerate", "Compress", "Undulate",
    # Thresholds
    "Liminal", "Ephemeral", "Paradox", "Zeitgeist", "Metamorphosis", "Synesthesia",
    "Recursion", "Emergence", "Dialectic", "Apophenia", "Limbo", "Flux", "Sublime",
    "Uncanny", "Palimpsest", "Chimera", "Void", "Transcend", "Ineffable", "Qualia",
    "Gestalt", "Simulacra", "Abyssal",
    # Philosophy and letters
    "Existential", "Nihilism", "Solipsism", "Phenomenology", "Hermeneutics",
    "Deconstruction", "Postmodern", "Absurdism", "Catharsis", "Epiphany", "Melancholy",
    "Nostalgia", "Longing", "Reverie", "Pathos", "Ethos", "Logos", "Mythos", "Anamnesis",
    "Intertextuality", "Metafiction", "Stream", "Lacuna", "Caesura", "Enjambment",
)

# First occurrence wins.
CURATED_TOPICS: List[str] = list(dict.fromkeys(_PREDEFINED_WORDS))

_PUNCTUATION_RE = re.compile(r"[.,!?;:()\"']")
_FALLBACK_MAX_CHARS = 20


def clean_word(word: Optional[str]) -> str:
    """Strip surrounding whitespace and the punctuation a clicked word may carry."""

    return _PUNCTUATION_RE.sub("", (word or "").strip())


def same_topic(left: Optional[str], right: Optional[str]) -> bool:
    return (left or "").strip().lower() == (right or "").strip().lower()


def pick_random_topic(
    current: Optional[str],
    *,
    topics: Sequence[str] = CURATED_TOPICS,
    rng: Optional[random.Random] = None,
) -> str:
    """Pick a curated topic, never the one currently displayed.

    On a collision the next entry in the list is used, wrapping around.
    """

    if not topics:
        raise ValueError("No topics to choose from")
    chooser = rng or random
    index = chooser.randrange(len(topics))
    if same_topic(topics[index], current):
        index = (index + 1) % len(topics)
    return topics[index]


def create_fallback_art(topic: str) -> AsciiArtData:
    """Draw a bordered box around ``topic`` for when art generation fails."""

    shown = topic if len(topic) <= _FALLBACK_MAX_CHARS else topic[:17] + "..."
    padded = f" {shown} "
    border = "─" * len(padded)
    return AsciiArtData(art=f"┌{border}┐\n│{padded}│\n└{border}┘")


__all__ = [
    "CURATED_TOPICS",
    "clean_word",
    "same_topic",
    "pick_random_topic",
    "create_fallback_art",
]
