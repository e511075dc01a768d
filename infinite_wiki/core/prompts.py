"""Prompt builders for each gateway operation."""

from __future__ import annotations

from .models import SearchFilters

ART_PALETTE = "│─┌┐└┘├┤┬┴┼►◄▲▼○●◐◑░▒▓█▀▄■□▪▫★☆♦♠♣♥⟨⟩/\\_|"
PREDEFINED_CLUSTERS = ("breath/voice", "divinity/light", "laughter/joy")

RANDOM_WORD_PROMPT = (
    "Generate a single, random, interesting English word or a two-word concept. "
    "It can be a noun, verb, adjective, or a proper noun. Respond with only the word "
    "or concept itself, with no extra text, punctuation, or formatting."
)


def definition_prompt(topic: str) -> str:
    return (
        "Provide a concise, single-paragraph encyclopedia-style definition for the term: "
        f'"{topic}". Be informative and neutral. Do not use markdown, titles, or any special '
        "formatting. Respond with only the text of the definition itself."
    )


def ascii_art_prompt(topic: str, *, include_text: bool = False) -> str:
    """Ask for a JSON object holding the art, and optionally blocky text."""

    art_part = (
        f'1. "art": meta ASCII visualization of the word "{topic}":\n'
        f"  - Palette: {ART_PALETTE}\n"
        "  - Shape mirrors concept - make the visual form embody the word's essence\n"
        "  - Examples:\n"
        '    * "explosion" → radiating lines from center\n'
        '    * "hierarchy" → pyramid structure\n'
        '    * "flow" → curved directional lines\n'
        "  - Return as single string with \\n for line breaks"
    )
    if include_text:
        keys = 'two keys: "art" and "text"'
        body = (
            f"{art_part}\n\n"
            f'2. "text": the word "{topic}" drawn as large blocky ASCII lettering, '
            "returned as a single string with \\n for line breaks"
        )
        closing = "contain only the art and text properties"
    else:
        keys = 'one key: "art"'
        body = art_part
        closing = "contain only the art property"

    return (
        f'For "{topic}", create a JSON object with {keys}.\n'
        f"{body}\n\n"
        'Return ONLY the raw JSON object, no additional text. The response must start with "{" '
        f'and end with "}}" and {closing}.'
    )


def cultural_concepts_prompt(topic: str) -> str:
    return (
        f'For the term "{topic}", find 3 to 5 related or analogous concepts from distinct world '
        "cultures. Avoid simple translations. Focus on concepts that share a similar "
        "philosophical, aesthetic, or functional essence."
    )


def phonosemantic_prompt(filters: SearchFilters) -> str:
    if filters.fuzzy:
        fuzzy_rule = (
            "ENABLED: Also include close phonetic matches with a Levenshtein distance of 1 "
            "(e.g., 'ho', 'ax', 'cha')."
        )
    else:
        fuzzy_rule = "DISABLED: Match the motif strictly."
    clusters = ", ".join(f'"{name}"' for name in PREDEFINED_CLUSTERS)

    return f"""
You are an expert computational linguist and etymologist with access to a vast cross-linguistic lexical database.

Your task is to perform a phonosemantic search for words containing the sound motif 'HA' or 'AH'.

Search Rules:
1.  **Core Motif**: Search for 'ha' and 'ah' sounds. Include variants with diacritics (e.g., ḥa, hā, aḥ).
2.  **H-Class Equivalency**: Treat the sounds represented by 'ḥ' (pharyngeal), 'kh' (voiceless velar fricative /x/), and 'x' as equivalent to 'h' for this search.
3.  **Position**: The motif must appear in the **{filters.position}** position of the word.
4.  **Languages**: Limit the search to the following languages: **{filters.languages}**.
5.  **Fuzzy Matching**: {fuzzy_rule}
6.  **Data Quality**: Provide accurate data. For etymology, be concise. For 'source_url', link to a reputable source like Wiktionary if possible.

Output requirements:
- The output must be a single JSON object with one key, "results", containing an array of word objects.
- Each object in the array must conform to the specified schema.
- **Semantic Clustering**: For each result, assign it to a semantic cluster based on its gloss. Pre-defined clusters are {clusters}. If a word fits one of these, use that name. If it fits another semantic group, create a new, appropriate cluster name (e.g., "negation/question", "place/location"). This must be in the 'semantic_cluster' field.
- Handle Unicode and right-to-left scripts correctly.
- If no results are found, return an empty "results" array.
""".strip()


def script_prompt(word: str, language: str) -> str:
    return f"""
You are an expert linguist and polyglot. Your task is to provide detailed information on how to write a specific word in a given language.

Word/Concept: "{word}"
Language: "{language}"

Provide the following information in a JSON object:
1.  **script**: The word written in the language's native script.
2.  **romanization**: A standard academic romanization of the word.
3.  **ipa**: The International Phonetic Alphabet (IPA) transcription.
4.  **note**: A brief, one-sentence note about the word's usage, form, or context (e.g., "This is the formal term," or "An informal term of endearment.").

If the word doesn't exist or is nonsensical in the target language, return null values for the fields.
Return only the raw JSON object.
""".strip()


__all__ = [
    "ART_PALETTE",
    "PREDEFINED_CLUSTERS",
    "RANDOM_WORD_PROMPT",
    "definition_prompt",
    "ascii_art_prompt",
    "cultural_concepts_prompt",
    "phonosemantic_prompt",
    "script_prompt",
]
