"""Utility functions for Sunflower Control.

This module contains helper functions used across the application:
- similarity_score: Canonical fuzzy string matching algorithm
- find_similar_strings: Find similar strings using fuzzy matching
- format_rgb: Render an RGB triple for terminal output
- parse_rename_pairs: Turn 'ID=NAME' arguments into a names dict
"""

import click


def similarity_score(s1: str, s2: str) -> int:
    """Calculate similarity score between two strings.

    This is the canonical implementation used throughout the application
    for fuzzy matching (command typo suggestions, light and preset names).

    Args:
        s1: First string to compare
        s2: Second string to compare

    Returns:
        Similarity score:
        - 100: Exact match (case-insensitive)
        - 80: Prefix match
        - 60: Substring match
        - 0-50: Character sequence match (proportional to matching characters)
        - 0: No match
    """
    s1_lower = s1.lower()
    s2_lower = s2.lower()

    if s1_lower == s2_lower:
        return 100

    if s2_lower.startswith(s1_lower) or s1_lower.startswith(s2_lower):
        return 80

    if s1_lower in s2_lower or s2_lower in s1_lower:
        return 60

    # Character sequence matching
    matches = 0
    j = 0
    for char in s1_lower:
        while j < len(s2_lower):
            if s2_lower[j] == char:
                matches += 1
                j += 1
                break
            j += 1

    if matches > 0:
        score = int((matches / max(len(s1_lower), len(s2_lower))) * 50)
        return score if score > 20 else 0

    return 0


def find_similar_strings(target: str, candidates: list[str], limit: int = 5) -> list[str]:
    """Find similar strings, most similar first.

    Args:
        target: The string to match against
        candidates: List of candidate strings to search
        limit: Maximum number of results to return
    """
    scored = [(candidate, similarity_score(target, candidate)) for candidate in candidates]
    filtered = [(c, s) for c, s in scored if s > 0]
    sorted_matches = sorted(filtered, key=lambda x: x[1], reverse=True)
    return [c for c, s in sorted_matches[:limit]]


def format_rgb(r: int, g: int, b: int, swatch: bool = False) -> str:
    """Render an RGB triple as hex, optionally followed by a coloured swatch."""
    text = f"#{r:02x}{g:02x}{b:02x}"
    if swatch:
        text += " " + click.style("  ", bg=(r, g, b))
    return text


def parse_rename_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse 'ID=NAME' arguments.

    Raises:
        click.BadParameter: If an argument has no '='
    """
    names = {}
    for pair in pairs:
        light_id, sep, name = pair.partition('=')
        if not sep or not light_id:
            raise click.BadParameter(f"Expected ID=NAME, got {pair!r}")
        names[light_id.strip()] = name
    return names
