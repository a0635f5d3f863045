import logging
import os
import re
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

# file extension -> language
_EXT = {
    ".java": "java",
    ".graphql": "graphql",
    ".graphqls": "graphql",
    ".gql": "graphql",
}

# declaration-level hints, one list per supported language
_HINTS: Dict[str, List[str]] = {
    "java": [
        r"\bpackage\s+[\w.]+\s*;",                          # package statement
        r"\bimport\s+(static\s+)?[\w.]+(\.\*)?\s*;",        # imports
        r"\b(public|protected|private)\s+(abstract\s+|final\s+)*class\s+\w+",
        r"\b(public\s+)?interface\s+\w+\s*(<[^>]*>)?\s*(extends\s+[\w<>, ]+)?\{",
        r"\b(public\s+)?enum\s+\w+\s*\{",                   # enum declarations
        r"\bextends\s+\w+",                                 # superclass
        r"\bimplements\s+\w+",                              # interfaces
        r"\b(private|protected|public)\s+(static\s+)?(final\s+)?[\w<>\[\], ]+\s+\w+\s*[;=]",  # fields
        r"\b\w+\s+\w+\s*\([^)]*\)\s*(throws\s+[\w, ]+)?\{", # method bodies
        r"\bnew\s+\w+\s*[(<]",                              # object creation
        r"\b(List|Set|Map|Optional)<",                      # generic collections
        r"/\*\*",                                           # javadoc
        r"@(Override|Deprecated|FunctionalInterface)\b",    # annotations
        r";\s*$",                                           # statement terminators
    ],
    "graphql": [
        r"^\s*type\s+\w+(\s+implements\s+[\w&\s]+)?\s*\{",  # object types
        r"^\s*input\s+\w+\s*\{",                             # input types
        r"^\s*enum\s+\w+\s*\{",                              # enum types
        r"^\s*interface\s+\w+\s*\{",                         # interface types
        r"^\s*scalar\s+\w+",                                 # custom scalars
        r"^\s*union\s+\w+\s*=",                              # unions
        r"^\s*schema\s*\{",                                  # schema block
        r"\btype\s+(Query|Mutation|Subscription)\b",         # root operation types
        r"^\s*\w+\s*(\([^)]*\))?\s*:\s*\[?\w+!?\]?!?\s*$",  # field: Type!
        r"\b(ID|Int|Float|String|Boolean)!",                 # non-null scalars
        r'"""',                                              # block descriptions
    ],
}

# hits needed for the 0.6 threshold and for full confidence
_MIN_HITS = 6
_FULL_HITS = 10


def _score(patterns: List[str], text: str) -> float:
    hits = sum(1 for p in patterns if re.search(p, text, re.M))
    if hits >= _FULL_HITS:
        return 1.0
    if hits >= _MIN_HITS:
        return round(0.6 + (hits - _MIN_HITS) * 0.4 / (_FULL_HITS - _MIN_HITS), 2)
    return round(hits * 0.6 / _MIN_HITS, 2)


def detect_language(code: str, filename: Optional[str] = None) -> Tuple[str, float, str]:
    """
    Returns (language, confidence, source).
    source is "extension", "heuristic" or "none" (language "unknown").
    """
    if filename:
        ext = os.path.splitext(filename)[1].lower()
        if ext in _EXT:
            return _EXT[ext], 0.95, "extension"

    scores = {lang: _score(patterns, code) for lang, patterns in _HINTS.items()}
    logger.debug("language scores: %s", scores)

    lang, conf = max(scores.items(), key=lambda item: item[1])
    if conf >= 0.6:
        return lang, conf, "heuristic"

    return "unknown", 0.0, "none"
