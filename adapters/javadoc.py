"""
Doc comment parsing for the Java and GraphQL adapters.

    /**
     * Free text, possibly over
     * several lines.
     *
     * @param name description
     * @assoc 1 owner - 0..* items Item
     * @noassoc
     */

Every line after the opening one has to start with "*". Tags run from
their "@name" to the next tag; @param, @throws and @exception take one
positional parameter before the free-text value, other tags take none.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from diagram.errors import DocCommentError
from diagram.model import DocComment, DocTag

logger = logging.getLogger(__name__)

TAG_ARITY = {
    "@param": 1,
    "@throws": 1,
    "@exception": 1,
}


def _block_lines(raw: str) -> List[str]:
    text = raw.strip()
    if not text.startswith("/*"):
        # plain description text (GraphQL), no comment markers
        return [line.strip() for line in text.splitlines()]

    if not text.endswith("*/"):
        raise DocCommentError("unterminated comment block")

    body = text[3:-2] if text.startswith("/**") else text[2:-2]
    lines: List[str] = []
    for index, line in enumerate(body.split("\n")):
        stripped = line.strip()
        if index == 0 or not stripped:
            lines.append(stripped)
        elif stripped.startswith("*"):
            lines.append(stripped[1:].strip())
        else:
            raise DocCommentError("line does not start with `*`", line=line)
    return lines


def _parse_tag(line: str) -> DocTag:
    name = line.split(None, 1)[0]
    arity = TAG_ARITY.get(name, 0)
    parts = line.split(None, arity + 1)
    params = parts[1:1 + arity]
    value = parts[1 + arity] if len(parts) > 1 + arity else ""
    return DocTag(name=name, params=params, value=value.strip())


def parse_doc_comment(raw: Optional[str], strict: bool = False) -> DocComment:
    if not raw or not raw.strip():
        return DocComment()

    try:
        lines = _block_lines(raw)
    except DocCommentError as e:
        if strict:
            raise
        logger.warning("Ignoring doc comment: %s", e)
        return DocComment()

    content: List[str] = []
    tags: List[DocTag] = []
    current: List[str] = []

    def flush() -> None:
        if current:
            tags.append(_parse_tag(" ".join(current)))
            current.clear()

    for line in lines:
        if line.startswith("@"):
            flush()
            current.append(line)
        elif current:
            if line:
                current.append(line)
        else:
            content.append(line)
    flush()

    return DocComment(content="\n".join(content).strip(), tags=tags)
