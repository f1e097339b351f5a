"""
Inline markup for flowing text.

Supported tags are <b></b>, <i></i> and <u></u>. Any closing tag resets the
style to normal, whether or not the matching tag was opened. `{name}`
placeholders are replaced from the variables map in a single pass.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Mapping, MutableMapping, Optional, Tuple, Union

from invoicepdf.pdf.canvas import Canvas

# Tag letter -> canvas style flag
TAGS = {"b": "B", "i": "I", "u": "U"}


@dataclass(frozen=True)
class StyleToken:
    flag: str
    opening: bool


@dataclass(frozen=True)
class TextToken:
    text: str


Token = Union[StyleToken, TextToken]


@dataclass(frozen=True)
class StyleState:
    bold: bool = False
    italic: bool = False
    underline: bool = False

    def apply(self, token: StyleToken) -> "StyleState":
        if not token.opening:
            return StyleState()
        if token.flag == "B":
            return replace(self, bold=True)
        if token.flag == "I":
            return replace(self, italic=True)
        return replace(self, underline=True)

    @classmethod
    def from_font_style(cls, style: str) -> "StyleState":
        style = (style or "").upper()
        return cls("B" in style, "I" in style, "U" in style)

    @property
    def font_style(self) -> str:
        return ("B" if self.bold else "") + ("I" if self.italic else "") + ("U" if self.underline else "")


def _match_tag(text: str, pos: int) -> Optional[Tuple[StyleToken, int]]:
    """Return (token, length) if a style tag starts at `pos`."""
    if text[pos] != "<":
        return None
    i = pos + 1
    closing = text.startswith("/", i)
    if closing:
        i += 1
    letter = text[i:i + 1]
    if letter in TAGS and text[i + 1:i + 2] == ">":
        return StyleToken(TAGS[letter], not closing), i + 2 - pos
    return None


def tokenize(text: str) -> List[Token]:
    """Split text into style tags and literal runs. Newlines become spaces."""
    text = text.replace("\r\n", " ").replace("\n", " ")
    tokens: List[Token] = []
    literal: List[str] = []
    pos = 0
    while pos < len(text):
        match = _match_tag(text, pos)
        if match is None:
            literal.append(text[pos])
            pos += 1
            continue
        if literal:
            tokens.append(TextToken("".join(literal)))
            literal = []
        token, length = match
        tokens.append(token)
        pos += length
    if literal:
        tokens.append(TextToken("".join(literal)))
    return tokens


def substitute_variables(text: str, variables: Mapping[str, str]) -> str:
    """Replace every `{key}` found in `variables`; unknown placeholders stay as they are.

    Substituted values are not scanned again.
    """
    if "{" not in text:
        return text
    out: List[str] = []
    i = 0
    while True:
        start = text.find("{", i)
        end = text.find("}", start + 1) if start != -1 else -1
        if end == -1:
            out.append(text[i:])
            break
        key = text[start + 1:end]
        if key in variables:
            out.append(text[i:start])
            out.append(str(variables[key]))
            i = end + 1
        else:
            out.append(text[i:start + 1])
            i = start + 1
    return "".join(out)


class MarkupRenderer:
    def __init__(self, canvas: Canvas, variables: MutableMapping[str, str]) -> None:
        self.canvas = canvas
        self.variables = variables

    def render(self, text: str, line_height: float) -> None:
        """Write `text` at the cursor as flowing, styled runs.

        Styling continues from the canvas font, and whatever a tag leaves open
        stays in effect for the text written after this call.
        """
        state = StyleState.from_font_style(self.canvas.font_style)
        for token in tokenize(text):
            if isinstance(token, StyleToken):
                state = state.apply(token)
                self.canvas.set_font("", state.font_style)
            else:
                self.canvas.write(line_height, substitute_variables(token.text, self.variables))
