"""Static HTML metrics logged next to the vision score."""

import re
from collections import Counter
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import List

import numpy as np

# Elements that never take a closing tag
VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})


class HTMLValidator(HTMLParser):
    """Checks that non-void tags open and close in a balanced way."""

    def __init__(self):
        super().__init__()
        self.errors: List[str] = []
        self.open_tags: List[str] = []

    def handle_starttag(self, tag, attrs):
        if tag not in VOID_ELEMENTS:
            self.open_tags.append(tag)

    def handle_startendtag(self, tag, attrs):
        pass

    def handle_endtag(self, tag):
        if tag in VOID_ELEMENTS:
            return
        if not self.open_tags:
            self.errors.append(f"Unexpected closing tag: </{tag}>")
        elif self.open_tags[-1] == tag:
            self.open_tags.pop()
        elif tag in self.open_tags:
            # Unclosed children: report each one and recover at the matching parent
            while self.open_tags[-1] != tag:
                self.errors.append(f"Unclosed tag: <{self.open_tags.pop()}>")
            self.open_tags.pop()
        else:
            self.errors.append(f"Tag mismatch: expected </{self.open_tags[-1]}>, got </{tag}>")

    def is_valid(self) -> bool:
        return not self.errors and not self.open_tags


def extract_tailwind_classes(code: str) -> List[str]:
    classes: List[str] = []
    for match in re.findall(r'class=["\'](.*?)["\']', code):
        classes.extend(match.split())
    return classes


def extract_color_tokens(code: str) -> List[str]:
    """Tailwind color names (bg-/text-/border-<color>-<shade>) and hex codes."""
    colors = re.findall(r'\b(?:bg|text|border)-([a-z]+)-\d+\b', code)
    colors.extend(c.lower() for c in re.findall(r'#[0-9a-fA-F]{3,6}\b', code))
    return colors


def compute_color_entropy(color_tokens: List[str]) -> float:
    """Shannon entropy (bits) of the color distribution."""
    if not color_tokens:
        return 0.0
    counts = np.array(list(Counter(color_tokens).values()), dtype=float)
    probs = counts / counts.sum()
    return float(-(probs * np.log2(probs)).sum())


@dataclass(frozen=True)
class HtmlStats:
    syntax_valid: bool
    num_errors: int
    num_classes: int
    num_colors: int
    color_entropy: float

    def as_log_dict(self, prefix: str = "html") -> dict:
        return {
            f"{prefix}/syntax_valid": int(self.syntax_valid),
            f"{prefix}/num_errors": self.num_errors,
            f"{prefix}/num_classes": self.num_classes,
            f"{prefix}/num_colors": self.num_colors,
            f"{prefix}/color_entropy": self.color_entropy,
        }


def compute_html_stats(html: str) -> HtmlStats:
    validator = HTMLValidator()
    validator.feed(html)
    validator.close()
    colors = extract_color_tokens(html)
    return HtmlStats(
        syntax_valid=validator.is_valid(),
        num_errors=len(validator.errors) + len(validator.open_tags),
        num_classes=len(set(extract_tailwind_classes(html))),
        num_colors=len(colors),
        color_entropy=compute_color_entropy(colors),
    )
