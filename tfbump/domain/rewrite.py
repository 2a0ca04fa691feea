"""
Surgical rewriting of module references in file text.

Only the ref value inside located quoted references changes; comments,
formatting and every other string in the file are left byte-for-byte
identical. No HCL parsing is involved.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .reference import ModuleReference, candidate_strings
from .tag import ParsedTag

Resolver = Callable[[ModuleReference], Optional[ParsedTag]]


@dataclass(frozen=True)
class RewriteResult:
    """
    Outcome of rewriting one file.

    Attributes:
        text: New file text
        changed: True when ``text`` differs from the input
        replacements: (reference, new tag) pairs whose tag actually changed
    """
    text: str
    changed: bool
    replacements: Tuple[Tuple[ModuleReference, ParsedTag], ...] = field(default=())

    def __iter__(self) -> Iterator:
        # Allows ``new_text, changed = rewrite(...)``
        return iter((self.text, self.changed))


def rewrite(
    file_text: str,
    references: Iterable[ModuleReference],
    resolve: Resolver
) -> RewriteResult:
    """
    Swap the tag of every resolved reference in ``file_text``.

    ``resolve`` receives each reference (its ``repository_id`` identifies
    the repository) and returns the replacement tag, or None to leave the
    reference alone. All replacements are applied in a single pass over the
    quoted strings of the text, so a rewritten reference is never matched
    again by another one.

    Args:
        file_text: Original file content
        references: References previously extracted from ``file_text``
        resolve: Replacement lookup

    Returns:
        RewriteResult; ``changed`` is False and ``text == file_text`` when
        no resolved tag differs from the current one
    """
    substitutions: Dict[str, str] = {}
    replacements: List[Tuple[ModuleReference, ParsedTag]] = []

    for reference in sorted(references, key=lambda r: r.original_text):
        replacement = resolve(reference)
        if replacement is None or replacement.raw == reference.tag.raw:
            continue
        substitutions[reference.original_text] = reference.with_tag(replacement)
        replacements.append((reference, replacement))

    if not substitutions:
        return RewriteResult(text=file_text, changed=False)

    pieces: List[str] = []
    position = 0
    for candidate in candidate_strings(file_text):
        new_text = substitutions.get(candidate.group(1))
        if new_text is None:
            continue
        start, end = candidate.span(1)
        pieces.append(file_text[position:start])
        pieces.append(new_text)
        position = end
    pieces.append(file_text[position:])

    new_file_text = ''.join(pieces)
    return RewriteResult(
        text=new_file_text,
        changed=new_file_text != file_text,
        replacements=tuple(replacements),
    )
