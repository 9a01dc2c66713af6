"""
Tag grammar lookup.

Wraps the static table from constants.py with case normalisation, the VALUE
default for unseen tags, and extension from configuration.
"""

from typing import Dict, Iterable, Mapping, Optional

from .constants import SELF_NESTING_TAGS, TagKind, build_default_table


class GrammarTable:
    """
    Tag name → TagKind lookup with a VALUE default.

    Example:
        >>> grammar = GrammarTable()
        >>> grammar.kind_of("document")
        <TagKind.BLOCK: 'block'>
        >>> grammar.kind_of("NEVER-SEEN-BEFORE")
        <TagKind.VALUE: 'value'>

        >>> grammar = GrammarTable(overrides={"A": TagKind.BLOCK})
        >>> grammar.kind_of("a")
        <TagKind.BLOCK: 'block'>
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, TagKind]] = None,
        self_nesting: Iterable[str] = SELF_NESTING_TAGS,
    ):
        self._table: Dict[str, TagKind] = build_default_table()
        for tag, kind in (overrides or {}).items():
            self._table[tag.upper()] = kind
        self._self_nesting = frozenset(t.upper() for t in self_nesting)

    @classmethod
    def from_settings(cls, grammar_config=None) -> "GrammarTable":
        """Build the table with extensions from GrammarConfig (default: global settings)."""
        if grammar_config is None:
            from edgar_nc.config import settings  # pylint: disable=import-outside-toplevel
            grammar_config = settings.grammar

        overrides: Dict[str, TagKind] = {}
        for tags, kind in (
            (grammar_config.value_tags, TagKind.VALUE),
            (grammar_config.block_tags, TagKind.BLOCK),
            (grammar_config.opaque_text_tags, TagKind.OPAQUE_TEXT),
            (grammar_config.opaque_markup_tags, TagKind.OPAQUE_MARKUP),
            (grammar_config.opaque_binary_tags, TagKind.OPAQUE_BINARY),
        ):
            for tag in tags:
                overrides[tag.upper()] = kind
        return cls(overrides=overrides)

    def kind_of(self, tag: str) -> TagKind:
        return self._table.get(tag.upper(), TagKind.VALUE)

    def is_known(self, tag: str) -> bool:
        return tag.upper() in self._table

    def is_self_nesting(self, tag: str) -> bool:
        return tag.upper() in self._self_nesting

    def opaque_tags(self) -> Dict[str, TagKind]:
        """All tags whose content is scanned as an undivided span."""
        return {tag: kind for tag, kind in self._table.items() if kind.is_opaque}
