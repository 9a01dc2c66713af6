"""
Stage 2: Stack-based tree builder.

Rebuilds the nesting of an NC submission from the classified line stream even
though closing tags are optional in practice. The grammar table decides what
each tag does:

    BLOCK   → push; popped by its close tag, an ancestor's close tag, or EOF
    VALUE   → leaf with the rest of the line as value; never pushed
    OPAQUE_* → tokenizer switches to opaque scan; the span becomes raw_content

Recovery rules (none of them fail the parse):
    - close tag matching an ancestor: intermediate nodes are closed implicitly
    - close tag matching nothing open: skipped, stack unchanged
    - two open ancestors with the same tag: the innermost one is closed
    - reopening a non-nesting block that is still open: the open one is
      closed first (missing </DOCUMENT> before the next <DOCUMENT>)
    - end of input: everything still open is closed, innermost first
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .constants import TagKind
from .grammar import GrammarTable
from .models.filing import Anomaly, AnomalyKind
from .tokenizer import LineTokenizer, RawLine, TagClose, TagValue, split_inner_container

logger = logging.getLogger(__name__)

ROOT_TAG = "#ROOT"


@dataclass
class GenericNode:
    """
    Grammar-agnostic tree node.

    Children are appended only while the node is open on the builder's stack.
    """
    tag: str
    kind: TagKind = TagKind.BLOCK
    inline_value: Optional[str] = None
    children: List["GenericNode"] = field(default_factory=list)
    raw_content: Optional[bytes] = None
    offset: int = 0

    def child(self, tag: str) -> Optional["GenericNode"]:
        """First direct child with *tag*, or None."""
        for node in self.children:
            if node.tag == tag:
                return node
        return None

    def children_named(self, tag: str) -> List["GenericNode"]:
        return [node for node in self.children if node.tag == tag]

    def to_sgml(self, encoding: str = "latin-1") -> str:
        """Re-serialize the subtree (used to keep unknown blocks in overflow)."""
        if self.kind is TagKind.VALUE:
            return f"<{self.tag}>{self.inline_value or ''}"

        head = f"<{self.tag}>" + (self.inline_value or "")
        if self.kind.is_opaque:
            body = (self.raw_content or b"").decode(encoding, errors="replace")
            return f"{head}\n{body}</{self.tag}>"

        parts = [head]
        parts.extend(child.to_sgml(encoding) for child in self.children)
        if self.raw_content:
            parts.append(self.raw_content.decode(encoding, errors="replace").rstrip("\r\n"))
        parts.append(f"</{self.tag}>")
        return "\n".join(parts)


@dataclass
class BuildResult:
    root: GenericNode
    anomalies: List[Anomaly]


class TreeBuilder:
    """
    Builds a GenericNode tree from raw submission bytes.

    Holds only configuration; every ``build()`` call has its own stack, so one
    builder can serve any number of files (or threads).

    Example:
        >>> builder = TreeBuilder(GrammarTable())
        >>> result = builder.build(b"<SUBMISSION>\\n<TYPE>10-K\\n</SUBMISSION>\\n")
        >>> result.root.children[0].children[0].inline_value
        '10-K'
    """

    def __init__(
        self,
        grammar: GrammarTable,
        close_reopened_blocks: bool = True,
        value_encoding: str = "latin-1",
    ):
        self.grammar = grammar
        self.close_reopened_blocks = close_reopened_blocks
        self.value_encoding = value_encoding
        self._inner_tags = frozenset(
            tag for tag, kind in grammar.opaque_tags().items()
            if kind is not TagKind.OPAQUE_TEXT
        )

    def build(self, data: bytes) -> BuildResult:
        """
        Tokenize *data* and rebuild its tree.

        Raises:
            TokenizeError: Malformed tag syntax (propagated from the tokenizer).
        """
        return _Build(self, LineTokenizer(data)).run()


class _Build:
    """State of one build: the open-node stack and the anomalies so far."""

    def __init__(self, builder: TreeBuilder, tokenizer: LineTokenizer):
        self.builder = builder
        self.grammar = builder.grammar
        self.tokenizer = tokenizer
        self.root = GenericNode(ROOT_TAG)
        self.stack: List[GenericNode] = [self.root]
        self.anomalies: List[Anomaly] = []

    def run(self) -> BuildResult:
        for token in self.tokenizer:
            if isinstance(token, TagClose):
                self._close(token)
            elif isinstance(token, RawLine):
                self._stray(token)
            else:
                self._open(token)

        # End of input: implicit close of whatever is still open is routine
        del self.stack[1:]
        return BuildResult(self.root, self.anomalies)

    # ------------------------------------------------------------------
    # Token handlers
    # ------------------------------------------------------------------

    def _open(self, token) -> None:
        name = token.name
        kind = self.grammar.kind_of(name)
        value = None
        if isinstance(token, TagValue):
            value = token.value.decode(self.builder.value_encoding, errors="replace")

        if kind.is_opaque:
            self._open_opaque(token, kind)
        elif kind is TagKind.BLOCK:
            if self.builder.close_reopened_blocks and not self.grammar.is_self_nesting(name):
                idx = self._find_open(name)
                if idx is not None:
                    self._note(
                        AnomalyKind.REOPENED_BLOCK,
                        f"<{name}> opened while still open; closing the open one",
                        name, token.offset,
                    )
                    del self.stack[idx:]
            node = GenericNode(name, kind, inline_value=value, offset=token.offset)
            self.stack[-1].children.append(node)
            self.stack.append(node)
        else:
            leaf = GenericNode(name, kind, inline_value=value or "", offset=token.offset)
            self.stack[-1].children.append(leaf)

    def _open_opaque(self, token, kind: TagKind) -> None:
        name = token.name
        node = GenericNode(name, kind, offset=token.offset)
        stop_tags = [n.tag for n in self.stack[1:] if not self.grammar.is_self_nesting(n.tag)]
        span = self.tokenizer.read_opaque(token, stop_tags)
        node.raw_content = span.data
        if not span.terminated:
            self._note(
                AnomalyKind.UNTERMINATED_CONTAINER,
                f"no </{name}>; content ends at byte {span.start + len(span.data)}",
                name, token.offset,
            )

        if kind is TagKind.OPAQUE_TEXT:
            inner = split_inner_container(span.data, self.builder._inner_tags)
            if inner is not None:
                inner_tag, inner_span = inner
                node.children.append(GenericNode(
                    inner_tag,
                    self.grammar.kind_of(inner_tag),
                    raw_content=inner_span.data,
                    offset=span.start + inner_span.start,
                ))
                if not inner_span.terminated:
                    self._note(
                        AnomalyKind.UNTERMINATED_CONTAINER,
                        f"no </{inner_tag}> inside <{name}>",
                        inner_tag, span.start + inner_span.start,
                    )

        self.stack[-1].children.append(node)

    def _close(self, token: TagClose) -> None:
        idx = self._find_open(token.name)
        if idx is None:
            self._note(
                AnomalyKind.SPURIOUS_CLOSE,
                f"</{token.name}> matches no open tag; ignored",
                token.name, token.offset,
            )
            return

        if idx != len(self.stack) - 1:
            closed = [n.tag for n in reversed(self.stack[idx + 1:])]
            self._note(
                AnomalyKind.IMPLICIT_CLOSE,
                f"</{token.name}> implicitly closes {', '.join('<' + t + '>' for t in closed)}",
                token.name, token.offset,
            )
        del self.stack[idx:]

    def _stray(self, token: RawLine) -> None:
        top = self.stack[-1]
        if top.raw_content is None:
            self._note(
                AnomalyKind.STRAY_TEXT,
                f"text outside any container kept under <{top.tag}>",
                top.tag, token.offset,
            )
            top.raw_content = token.data
        else:
            top.raw_content += token.data

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _find_open(self, name: str) -> Optional[int]:
        """Stack index of the innermost open node named *name* (root excluded)."""
        for idx in range(len(self.stack) - 1, 0, -1):
            if self.stack[idx].tag == name:
                return idx
        return None

    def _note(self, kind: AnomalyKind, message: str, tag: Optional[str], offset: Optional[int]) -> None:
        logger.debug("%s at byte %s: %s", kind.value, offset, message)
        self.anomalies.append(Anomaly(kind=kind, message=message, tag=tag, offset=offset))
