"""
Stage 4: Document content classification and extraction.

Picks the node that carries a document's payload and turns its raw span into
one of the payload models:

    OPAQUE_TEXT    → TextPayload, or BinaryPayload when the body is uuencoded
    OPAQUE_BINARY  → BinaryPayload (declared scheme), else UnclassifiedPayload
    OPAQUE_MARKUP  → MarkupPayload, verbatim
    stray lines    → TextPayload if decodable, else UnclassifiedPayload

Payload bytes are never altered; only the outer tag delimiters are gone.
"""

import logging
from typing import List, Optional, Tuple

from edgar_nc.config import ParserConfig

from .constants import TEXT_TAG, TagKind
from .models.filing import (
    Anomaly,
    AnomalyKind,
    BinaryPayload,
    MarkupPayload,
    Payload,
    TextPayload,
    UnclassifiedPayload,
)
from .tree_builder import GenericNode
from .uucodec import UUDecodeError, looks_uuencoded, uudecode

logger = logging.getLogger(__name__)


class ContentClassifier:
    """
    Turns a DOCUMENT node's content into a typed payload.

    Example:
        >>> classifier = ContentClassifier(ParserConfig())
        >>> payload, anomalies = classifier.classify(document_node)
        >>> payload.kind
        'text'
    """

    def __init__(self, config: ParserConfig):
        self.config = config
        self._encodings = [config.text_encoding] + [
            enc for enc in config.fallback_encodings if enc != config.text_encoding
        ]

    def classify(self, document: GenericNode) -> Tuple[Optional[Payload], List[Anomaly]]:
        """
        Classify the content of one DOCUMENT node.

        Returns:
            (payload, anomalies); payload is None when the block holds no
            content at all.
        """
        anomalies: List[Anomaly] = []
        node = select_payload_node(document)

        if node is None:
            if document.raw_content is None:
                return None, anomalies
            payload = self._classify_stray(document.raw_content)
        elif node.kind is TagKind.OPAQUE_BINARY:
            payload = self._classify_binary(node)
        elif node.kind is TagKind.OPAQUE_MARKUP:
            payload = self._classify_markup(node)
        else:
            payload = self._classify_text(node)

        if isinstance(payload, UnclassifiedPayload):
            logger.warning(
                "Unclassified payload at byte %d (%s): %s",
                document.offset, payload.container or "no container", payload.reason,
            )
            anomalies.append(Anomaly(
                kind=AnomalyKind.UNCLASSIFIED_PAYLOAD,
                message=payload.reason,
                tag=payload.container,
                offset=node.offset if node is not None else document.offset,
            ))
        return payload, anomalies

    # ------------------------------------------------------------------
    # Per-kind classification
    # ------------------------------------------------------------------

    def _classify_text(self, node: GenericNode) -> Payload:
        raw = node.raw_content or b""
        if looks_uuencoded(raw):
            return self._uudecode(raw, node.tag)

        decoded = self._decode(raw)
        if decoded is None:
            return UnclassifiedPayload(
                raw=raw,
                reason=f"text not decodable as any of {', '.join(self._encodings)}",
                container=node.tag,
            )
        text, encoding = decoded
        return TextPayload(text=text, encoding=encoding)

    def _classify_binary(self, node: GenericNode) -> Payload:
        raw = node.raw_content or b""
        if not looks_uuencoded(raw):
            return UnclassifiedPayload(
                raw=raw,
                reason="binary container without a recognised encoding scheme",
                container=node.tag,
            )
        return self._uudecode(raw, node.tag)

    def _classify_markup(self, node: GenericNode) -> Payload:
        raw = node.raw_content or b""
        decoded = self._decode(raw)
        if decoded is None:
            return UnclassifiedPayload(
                raw=raw,
                reason=f"markup not decodable as any of {', '.join(self._encodings)}",
                container=node.tag,
            )
        markup, encoding = decoded
        return MarkupPayload(markup=markup, container=node.tag, encoding=encoding)

    def _classify_stray(self, raw: bytes) -> Payload:
        decoded = self._decode(raw)
        if decoded is None:
            return UnclassifiedPayload(raw=raw, reason="content outside any container is not text")
        text, encoding = decoded
        return TextPayload(text=text, encoding=encoding)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _uudecode(self, raw: bytes, container: str) -> Payload:
        if not self.config.decode_binary:
            return UnclassifiedPayload(
                raw=raw, reason="binary decoding disabled", container=container,
            )
        try:
            decoded = uudecode(raw)
        except UUDecodeError as e:
            return UnclassifiedPayload(raw=raw, reason=f"uudecode failed: {e}", container=container)
        return BinaryPayload(
            data=decoded.data,
            scheme="uuencode",
            filename=decoded.filename,
            mode=decoded.mode,
            backtick=decoded.backtick,
            newline=decoded.newline.decode("ascii"),
            container=container,
        )

    def _decode(self, raw: bytes) -> Optional[Tuple[str, str]]:
        for encoding in self._encodings:
            try:
                return raw.decode(encoding), encoding
            except (UnicodeDecodeError, LookupError):
                continue
        return None


def select_payload_node(document: GenericNode) -> Optional[GenericNode]:
    """
    Choose the node carrying a document's payload.

    Order: the innermost opaque child of TEXT, then TEXT itself, then any
    other opaque child of the document. None means only stray lines (or
    nothing) remain.
    """
    node = payload_container(document)
    while node is not None:
        inner = next((c for c in node.children if c.kind.is_opaque), None)
        if inner is None:
            return node
        node = inner
    return None


def payload_container(document: GenericNode) -> Optional[GenericNode]:
    """The document's direct child holding the payload: TEXT, else the first opaque child."""
    text = document.child(TEXT_TAG)
    if text is not None:
        return text
    return next((c for c in document.children if c.kind.is_opaque), None)
