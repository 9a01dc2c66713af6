"""
Pydantic models for a parsed EDGAR NC submission.

A Filing is the typed, lossless result of one parse: the submission header,
every embedded document in source order, and the non-fatal anomalies met on
the way.
"""

from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .header import SubmissionHeader
from ..uucodec import uuencode


# ---------------------------------------------------------------------------
# Anomalies
# ---------------------------------------------------------------------------

class AnomalyKind(str, Enum):
    """Recoverable irregularities recorded instead of failing the parse."""
    SPURIOUS_CLOSE = "spurious_close"                  # close tag with no open ancestor
    IMPLICIT_CLOSE = "implicit_close"                  # block closed by an ancestor's close tag
    REOPENED_BLOCK = "reopened_block"                  # block reopened before being closed
    STRAY_TEXT = "stray_text"                          # content line outside any container
    UNTERMINATED_CONTAINER = "unterminated_container"  # opaque container without its close tag
    UNKNOWN_FIELD = "unknown_field"                    # tag kept in an overflow mapping
    DUPLICATE_FIELD = "duplicate_field"                # single-valued field seen twice
    MISSING_FIELD = "missing_field"                    # expected header field absent
    INVALID_VALUE = "invalid_value"                    # value failed conversion, kept raw
    UNCLASSIFIED_PAYLOAD = "unclassified_payload"      # document content kept as raw bytes
    EXTRA_ENVELOPE = "extra_envelope"                  # more than one submission envelope
    MISSING_ENVELOPE = "missing_envelope"              # documents found outside an envelope


class Anomaly(BaseModel):
    """One non-fatal irregularity, with its location when known."""
    model_config = ConfigDict(frozen=True)

    kind:    AnomalyKind
    message: str
    tag:     Optional[str] = None
    offset:  Optional[int] = None   # byte offset in the source file


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

class TextPayload(BaseModel):
    """Plain-text document body."""
    kind:     Literal["text"] = "text"
    text:     str
    encoding: str   # encoding the source bytes were decoded with

    def to_bytes(self) -> bytes:
        """Source bytes of the body (round-trips exactly)."""
        return self.text.encode(self.encoding)


class BinaryPayload(BaseModel):
    """Decoded binary attachment plus what is needed to re-encode it."""
    model_config = ConfigDict(ser_json_bytes='base64', val_json_bytes='base64')

    kind:      Literal["binary"] = "binary"
    data:      bytes
    scheme:    str = "uuencode"
    filename:  Optional[str] = None   # name declared in the 'begin' line
    mode:      Optional[str] = None   # permission bits declared in the 'begin' line
    backtick:  bool = True
    newline:   str = "\n"             # line terminator of the encoded stream
    container: Optional[str] = None   # wrapping tag, e.g. "PDF" or "TEXT"

    def encoded(self) -> bytes:
        """Re-encode with the declared scheme."""
        return uuencode(
            self.data, self.filename or "", self.mode or "644", self.backtick,
            self.newline.encode("ascii"),
        )


class MarkupPayload(BaseModel):
    """Embedded XBRL/XML, verbatim and uninterpreted."""
    kind:      Literal["markup"] = "markup"
    markup:    str
    container: str    # "XBRL" or "XML"
    encoding:  str


class UnclassifiedPayload(BaseModel):
    """Content that could not be classified; raw bytes kept as-is."""
    model_config = ConfigDict(ser_json_bytes='base64', val_json_bytes='base64')

    kind:      Literal["unclassified"] = "unclassified"
    raw:       bytes
    reason:    str
    container: Optional[str] = None


Payload = Annotated[
    Union[TextPayload, BinaryPayload, MarkupPayload, UnclassifiedPayload],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Document / Filing
# ---------------------------------------------------------------------------

class Document(BaseModel):
    """One embedded file within a submission."""
    model_config = ConfigDict(validate_assignment=True)

    doc_type:    Optional[str] = None   # free-form, e.g. "10-K", "EX-31.1", "GRAPHIC"
    sequence:    Optional[int] = None
    filename:    Optional[str] = None
    description: Optional[str] = None
    flawed:      bool = False
    payload:     Optional[Payload] = None
    overflow:    Dict[str, str] = Field(default_factory=dict)


class Filing(BaseModel):
    """
    Complete parse result of one NC submission.

    Attributes:
        header: Submission-level metadata
        documents: Embedded documents in source order
        anomalies: Non-fatal irregularities met while parsing
    """
    model_config = ConfigDict(validate_assignment=True)

    header:    SubmissionHeader = Field(default_factory=SubmissionHeader)
    documents: List[Document] = Field(default_factory=list)
    anomalies: List[Anomaly] = Field(default_factory=list)

    def __len__(self) -> int:
        """Return number of documents"""
        return len(self.documents)

    def primary_document(self) -> Optional[Document]:
        """Lowest declared sequence, else the first document."""
        if not self.documents:
            return None
        sequenced = [d for d in self.documents if d.sequence is not None]
        if sequenced:
            return min(sequenced, key=lambda d: d.sequence)
        return self.documents[0]

    def find_by_filename(self, name: str) -> Optional[Document]:
        """Find a document by exact filename (case-insensitive)."""
        name_lower = name.lower()
        for doc in self.documents:
            if doc.filename and doc.filename.lower() == name_lower:
                return doc
        return None

    def find_by_type(self, doc_type: str) -> List[Document]:
        """All documents of the given type (case-insensitive)."""
        wanted = doc_type.upper()
        return [d for d in self.documents if d.doc_type and d.doc_type.upper() == wanted]

    def xbrl_documents(self) -> List[Document]:
        """Documents whose payload is embedded XBRL markup."""
        return [
            d for d in self.documents
            if isinstance(d.payload, MarkupPayload) and d.payload.container == "XBRL"
        ]

    def anomalies_of(self, kind: AnomalyKind) -> List[Anomaly]:
        return [a for a in self.anomalies if a.kind == kind]
