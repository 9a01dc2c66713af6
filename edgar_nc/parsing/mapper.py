"""
Stage 3: Map the generic tree onto the typed Filing model.

Header structure is described declaratively: each block model has a
``BlockSpec`` naming which value tags fill which fields (and how the raw
string is converted) and which child blocks become nested models. Adding a
field is a table edit, not a code change.

Anything the tables do not name is kept in the enclosing model's
``overflow`` mapping and recorded as an UNKNOWN_FIELD anomaly.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Tuple, Type

from pydantic import BaseModel

from edgar_nc.config import ParserConfig

from .constants import DOCUMENT_TAG, ENVELOPE_TAGS, HEADER_TEXT_TAGS, TagKind
from .content import ContentClassifier, payload_container
from .dates import Granularity, normalize, parse_month_day, parse_yes_no
from .errors import DateParseError, MappingError
from .models.filing import Anomaly, AnomalyKind, Document, Filing
from .models.header import (
    Address,
    ClassContract,
    Company,
    CompanyData,
    FilingValues,
    FormerCompany,
    Merger,
    MergerParty,
    Series,
    SeriesAndClassesContractsData,
    SubmissionHeader,
)
from .sec_header import parse_sec_header_text
from .tree_builder import GenericNode

logger = logging.getLogger(__name__)

# Value conversions
STR = "str"
INT = "int"
DATE = "date"
DATETIME = "datetime"
YES_NO = "yes_no"
FLAG = "flag"
MONTH_DAY = "month_day"
LIST = "list"

# Overflow key for text lines found directly inside a block
STRAY_TEXT_KEY = "#TEXT"

# Header fields whose absence is recorded
REQUIRED_HEADER_TAGS = {
    "ACCESSION-NUMBER": "accession_number",
    "TYPE": "filing_type",
    "FILING-DATE": "filing_date",
}

# Unparseable even with strict_dates off
FATAL_DATE_TAGS = frozenset({"FILING-DATE"})


@dataclass(frozen=True)
class BlockSpec:
    """
    Field table for one block model.

    Attributes:
        model: Pydantic model built from the block
        values: value tag → (field name, conversion)
        blocks: child block tag → (field name, child spec, repeatable)
        inline: wrapper blocks whose children are read as if they were
            direct children (EXISTING-SERIES-AND-CLASSES-CONTRACTS, ...)
    """
    model: Type[BaseModel]
    values: Dict[str, Tuple[str, str]] = field(default_factory=dict)
    blocks: Dict[str, Tuple[str, "BlockSpec", bool]] = field(default_factory=dict)
    inline: FrozenSet[str] = frozenset()


# ---------------------------------------------------------------------------
# Field tables
# ---------------------------------------------------------------------------

COMPANY_DATA_SPEC = BlockSpec(CompanyData, values={
    "CONFORMED-NAME":         ("conformed_name", STR),
    "CIK":                    ("cik", STR),
    "IRS-NUMBER":             ("irs_number", STR),
    "STATE-OF-INCORPORATION": ("state_of_incorporation", STR),
    "FISCAL-YEAR-END":        ("fiscal_year_end", MONTH_DAY),
    "ASSIGNED-SIC":           ("assigned_sic", STR),
    "RELATIONSHIP":           ("relationship", STR),
})

FILING_VALUES_SPEC = BlockSpec(FilingValues, values={
    "FORM-TYPE":   ("form_type", STR),
    "ACT":         ("act", STR),
    "FILE-NUMBER": ("file_number", STR),
    "FILM-NUMBER": ("film_number", STR),
})

ADDRESS_SPEC = BlockSpec(Address, values={
    "STREET1": ("street1", STR),
    "STREET2": ("street2", STR),
    "CITY":    ("city", STR),
    "STATE":   ("state", STR),
    "ZIP":     ("zip", STR),
    "PHONE":   ("phone", STR),
})

FORMER_COMPANY_SPEC = BlockSpec(FormerCompany, values={
    "FORMER-CONFORMED-NAME": ("former_conformed_name", STR),
    "DATE-CHANGED":          ("date_changed", DATE),
})

COMPANY_SPEC = BlockSpec(Company, blocks={
    "COMPANY-DATA":     ("company_data", COMPANY_DATA_SPEC, False),
    "OWNER-DATA":       ("owner_data", COMPANY_DATA_SPEC, False),
    "FILING-VALUES":    ("filing_values", FILING_VALUES_SPEC, True),
    "BUSINESS-ADDRESS": ("business_address", ADDRESS_SPEC, False),
    "MAIL-ADDRESS":     ("mail_address", ADDRESS_SPEC, False),
    "FORMER-COMPANY":   ("former_companies", FORMER_COMPANY_SPEC, True),
    "FORMER-NAME":      ("former_names", FORMER_COMPANY_SPEC, True),
})

CLASS_CONTRACT_SPEC = BlockSpec(ClassContract, values={
    "CLASS-CONTRACT-ID":            ("class_contract_id", STR),
    "CLASS-CONTRACT-NAME":          ("class_contract_name", STR),
    "CLASS-CONTRACT-TICKER-SYMBOL": ("class_contract_ticker_symbol", STR),
})

SERIES_SPEC = BlockSpec(
    Series,
    values={
        "OWNER-CIK":   ("owner_cik", STR),
        "SERIES-ID":   ("series_id", STR),
        "SERIES-NAME": ("series_name", STR),
    },
    blocks={"CLASS-CONTRACT": ("class_contracts", CLASS_CONTRACT_SPEC, True)},
)

MERGER_PARTY_SPEC = BlockSpec(
    MergerParty,
    values={"CIK": ("cik", STR)},
    blocks={"SERIES": ("series", SERIES_SPEC, True)},
)

MERGER_SPEC = BlockSpec(Merger, blocks={
    "ACQUIRING-DATA": ("acquiring_data", MERGER_PARTY_SPEC, False),
    "TARGET-DATA":    ("target_data", MERGER_PARTY_SPEC, True),
})

SERIES_DATA_SPEC = BlockSpec(
    SeriesAndClassesContractsData,
    values={"OWNER-CIK": ("new_series_owner_cik", STR)},
    blocks={
        "SERIES":                ("existing_series", SERIES_SPEC, True),
        "MERGER":                ("mergers", MERGER_SPEC, True),
        "NEW-SERIES":            ("new_series", SERIES_SPEC, True),
        "NEW-CLASSES-CONTRACTS": ("new_classes_contracts", SERIES_SPEC, True),
    },
    inline=frozenset({
        "EXISTING-SERIES-AND-CLASSES-CONTRACTS",
        "MERGER-SERIES-AND-CLASSES-CONTRACTS",
        "NEW-SERIES-AND-CLASSES-CONTRACTS",
    }),
)

HEADER_SPEC = BlockSpec(
    SubmissionHeader,
    values={
        "ACCESSION-NUMBER":          ("accession_number", STR),
        "TYPE":                      ("filing_type", STR),
        "PUBLIC-DOCUMENT-COUNT":     ("public_document_count", INT),
        "PREVIOUS-ACCESSION-NUMBER": ("previous_accession_number", STR),
        "ITEMS":                     ("items", LIST),
        "GROUP-MEMBERS":             ("group_members", LIST),
        # Dates
        "FILING-DATE":                ("filing_date", DATE),
        "PERIOD":                     ("period", DATE),
        "PERIOD-START":               ("period_start", DATE),
        "DATE-OF-FILING-DATE-CHANGE": ("date_of_filing_date_change", DATE),
        "EFFECTIVENESS-DATE":         ("effectiveness_date", DATE),
        "ACTION-DATE":                ("action_date", DATE),
        "RECEIVED-DATE":              ("received_date", DATE),
        "PUBLIC-REL-DATE":            ("public_rel_date", DATE),
        "TIMESTAMP":                  ("timestamp", DATETIME),
        "ACCEPTANCE-DATETIME":        ("acceptance_datetime", DATETIME),
        # Y/N answers
        "IS-FILER-A-NEW-REGISTRANT":                ("is_filer_a_new_registrant", YES_NO),
        "IS-FILER-A-WELL-KNOWN-SEASONED-ISSUER":    ("is_filer_a_well_known_seasoned_issuer", YES_NO),
        "FILED-PURSUANT-TO-GENERAL-INSTRUCTION-A2": ("filed_pursuant_to_general_instruction_a2", YES_NO),
        "IS-FUND-24F2-ELIGIBLE":                    ("is_fund_24f2_eligible", YES_NO),
        "NO-QUARTERLY-ACTIVITY":                    ("no_quarterly_activity", YES_NO),
        "NO-ANNUAL-ACTIVITY":                       ("no_annual_activity", YES_NO),
        "REGISTERED-ENTITY":                        ("registered_entity", YES_NO),
        # Presence flags
        "PAPER":             ("paper", FLAG),
        "CONFIRMING-COPY":   ("confirming_copy", FLAG),
        "PRIVATE-TO-PUBLIC": ("private_to_public", FLAG),
        "DELETION":          ("deletion", FLAG),
        "CORRECTION":        ("correction", FLAG),
        # ABS and references
        "REFERENCE-462B":          ("reference_462b", STR),
        "REFERENCES-429":          ("references_429", STR),
        "MA-I_INDIVIDUAL":         ("ma_i_individual", STR),
        "ABS-RULE":                ("abs_rule", STR),
        "ABS-ASSET-CLASS":         ("abs_asset_class", STR),
        "CATEGORY":                ("category", STR),
        "DEPOSITOR-CIK":           ("depositor_cik", STR),
        "SPONSOR-CIK":             ("sponsor_cik", STR),
        "SECURITIZER-CIK":         ("securitizer_cik", STR),
        "ISSUING_ENTITY_CIK":      ("issuing_entity_cik", STR),
        "ISSUING_ENTITY_NAME":     ("issuing_entity_name", STR),
        "SECURITIZER-FILE-NUMBER": ("securitizer_file_number", STR),
        "DEPOSITOR-FILE-NUMBER":   ("depositor_file_number", STR),
        "PUBLIC-REFERENCE-ACC":    ("public_reference_acc", STR),
        "SROS":                    ("sros", STR),
    },
    blocks={
        "FILER":           ("filers", COMPANY_SPEC, True),
        "SUBJECT-COMPANY": ("subject_companies", COMPANY_SPEC, True),
        "REPORTING-OWNER": ("reporting_owners", COMPANY_SPEC, True),
        "FILED-FOR":       ("filed_for", COMPANY_SPEC, True),
        "ISSUER":          ("issuer", COMPANY_SPEC, False),
        "FILED-BY":        ("filed_by", COMPANY_SPEC, False),
        "DEPOSITOR":       ("depositor", COMPANY_SPEC, False),
        "SECURITIZER":     ("securitizer", COMPANY_SPEC, False),
        "SERIES-AND-CLASSES-CONTRACTS-DATA": ("series_and_classes_contracts_data", SERIES_DATA_SPEC, False),
    },
)

DOCUMENT_SPEC = BlockSpec(Document, values={
    "TYPE":        ("doc_type", STR),
    "SEQUENCE":    ("sequence", INT),
    "FILENAME":    ("filename", STR),
    "DESCRIPTION": ("description", STR),
    "FLAWED":      ("flawed", FLAG),
})


# ---------------------------------------------------------------------------
# Mapper
# ---------------------------------------------------------------------------

class FilingMapper:
    """
    Walks a GenericNode tree and builds the Filing.

    Raises:
        MappingError: No DOCUMENT block anywhere in the tree
        DateParseError: Unparseable FILING-DATE, or any unparseable header
            date while ``strict_dates`` is on
    """

    def __init__(self, config: ParserConfig, classifier: Optional[ContentClassifier] = None):
        self.config = config
        self.classifier = classifier or ContentClassifier(config)

    def map(self, root: GenericNode, anomalies: Optional[List[Anomaly]] = None) -> Filing:
        anomalies = list(anomalies or [])
        envelope, documents = self._locate(root, anomalies)

        header = self._map_header(envelope, anomalies, root)
        filing_documents = [self._map_document(node, anomalies) for node in documents]

        return Filing(header=header, documents=filing_documents, anomalies=anomalies)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def _locate(self, root: GenericNode, anomalies: List[Anomaly]) -> Tuple[GenericNode, List[GenericNode]]:
        """Find the envelope and every DOCUMENT block, in source order."""
        envelope = None
        documents: List[GenericNode] = []

        for child in root.children:
            if child.tag in ENVELOPE_TAGS:
                if envelope is None:
                    envelope = child
                else:
                    _record(anomalies, AnomalyKind.EXTRA_ENVELOPE,
                            f"additional <{child.tag}>; its documents are kept", child.tag, child.offset)
                documents.extend(_iter_documents(child))
            elif child.tag == DOCUMENT_TAG:
                documents.extend(_iter_documents(child))

        if not documents:
            if envelope is None:
                raise MappingError("SUBMISSION", "no submission envelope and no documents")
            raise MappingError(DOCUMENT_TAG)

        if envelope is None:
            _record(anomalies, AnomalyKind.MISSING_ENVELOPE,
                    "documents found without a submission envelope", None, documents[0].offset)
            envelope = root
        elif any(d.tag == DOCUMENT_TAG for d in root.children):
            _record(anomalies, AnomalyKind.MISSING_ENVELOPE,
                    "documents found outside the submission envelope", DOCUMENT_TAG, None)
        return envelope, documents

    # ------------------------------------------------------------------
    # Header
    # ------------------------------------------------------------------

    def _map_header(self, envelope: GenericNode, anomalies: List[Anomaly],
                    root: Optional[GenericNode] = None) -> SubmissionHeader:
        # Header tags and text written outside the envelope; envelope tags win
        outside: List[GenericNode] = []
        if root is not None and root is not envelope:
            outside = [c for c in root.children if c.tag != DOCUMENT_TAG and c.tag not in ENVELOPE_TAGS]
            for child in outside:
                _record(anomalies, AnomalyKind.MISSING_ENVELOPE,
                        f"<{child.tag}> found outside the submission envelope; read as header",
                        child.tag, child.offset)

        children = []
        text_blocks = []
        for child in [*envelope.children, *outside]:
            if child.tag == DOCUMENT_TAG or child.tag in ENVELOPE_TAGS:
                continue
            if child.tag in HEADER_TEXT_TAGS and child.kind.is_opaque:
                text_blocks.append(child)
            else:
                children.append(child)

        fields = self._collect(children, HEADER_SPEC, anomalies)
        if envelope.inline_value:
            fields["overflow"].setdefault(envelope.tag, envelope.inline_value)
        if root is not None and root is not envelope and root.raw_content:
            _add_overflow(fields["overflow"], STRAY_TEXT_KEY, self._decode(root.raw_content))
        if envelope.raw_content:
            _add_overflow(fields["overflow"], STRAY_TEXT_KEY, self._decode(envelope.raw_content))
        header = SubmissionHeader(**fields)

        for block in text_blocks:
            text_root = parse_sec_header_text(self._decode(block.raw_content or b""))
            text_header = SubmissionHeader(**self._collect(text_root.children, HEADER_SPEC, anomalies))
            header = _merge_missing(header, text_header)

        for tag, name in REQUIRED_HEADER_TAGS.items():
            if getattr(header, name) is None:
                _record(anomalies, AnomalyKind.MISSING_FIELD, f"header has no <{tag}>", tag, envelope.offset)
        return header

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def _map_document(self, node: GenericNode, anomalies: List[Anomaly]) -> Document:
        fields_children = [
            c for c in node.children if not c.kind.is_opaque and c.tag != DOCUMENT_TAG
        ]
        fields = self._collect(fields_children, DOCUMENT_SPEC, anomalies)

        payload, payload_anomalies = self.classifier.classify(node)
        anomalies.extend(payload_anomalies)

        container = payload_container(node)
        for extra in node.children:
            if extra.kind.is_opaque and extra is not container:
                _record(anomalies, AnomalyKind.DUPLICATE_FIELD,
                        f"additional <{extra.tag}> container kept in overflow", extra.tag, extra.offset)
                _add_overflow(fields["overflow"], extra.tag, extra.to_sgml(self.config.header_encoding))

        if node.raw_content and container is not None:
            # Stray lines beside a real container are not the payload
            _add_overflow(fields["overflow"], STRAY_TEXT_KEY, self._decode(node.raw_content))

        return Document(payload=payload, **fields)

    # ------------------------------------------------------------------
    # Declarative block mapping
    # ------------------------------------------------------------------

    def _collect(self, children: List[GenericNode], spec: BlockSpec, anomalies: List[Anomaly]) -> Dict[str, Any]:
        """Convert *children* into constructor kwargs for ``spec.model``."""
        fields: Dict[str, Any] = {"overflow": {}}
        overflow = fields["overflow"]

        for child in _flatten(children, spec.inline):
            tag = child.tag
            if child.kind is TagKind.BLOCK and tag in spec.blocks:
                name, child_spec, repeatable = spec.blocks[tag]
                model = child_spec.model(**self._collect(child.children, child_spec, anomalies))
                if repeatable:
                    fields.setdefault(name, []).append(model)
                elif name in fields:
                    _record(anomalies, AnomalyKind.DUPLICATE_FIELD,
                            f"repeated <{tag}> kept in overflow", tag, child.offset)
                    _add_overflow(overflow, tag, child.to_sgml(self.config.header_encoding))
                else:
                    fields[name] = model
                continue

            if child.kind is TagKind.VALUE and tag in spec.values:
                self._set_value(fields, child, *spec.values[tag], anomalies)
                continue

            _record(anomalies, AnomalyKind.UNKNOWN_FIELD, f"<{tag}> kept in overflow", tag, child.offset)
            _add_overflow(overflow, tag, _raw_value(child, self.config.header_encoding))

        return fields

    def _set_value(self, fields: Dict[str, Any], node: GenericNode, name: str, conversion: str,
                   anomalies: List[Anomaly]) -> None:
        tag = node.tag
        raw = node.inline_value or ""

        if conversion == LIST:
            fields.setdefault(name, []).append(raw)
            return

        if name in fields:
            _record(anomalies, AnomalyKind.DUPLICATE_FIELD,
                    f"repeated <{tag}>; first value kept", tag, node.offset)
            _add_overflow(fields["overflow"], tag, raw)
            return

        try:
            fields[name] = self._convert(raw, conversion, tag)
        except DateParseError:
            if self.config.strict_dates or tag in FATAL_DATE_TAGS:
                raise
            self._invalid(fields, node, raw, "unrecognized date", anomalies)
        except ValueError as e:
            self._invalid(fields, node, raw, str(e), anomalies)

    def _convert(self, raw: str, conversion: str, tag: str) -> Any:
        if conversion == STR:
            return raw
        if conversion == INT:
            return int(raw.strip())
        if conversion == DATE:
            return normalize(raw, Granularity.DATE, field=tag)
        if conversion == DATETIME:
            return normalize(raw, Granularity.DATETIME, field=tag)
        if conversion == YES_NO:
            return parse_yes_no(raw, field=tag)
        if conversion == FLAG:
            return True
        if conversion == MONTH_DAY:
            try:
                return parse_month_day(raw, field=tag)
            except DateParseError as e:
                # Fiscal year ends are never fatal
                raise ValueError(str(e)) from e
        raise ValueError(f"unknown conversion {conversion!r}")

    def _invalid(self, fields: Dict[str, Any], node: GenericNode, raw: str, reason: str,
                 anomalies: List[Anomaly]) -> None:
        _record(anomalies, AnomalyKind.INVALID_VALUE,
                f"<{node.tag}> value {raw!r} kept in overflow: {reason}", node.tag, node.offset)
        _add_overflow(fields["overflow"], node.tag, raw)

    def _decode(self, raw: bytes) -> str:
        return raw.decode(self.config.header_encoding, errors="replace")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _iter_documents(node: GenericNode) -> Iterator[GenericNode]:
    """DOCUMENT blocks under *node* (or *node* itself), nested ones after their parent."""
    if node.tag == DOCUMENT_TAG:
        yield node
    for child in node.children:
        if child.tag == DOCUMENT_TAG or (node.tag in ENVELOPE_TAGS and child.tag in ENVELOPE_TAGS):
            yield from _iter_documents(child)


def _flatten(children: List[GenericNode], inline: FrozenSet[str]) -> Iterator[GenericNode]:
    for child in children:
        if child.kind is TagKind.BLOCK and child.tag in inline:
            yield from _flatten(child.children, inline)
        else:
            yield child


def _raw_value(node: GenericNode, encoding: str) -> str:
    if node.kind is TagKind.VALUE:
        return node.inline_value or ""
    return node.to_sgml(encoding)


def _add_overflow(overflow: Dict[str, str], tag: str, value: str) -> None:
    if tag in overflow:
        overflow[tag] = overflow[tag] + "\n" + value
    else:
        overflow[tag] = value


def _merge_missing(primary: SubmissionHeader, secondary: SubmissionHeader) -> SubmissionHeader:
    """Fill fields *primary* lacks from *secondary*; *primary* values win."""
    updates: Dict[str, Any] = {}
    for name in SubmissionHeader.model_fields:
        if name == "overflow":
            continue
        # Only presence flags (plain bool) use False for "absent"; a Y/N answer of N is a value
        flag = SubmissionHeader.model_fields[name].annotation is bool
        if _unset(getattr(primary, name), flag):
            other = getattr(secondary, name)
            if not _unset(other, flag):
                updates[name] = other

    overflow = dict(secondary.overflow)
    overflow.update(primary.overflow)
    updates["overflow"] = overflow
    return primary.model_copy(update=updates)


def _unset(value: Any, flag: bool) -> bool:
    return value is None or value == [] or (flag and value is False)


def _record(anomalies: List[Anomaly], kind: AnomalyKind, message: str,
            tag: Optional[str], offset: Optional[int]) -> None:
    logger.debug("%s at byte %s: %s", kind.value, offset, message)
    anomalies.append(Anomaly(kind=kind, message=message, tag=tag, offset=offset))
