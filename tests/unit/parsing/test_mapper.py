"""
Unit tests for edgar_nc/parsing/mapper.py (Stage 3).

All tests use synthetic in-memory NC fixtures run through the full parser.
"""

from datetime import date, datetime

import pytest

from edgar_nc.parsing import NcFilingParser
from edgar_nc.parsing.constants import TagKind
from edgar_nc.parsing.errors import DateParseError, MappingError
from edgar_nc.parsing.grammar import GrammarTable
from edgar_nc.parsing.models.filing import AnomalyKind
from edgar_nc.parsing.models.header import MonthDay


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

_DEFAULT_HEADER = (
    "<ACCESSION-NUMBER>0000950123-09-012345\n"
    "<TYPE>8-K\n"
    "<FILING-DATE>20090601\n"
)

_DEFAULT_DOCUMENT = (
    "<DOCUMENT>\n"
    "<TYPE>8-K\n"
    "<SEQUENCE>1\n"
    "<FILENAME>form8k.txt\n"
    "<TEXT>\n"
    "body\n"
    "</TEXT>\n"
    "</DOCUMENT>\n"
)


def _make_nc(header: str = _DEFAULT_HEADER, extra_header: str = "", documents: str = _DEFAULT_DOCUMENT) -> bytes:
    """Build a minimal SUBMISSION envelope as bytes."""
    return ("<SUBMISSION>\n" + header + extra_header + documents + "</SUBMISSION>\n").encode("latin-1")


def _kinds(filing) -> list:
    return [a.kind for a in filing.anomalies]


# ---------------------------------------------------------------------------
# Tests: header fields
# ---------------------------------------------------------------------------

class TestHeaderFields:
    def test_typed_values(self, nc_parser):
        filing = nc_parser.parse(_make_nc(extra_header=(
            "<PUBLIC-DOCUMENT-COUNT>3\n"
            "<PERIOD>20090531\n"
            "<ACCEPTANCE-DATETIME>20090601163012\n"
            "<ITEMS>2.02\n"
            "<ITEMS>9.01\n"
            "<IS-FILER-A-NEW-REGISTRANT>N\n"
            "<PAPER>\n"
        )))
        header = filing.header
        assert header.accession_number == "0000950123-09-012345"
        assert header.filing_type == "8-K"
        assert header.filing_date == date(2009, 6, 1)
        assert header.public_document_count == 3
        assert header.period == date(2009, 5, 31)
        assert header.acceptance_datetime == datetime(2009, 6, 1, 16, 30, 12)
        assert header.items == ["2.02", "9.01"]
        assert header.is_filer_a_new_registrant is False
        assert header.paper is True
        assert filing.anomalies == []

    def test_absent_fields_stay_none(self, nc_parser):
        header = nc_parser.parse(_make_nc()).header
        assert header.period is None
        assert header.public_document_count is None
        assert header.issuer is None
        assert header.filers == []
        assert header.paper is False

    def test_company_blocks(self, nc_parser):
        filing = nc_parser.parse(_make_nc(extra_header=(
            "<SUBJECT-COMPANY>\n"
            "<COMPANY-DATA>\n"
            "<CONFORMED-NAME>TARGET CO\n"
            "<CIK>0000000001\n"
            "<FISCAL-YEAR-END>1231\n"
            "</COMPANY-DATA>\n"
            "<FORMER-COMPANY>\n"
            "<FORMER-CONFORMED-NAME>OLD TARGET CO\n"
            "<DATE-CHANGED>19990101\n"
            "</FORMER-COMPANY>\n"
            "<FORMER-COMPANY>\n"
            "<FORMER-CONFORMED-NAME>OLDER TARGET CO\n"
            "<DATE-CHANGED>19950101\n"
            "</FORMER-COMPANY>\n"
            "</SUBJECT-COMPANY>\n"
            "<FILED-BY>\n"
            "<COMPANY-DATA>\n"
            "<CONFORMED-NAME>ACQUIRER LLC\n"
            "<CIK>0000000002\n"
            "</COMPANY-DATA>\n"
            "<MAIL-ADDRESS>\n"
            "<STREET1>1 MAIN ST\n"
            "<ZIP>10001\n"
            "</MAIL-ADDRESS>\n"
            "</FILED-BY>\n"
        )))
        header = filing.header
        subject = header.subject_companies[0]
        assert subject.cik == "0000000001"
        assert subject.company_data.fiscal_year_end == MonthDay(month=12, day=31)
        assert [f.former_conformed_name for f in subject.former_companies] == [
            "OLD TARGET CO", "OLDER TARGET CO",
        ]
        assert subject.former_companies[0].date_changed == date(1999, 1, 1)
        assert header.filed_by.name == "ACQUIRER LLC"
        assert header.filed_by.mail_address.zip == "10001"
        assert header.cik == "0000000001"
        assert header.company_name == "TARGET CO"

    def test_reporting_owner_data(self, nc_parser):
        filing = nc_parser.parse(_make_nc(extra_header=(
            "<REPORTING-OWNER>\n"
            "<OWNER-DATA>\n"
            "<CONFORMED-NAME>DOE JOHN\n"
            "<CIK>0000000009\n"
            "<RELATIONSHIP>DIRECTOR\n"
            "</OWNER-DATA>\n"
            "</REPORTING-OWNER>\n"
        )))
        owner = filing.header.reporting_owners[0]
        assert owner.cik == "0000000009"
        assert owner.owner_data.relationship == "DIRECTOR"

    def test_series_and_classes(self, nc_parser):
        filing = nc_parser.parse(_make_nc(extra_header=(
            "<SERIES-AND-CLASSES-CONTRACTS-DATA>\n"
            "<EXISTING-SERIES-AND-CLASSES-CONTRACTS>\n"
            "<SERIES>\n"
            "<OWNER-CIK>0000000001\n"
            "<SERIES-ID>S000001\n"
            "<SERIES-NAME>Growth Fund\n"
            "<CLASS-CONTRACT>\n"
            "<CLASS-CONTRACT-ID>C000001\n"
            "<CLASS-CONTRACT-NAME>Class A\n"
            "<CLASS-CONTRACT-TICKER-SYMBOL>GRWAX\n"
            "</CLASS-CONTRACT>\n"
            "</SERIES>\n"
            "</EXISTING-SERIES-AND-CLASSES-CONTRACTS>\n"
            "<MERGER-SERIES-AND-CLASSES-CONTRACTS>\n"
            "<MERGER>\n"
            "<ACQUIRING-DATA>\n"
            "<CIK>0000000002\n"
            "<SERIES>\n"
            "<SERIES-ID>S000002\n"
            "</SERIES>\n"
            "</ACQUIRING-DATA>\n"
            "<TARGET-DATA>\n"
            "<CIK>0000000003\n"
            "</TARGET-DATA>\n"
            "</MERGER>\n"
            "</MERGER-SERIES-AND-CLASSES-CONTRACTS>\n"
            "<NEW-SERIES-AND-CLASSES-CONTRACTS>\n"
            "<OWNER-CIK>0000000004\n"
            "<NEW-SERIES>\n"
            "<SERIES-ID>S000009\n"
            "</NEW-SERIES>\n"
            "</NEW-SERIES-AND-CLASSES-CONTRACTS>\n"
            "</SERIES-AND-CLASSES-CONTRACTS-DATA>\n"
        )))
        data = filing.header.series_and_classes_contracts_data
        series = data.existing_series[0]
        assert series.series_name == "Growth Fund"
        assert series.class_contracts[0].class_contract_ticker_symbol == "GRWAX"
        merger = data.mergers[0]
        assert merger.acquiring_data.cik == "0000000002"
        assert merger.acquiring_data.series[0].series_id == "S000002"
        assert [t.cik for t in merger.target_data] == ["0000000003"]
        assert data.new_series_owner_cik == "0000000004"
        assert data.new_series[0].series_id == "S000009"
        assert filing.anomalies == []


# ---------------------------------------------------------------------------
# Tests: overflow and anomalies
# ---------------------------------------------------------------------------

class TestOverflow:
    def test_unknown_value_tag(self, nc_parser):
        filing = nc_parser.parse(_make_nc(extra_header="<FOO-BAR>baz\n"))
        assert filing.header.overflow == {"FOO-BAR": "baz"}
        assert _kinds(filing) == [AnomalyKind.UNKNOWN_FIELD]
        assert filing.anomalies[0].tag == "FOO-BAR"

    def test_repeated_unknown_tag_joined(self, nc_parser):
        filing = nc_parser.parse(_make_nc(extra_header="<FOO-BAR>a\n<FOO-BAR>b\n"))
        assert filing.header.overflow["FOO-BAR"] == "a\nb"

    def test_unknown_block_reserialized(self, parser_config):
        grammar = GrammarTable(overrides={"WIDGET": TagKind.BLOCK})
        parser = NcFilingParser(parser_config, grammar)
        filing = parser.parse(_make_nc(extra_header="<WIDGET>\n<PART>1\n</WIDGET>\n"))
        assert filing.header.overflow["WIDGET"] == "<WIDGET>\n<PART>1\n</WIDGET>"

    def test_unknown_nested_field(self, nc_parser):
        filing = nc_parser.parse(_make_nc(extra_header=(
            "<FILER>\n<COMPANY-DATA>\n<CIK>1\n<NICKNAME>Acme\n</COMPANY-DATA>\n</FILER>\n"
        )))
        assert filing.header.filers[0].company_data.overflow == {"NICKNAME": "Acme"}

    def test_duplicate_single_field_keeps_first(self, nc_parser):
        filing = nc_parser.parse(_make_nc(extra_header="<TYPE>8-K/A\n"))
        assert filing.header.filing_type == "8-K"
        assert filing.header.overflow["TYPE"] == "8-K/A"
        assert _kinds(filing) == [AnomalyKind.DUPLICATE_FIELD]

    def test_duplicate_single_block_kept_in_overflow(self, nc_parser):
        filing = nc_parser.parse(_make_nc(extra_header=(
            "<ISSUER>\n<COMPANY-DATA>\n<CIK>1\n</COMPANY-DATA>\n</ISSUER>\n"
            "<ISSUER>\n<COMPANY-DATA>\n<CIK>2\n</COMPANY-DATA>\n</ISSUER>\n"
        )))
        assert filing.header.issuer.cik == "1"
        assert "<CIK>2" in filing.header.overflow["ISSUER"]
        assert _kinds(filing) == [AnomalyKind.DUPLICATE_FIELD]

    def test_missing_required_fields(self, nc_parser):
        filing = nc_parser.parse(_make_nc(header="<TYPE>8-K\n"))
        missing = {a.tag for a in filing.anomalies_of(AnomalyKind.MISSING_FIELD)}
        assert missing == {"ACCESSION-NUMBER", "FILING-DATE"}

    def test_invalid_yes_no(self, nc_parser):
        filing = nc_parser.parse(_make_nc(extra_header="<IS-FILER-A-NEW-REGISTRANT>maybe\n"))
        assert filing.header.is_filer_a_new_registrant is None
        assert filing.header.overflow["IS-FILER-A-NEW-REGISTRANT"] == "maybe"
        assert _kinds(filing) == [AnomalyKind.INVALID_VALUE]

    def test_invalid_fiscal_year_end_never_fatal(self, nc_parser):
        filing = nc_parser.parse(_make_nc(extra_header=(
            "<FILER>\n<COMPANY-DATA>\n<FISCAL-YEAR-END>1399\n</COMPANY-DATA>\n</FILER>\n"
        )))
        data = filing.header.filers[0].company_data
        assert data.fiscal_year_end is None
        assert data.overflow["FISCAL-YEAR-END"] == "1399"

    def test_envelope_inline_value_kept(self, nc_parser):
        raw = _make_nc().replace(b"<SUBMISSION>\n", b"<SUBMISSION>0001.txt : 20090601\n")
        filing = nc_parser.parse(raw)
        assert filing.header.overflow["SUBMISSION"] == "0001.txt : 20090601"


# ---------------------------------------------------------------------------
# Tests: dates
# ---------------------------------------------------------------------------

class TestDateHandling:
    def test_bad_optional_date_fatal_when_strict(self, nc_parser):
        with pytest.raises(DateParseError) as exc_info:
            nc_parser.parse(_make_nc(extra_header="<PERIOD>not-a-date\n"))
        assert exc_info.value.field == "PERIOD"
        assert exc_info.value.raw == "not-a-date"

    def test_bad_optional_date_kept_when_lenient(self, lenient_config, grammar):
        filing = NcFilingParser(lenient_config, grammar).parse(
            _make_nc(extra_header="<PERIOD>not-a-date\n")
        )
        assert filing.header.period is None
        assert filing.header.overflow["PERIOD"] == "not-a-date"
        assert _kinds(filing) == [AnomalyKind.INVALID_VALUE]

    def test_bad_filing_date_always_fatal(self, lenient_config, grammar):
        raw = _make_nc(header="<ACCESSION-NUMBER>1\n<TYPE>8-K\n<FILING-DATE>June 1st\n")
        with pytest.raises(DateParseError) as exc_info:
            NcFilingParser(lenient_config, grammar).parse(raw)
        assert exc_info.value.field == "FILING-DATE"

    @pytest.mark.parametrize("raw_date", ["19950103", "1995-01-03", "01/03/1995"])
    def test_date_formats_equivalent(self, nc_parser, raw_date):
        header = f"<ACCESSION-NUMBER>1\n<TYPE>10-K\n<FILING-DATE>{raw_date}\n"
        filing = nc_parser.parse(_make_nc(header=header))
        assert filing.header.filing_date == date(1995, 1, 3)


# ---------------------------------------------------------------------------
# Tests: documents and structure
# ---------------------------------------------------------------------------

class TestDocuments:
    def test_document_fields(self, nc_parser):
        filing = nc_parser.parse(_make_nc(documents=(
            "<DOCUMENT>\n"
            "<TYPE>GRAPHIC\n"
            "<SEQUENCE>7\n"
            "<FILENAME>logo.jpg\n"
            "<DESCRIPTION>Company logo\n"
            "<FLAWED>\n"
            "<TEXT>\n"
            "x\n"
            "</TEXT>\n"
            "</DOCUMENT>\n"
        )))
        doc = filing.documents[0]
        assert doc.doc_type == "GRAPHIC"
        assert doc.sequence == 7
        assert doc.filename == "logo.jpg"
        assert doc.description == "Company logo"
        assert doc.flawed is True

    def test_bad_sequence(self, nc_parser):
        filing = nc_parser.parse(_make_nc(documents=(
            "<DOCUMENT>\n<TYPE>EX-99\n<SEQUENCE>seven\n<TEXT>\nx\n</TEXT>\n</DOCUMENT>\n"
        )))
        doc = filing.documents[0]
        assert doc.sequence is None
        assert doc.overflow["SEQUENCE"] == "seven"
        assert _kinds(filing) == [AnomalyKind.INVALID_VALUE]

    def test_unknown_document_tag(self, nc_parser):
        filing = nc_parser.parse(_make_nc(documents=(
            "<DOCUMENT>\n<TYPE>EX-99\n<PAGES>12\n<TEXT>\nx\n</TEXT>\n</DOCUMENT>\n"
        )))
        assert filing.documents[0].overflow == {"PAGES": "12"}

    def test_document_without_content(self, nc_parser):
        filing = nc_parser.parse(_make_nc(documents="<DOCUMENT>\n<TYPE>EX-99\n</DOCUMENT>\n"))
        assert filing.documents[0].payload is None

    def test_missing_envelope(self, nc_parser):
        filing = nc_parser.parse(_DEFAULT_DOCUMENT.encode() * 2)
        assert len(filing.documents) == 2
        assert AnomalyKind.MISSING_ENVELOPE in _kinds(filing)

    def test_extra_envelope_documents_kept(self, nc_parser):
        raw = _make_nc() + _make_nc(documents=_DEFAULT_DOCUMENT.replace("form8k", "second"))
        filing = nc_parser.parse(raw)
        assert [d.filename for d in filing.documents] == ["form8k.txt", "second.txt"]
        assert AnomalyKind.EXTRA_ENVELOPE in _kinds(filing)

    def test_no_documents_is_fatal(self, nc_parser):
        with pytest.raises(MappingError) as exc_info:
            nc_parser.parse(_make_nc(documents=""))
        assert exc_info.value.element == "DOCUMENT"

    def test_no_structure_is_fatal(self, nc_parser):
        with pytest.raises(MappingError):
            nc_parser.parse(b"just some text\n")

    def test_second_text_container_kept(self, nc_parser):
        filing = nc_parser.parse(_make_nc(documents=(
            "<DOCUMENT>\n<TYPE>EX-99\n<TEXT>\nfirst\n</TEXT>\n<TEXT>\nsecond\n</TEXT>\n</DOCUMENT>\n"
        )))
        doc = filing.documents[0]
        assert doc.payload.text == "first\n"
        assert doc.overflow == {"TEXT": "<TEXT>\nsecond\n</TEXT>"}
        assert _kinds(filing) == [AnomalyKind.DUPLICATE_FIELD]

    def test_pdf_beside_text_kept(self, nc_parser):
        filing = nc_parser.parse(_make_nc(documents=(
            "<DOCUMENT>\n<TYPE>EX-99\n<TEXT>\nsee attached\n</TEXT>\n"
            "<PDF>\nbegin 644 a.pdf\n#0V%T\n`\nend\n</PDF>\n</DOCUMENT>\n"
        )))
        doc = filing.documents[0]
        assert doc.payload.text == "see attached\n"
        assert doc.overflow["PDF"].startswith("<PDF>\nbegin 644 a.pdf\n")
        assert filing.anomalies_of(AnomalyKind.DUPLICATE_FIELD)[0].tag == "PDF"

    def test_lowercase_elements_inside_xml_body(self, nc_parser):
        filing = nc_parser.parse(_make_nc(documents=(
            "<DOCUMENT>\n<TYPE>D\n<TEXT>\n<XML>\n"
            "<document>\n<name>x</name>\n</document>\n"
            "</XML>\n</TEXT>\n</DOCUMENT>\n"
        )))
        assert len(filing.documents) == 1
        assert filing.documents[0].payload.markup == "<document>\n<name>x</name>\n</document>\n"
        assert filing.anomalies == []


class TestOutsideEnvelope:
    def test_header_tags_before_envelope(self, nc_parser):
        filing = nc_parser.parse(b"<PAPER>\n<CONFIRMING-COPY>\n" + _make_nc())
        assert filing.header.paper is True
        assert filing.header.confirming_copy is True
        assert _kinds(filing) == [AnomalyKind.MISSING_ENVELOPE] * 2

    def test_envelope_tags_win_over_outside_duplicates(self, nc_parser):
        filing = nc_parser.parse(_make_nc() + b"<TYPE>10-K\n")
        assert filing.header.filing_type == "8-K"
        assert "10-K" in filing.header.overflow["TYPE"]
        assert _kinds(filing) == [AnomalyKind.MISSING_ENVELOPE, AnomalyKind.DUPLICATE_FIELD]

    def test_stray_text_before_envelope(self, nc_parser):
        filing = nc_parser.parse(b"garbage line\n" + _make_nc())
        assert filing.header.overflow == {"#TEXT": "garbage line\n"}
        assert _kinds(filing) == [AnomalyKind.STRAY_TEXT]
