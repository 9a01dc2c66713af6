"""
Lightweight fixtures for unit tests - NO real data dependencies.
All fixtures use synthetic NC submissions built in memory.
"""

import pytest


# =============================================================================
# Submission Fixtures
# =============================================================================

@pytest.fixture
def sample_nc_bytes() -> bytes:
    """Explicitly closed submission: tagged header, one HTML and one XBRL document."""
    return (
        b"<SUBMISSION>\n"
        b"<ACCESSION-NUMBER>0000320193-21-000105\n"
        b"<TYPE>10-K\n"
        b"<PUBLIC-DOCUMENT-COUNT>2\n"
        b"<PERIOD>20210925\n"
        b"<FILING-DATE>20211029\n"
        b"<FILER>\n"
        b"<COMPANY-DATA>\n"
        b"<CONFORMED-NAME>Apple Inc.\n"
        b"<CIK>0000320193\n"
        b"<ASSIGNED-SIC>3571\n"
        b"<IRS-NUMBER>942404110\n"
        b"<STATE-OF-INCORPORATION>CA\n"
        b"<FISCAL-YEAR-END>0925\n"
        b"</COMPANY-DATA>\n"
        b"<FILING-VALUES>\n"
        b"<FORM-TYPE>10-K\n"
        b"<ACT>34\n"
        b"<FILE-NUMBER>001-36743\n"
        b"<FILM-NUMBER>211359752\n"
        b"</FILING-VALUES>\n"
        b"<BUSINESS-ADDRESS>\n"
        b"<STREET1>ONE APPLE PARK WAY\n"
        b"<CITY>CUPERTINO\n"
        b"<STATE>CA\n"
        b"<ZIP>95014\n"
        b"<PHONE>(408) 996-1010\n"
        b"</BUSINESS-ADDRESS>\n"
        b"</FILER>\n"
        b"<DOCUMENT>\n"
        b"<TYPE>10-K\n"
        b"<SEQUENCE>1\n"
        b"<FILENAME>aapl-20210925.htm\n"
        b"<DESCRIPTION>10-K\n"
        b"<TEXT>\n"
        b"<html><body><p>Annual report</p></body></html>\n"
        b"</TEXT>\n"
        b"</DOCUMENT>\n"
        b"<DOCUMENT>\n"
        b"<TYPE>EX-101.INS\n"
        b"<SEQUENCE>2\n"
        b"<FILENAME>aapl-20210925_htm.xml\n"
        b"<DESCRIPTION>XBRL INSTANCE DOCUMENT\n"
        b"<TEXT>\n"
        b"<XBRL>\n"
        b"<xbrl><dei:DocumentType>10-K</dei:DocumentType></xbrl>\n"
        b"</XBRL>\n"
        b"</TEXT>\n"
        b"</DOCUMENT>\n"
        b"</SUBMISSION>\n"
    )


@pytest.fixture
def sample_sec_header_text() -> str:
    """SEC-HEADER block as found in dissemination .txt files."""
    return (
        "0000123456-22-000001.hdr.sgml : 20220215\n"
        "<ACCEPTANCE-DATETIME>20220214173005\n"
        "ACCESSION NUMBER:\t\t0000123456-22-000001\n"
        "CONFORMED SUBMISSION TYPE:\t10-K\n"
        "PUBLIC DOCUMENT COUNT:\t\t1\n"
        "CONFORMED PERIOD OF REPORT:\t20211231\n"
        "FILED AS OF DATE:\t\t20220215\n"
        "\n"
        "FILER:\n"
        "\n"
        "\tCOMPANY DATA:\t\n"
        "\t\tCOMPANY CONFORMED NAME:\t\t\tACME CORP\n"
        "\t\tCENTRAL INDEX KEY:\t\t\t0000123456\n"
        "\t\tSTANDARD INDUSTRIAL CLASSIFICATION:\tCOMPUTER HARDWARE [3577]\n"
        "\t\tIRS NUMBER:\t\t\t\t123456789\n"
        "\t\tSTATE OF INCORPORATION:\t\t\tDE\n"
        "\t\tFISCAL YEAR END:\t\t\t1231\n"
        "\n"
        "\tFILING VALUES:\n"
        "\t\tFORM TYPE:\t\t10-K\n"
        "\t\tSEC ACT:\t\t1934 Act\n"
        "\t\tSEC FILE NUMBER:\t001-12345\n"
        "\n"
        "\tBUSINESS ADDRESS:\t\n"
        "\t\tSTREET 1:\t\t1 MAIN ST\n"
        "\t\tCITY:\t\t\tSPRINGFIELD\n"
        "\t\tBUSINESS PHONE:\t\t555-0100\n"
        "\n"
        "\tFORMER COMPANY:\t\n"
        "\t\tFORMER CONFORMED NAME:\tACME INDUSTRIES\n"
        "\t\tDATE OF NAME CHANGE:\t19990101\n"
    )
