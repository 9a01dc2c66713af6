"""EDGAR NC submission archive parser."""

from edgar_nc.parsing import NcFilingParser, parse, Filing, NcParseError

__version__ = "0.1.0"

__all__ = ["NcFilingParser", "parse", "Filing", "NcParseError", "__version__"]
