"""
Pydantic data models for the EDGAR NC parser.

Organized by level:
- filing: Filing, Document, payload variants, Anomaly
- header: SubmissionHeader and the company / series sub-models
"""
from .header import (
    Address,
    ClassContract,
    Company,
    CompanyData,
    FilingValues,
    FormerCompany,
    Merger,
    MergerParty,
    MonthDay,
    Series,
    SeriesAndClassesContractsData,
    SubmissionHeader,
)
from .filing import (
    Anomaly,
    AnomalyKind,
    BinaryPayload,
    Document,
    Filing,
    MarkupPayload,
    Payload,
    TextPayload,
    UnclassifiedPayload,
)

__all__ = [
    'Filing',
    'Document',
    'Anomaly',
    'AnomalyKind',
    'Payload',
    'TextPayload',
    'BinaryPayload',
    'MarkupPayload',
    'UnclassifiedPayload',
    'SubmissionHeader',
    'Company',
    'CompanyData',
    'FilingValues',
    'Address',
    'FormerCompany',
    'MonthDay',
    'Series',
    'ClassContract',
    'Merger',
    'MergerParty',
    'SeriesAndClassesContractsData',
]
