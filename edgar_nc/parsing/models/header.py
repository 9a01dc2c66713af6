"""
Pydantic models for the submission header.

Field names follow the EDGAR tag names (``<FILING-DATE>`` → ``filing_date``).
Every model keeps an ``overflow`` mapping of tag name → raw value for tags it
has no field for, so nothing in the source is lost. Fields absent from the
source stay None (or empty), never defaulted.
"""

import calendar
from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MonthDay(BaseModel):
    """Fiscal year end as month and day (EDGAR ``MMDD``)."""
    model_config = ConfigDict(frozen=True)

    month: int
    day:   int

    @model_validator(mode='after')
    def _check_range(self) -> "MonthDay":
        if not 1 <= self.month <= 12:
            raise ValueError(f"month out of range: {self.month}")
        # Leap year so that 0229 is accepted
        if not 1 <= self.day <= calendar.monthrange(2000, self.month)[1]:
            raise ValueError(f"day out of range for month {self.month}: {self.day}")
        return self

    def __str__(self) -> str:
        return f"{self.month:02d}{self.day:02d}"


# ---------------------------------------------------------------------------
# Company
# ---------------------------------------------------------------------------

class CompanyData(BaseModel):
    """``<COMPANY-DATA>`` / ``<OWNER-DATA>``."""
    conformed_name:         Optional[str] = None
    cik:                    Optional[str] = None
    irs_number:             Optional[str] = None   # IRS Employer Identification Number
    state_of_incorporation: Optional[str] = None
    fiscal_year_end:        Optional[MonthDay] = None
    assigned_sic:           Optional[str] = None
    relationship:           Optional[str] = None   # e.g. "DIRECTOR" for reporting owners
    overflow:               Dict[str, str] = Field(default_factory=dict)


class FilingValues(BaseModel):
    """``<FILING-VALUES>``."""
    form_type:   Optional[str] = None
    act:         Optional[str] = None
    file_number: Optional[str] = None   # e.g. "001-36743"
    film_number: Optional[str] = None
    overflow:    Dict[str, str] = Field(default_factory=dict)


class Address(BaseModel):
    """``<BUSINESS-ADDRESS>`` / ``<MAIL-ADDRESS>``."""
    street1:  Optional[str] = None
    street2:  Optional[str] = None
    city:     Optional[str] = None
    state:    Optional[str] = None
    zip:      Optional[str] = None
    phone:    Optional[str] = None
    overflow: Dict[str, str] = Field(default_factory=dict)


class FormerCompany(BaseModel):
    """``<FORMER-COMPANY>`` / ``<FORMER-NAME>``."""
    former_conformed_name: Optional[str] = None
    date_changed:          Optional[date] = None
    overflow:              Dict[str, str] = Field(default_factory=dict)


class Company(BaseModel):
    """A company in any header role (filer, subject company, reporting owner, ...)."""
    company_data:     Optional[CompanyData] = None
    owner_data:       Optional[CompanyData] = None
    filing_values:    List[FilingValues] = Field(default_factory=list)
    business_address: Optional[Address] = None
    mail_address:     Optional[Address] = None
    former_companies: List[FormerCompany] = Field(default_factory=list)
    former_names:     List[FormerCompany] = Field(default_factory=list)
    overflow:         Dict[str, str] = Field(default_factory=dict)

    @property
    def cik(self) -> Optional[str]:
        data = self.company_data or self.owner_data
        return data.cik if data else None

    @property
    def name(self) -> Optional[str]:
        data = self.company_data or self.owner_data
        return data.conformed_name if data else None


# ---------------------------------------------------------------------------
# Investment company series and classes
# ---------------------------------------------------------------------------

class ClassContract(BaseModel):
    class_contract_id:            Optional[str] = None
    class_contract_name:          Optional[str] = None
    class_contract_ticker_symbol: Optional[str] = None
    overflow:                     Dict[str, str] = Field(default_factory=dict)


class Series(BaseModel):
    owner_cik:       Optional[str] = None
    series_id:       Optional[str] = None
    series_name:     Optional[str] = None
    class_contracts: List[ClassContract] = Field(default_factory=list)
    overflow:        Dict[str, str] = Field(default_factory=dict)


class MergerParty(BaseModel):
    """``<ACQUIRING-DATA>`` / ``<TARGET-DATA>``."""
    cik:      Optional[str] = None
    series:   List[Series] = Field(default_factory=list)
    overflow: Dict[str, str] = Field(default_factory=dict)


class Merger(BaseModel):
    acquiring_data: Optional[MergerParty] = None
    target_data:    List[MergerParty] = Field(default_factory=list)
    overflow:       Dict[str, str] = Field(default_factory=dict)


class SeriesAndClassesContractsData(BaseModel):
    """``<SERIES-AND-CLASSES-CONTRACTS-DATA>``."""
    existing_series:       List[Series] = Field(default_factory=list)
    mergers:               List[Merger] = Field(default_factory=list)
    new_series_owner_cik:  Optional[str] = None
    new_series:            List[Series] = Field(default_factory=list)
    new_classes_contracts: List[Series] = Field(default_factory=list)
    overflow:              Dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Submission header
# ---------------------------------------------------------------------------

class SubmissionHeader(BaseModel):
    """
    Submission-level metadata: every envelope child that is not a DOCUMENT.

    The field set depends on the form type; most fields are absent in any
    given filing.
    """
    model_config = ConfigDict(validate_assignment=True)

    # Identity
    accession_number:          Optional[str] = None   # e.g. "0000320193-21-000105"
    filing_type:               Optional[str] = None   # <TYPE>, e.g. "10-K"
    public_document_count:     Optional[int] = None
    previous_accession_number: Optional[str] = None
    items:                     List[str] = Field(default_factory=list)
    group_members:             List[str] = Field(default_factory=list)

    # Dates
    filing_date:                Optional[date] = None
    period:                     Optional[date] = None   # period of report
    period_start:               Optional[date] = None
    date_of_filing_date_change: Optional[date] = None
    effectiveness_date:         Optional[date] = None
    action_date:                Optional[date] = None
    received_date:              Optional[date] = None
    public_rel_date:            Optional[date] = None
    timestamp:                  Optional[datetime] = None
    acceptance_datetime:        Optional[datetime] = None

    # Companies
    filers:             List[Company] = Field(default_factory=list)
    subject_companies:  List[Company] = Field(default_factory=list)
    reporting_owners:   List[Company] = Field(default_factory=list)
    filed_for:          List[Company] = Field(default_factory=list)
    issuer:             Optional[Company] = None
    filed_by:           Optional[Company] = None
    depositor:          Optional[Company] = None
    securitizer:        Optional[Company] = None
    series_and_classes_contracts_data: Optional[SeriesAndClassesContractsData] = None

    # Y/N answers
    is_filer_a_new_registrant:                Optional[bool] = None
    is_filer_a_well_known_seasoned_issuer:    Optional[bool] = None
    filed_pursuant_to_general_instruction_a2: Optional[bool] = None
    is_fund_24f2_eligible:                    Optional[bool] = None
    no_quarterly_activity:                    Optional[bool] = None
    no_annual_activity:                       Optional[bool] = None
    registered_entity:                        Optional[bool] = None

    # Presence flags (empty tags)
    paper:             bool = False
    confirming_copy:   bool = False
    private_to_public: bool = False
    deletion:          bool = False
    correction:        bool = False

    # Asset-backed securities and miscellaneous references
    reference_462b:          Optional[str] = None
    references_429:          Optional[str] = None
    ma_i_individual:         Optional[str] = None
    abs_rule:                Optional[str] = None
    abs_asset_class:         Optional[str] = None
    category:                Optional[str] = None
    depositor_cik:           Optional[str] = None
    sponsor_cik:             Optional[str] = None
    securitizer_cik:         Optional[str] = None
    issuing_entity_cik:      Optional[str] = None
    issuing_entity_name:     Optional[str] = None
    securitizer_file_number: Optional[str] = None
    depositor_file_number:   Optional[str] = None
    public_reference_acc:    Optional[str] = None
    sros:                    Optional[str] = None

    overflow: Dict[str, str] = Field(default_factory=dict)

    @property
    def cik(self) -> Optional[str]:
        """CIK of the first filer (or subject company / issuer when there is no filer)."""
        for company in (*self.filers, *self.subject_companies, self.issuer):
            if company is not None and company.cik:
                return company.cik
        return None

    @property
    def company_name(self) -> Optional[str]:
        for company in (*self.filers, *self.subject_companies, self.issuer):
            if company is not None and company.name:
                return company.name
        return None
