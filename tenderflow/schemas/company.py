from typing import List, Optional
from datetime import date

from tenderflow.schemas.base import CamelModel


class CompanyFinance(CamelModel):
    year: int
    revenue: Optional[float] = None
    profit: Optional[float] = None
    net_worth: Optional[float] = None
    credit_limit: Optional[float] = None


class CompanyExperience(CamelModel):
    project_title: str
    client_name: Optional[str] = None
    value: Optional[float] = None
    completion_date: Optional[date] = None
    description: Optional[str] = None


class CompanyPersonnel(CamelModel):
    name: str
    position: Optional[str] = None
    years_of_exp: Optional[int] = None
    certifications: Optional[List[str]] = None


class CompanyProfile(CamelModel):
    id: int
    name: str
    tax_code: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    finances: List[CompanyFinance] = []
    experience: List[CompanyExperience] = []
    personnel: List[CompanyPersonnel] = []
