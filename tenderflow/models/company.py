from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from tenderflow.models.base import Base, JSONType, utcnow


class CompanyProfile(Base):
    __tablename__ = "company_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    name = Column(String, nullable=False)
    tax_code = Column(String)
    address = Column(String)
    website = Column(String)
    industry = Column(String)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    finances = relationship(
        "CompanyFinance", back_populates="company", cascade="all, delete-orphan",
        lazy="selectin", order_by="CompanyFinance.year.desc()"
    )
    experience = relationship(
        "CompanyExperience", back_populates="company", cascade="all, delete-orphan",
        lazy="selectin", order_by="CompanyExperience.completion_date.desc()"
    )
    personnel = relationship(
        "CompanyPersonnel", back_populates="company", cascade="all, delete-orphan", lazy="selectin"
    )


class CompanyFinance(Base):
    __tablename__ = "company_finances"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    company_id = Column(Integer, ForeignKey("company_profiles.id", ondelete="CASCADE"), nullable=False)
    year = Column(Integer, nullable=False)
    revenue = Column(Float)
    profit = Column(Float)
    net_worth = Column(Float)
    credit_limit = Column(Float)

    company = relationship("CompanyProfile", back_populates="finances")


class CompanyExperience(Base):
    __tablename__ = "company_experience"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    company_id = Column(Integer, ForeignKey("company_profiles.id", ondelete="CASCADE"), nullable=False)
    project_title = Column(String, nullable=False)
    client_name = Column(String)
    value = Column(Float)
    completion_date = Column(Date)
    description = Column(Text)

    company = relationship("CompanyProfile", back_populates="experience")


class CompanyPersonnel(Base):
    __tablename__ = "company_personnel"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    company_id = Column(Integer, ForeignKey("company_profiles.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    position = Column(String)
    years_of_exp = Column(Integer)
    certifications = Column(JSONType)

    company = relationship("CompanyProfile", back_populates="personnel")
