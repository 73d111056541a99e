"""
SQLAlchemy models for the normalized Azure catalog.
"""
from sqlalchemy import (
    Boolean, Column, Integer, String, Text, Numeric, DateTime, Float,
    ForeignKey, Index, UniqueConstraint
)
from sqlalchemy.orm import declared_attr, relationship
from sqlalchemy.sql import func

from azure_catalog.db.database import Base

# Monetary columns hold values rounded to 3 decimals
COST = Numeric(20, 3)


# ============================================================================
# LOCATION & TERMS
# ============================================================================

class Region(Base):
    """Provider region, enriched from bundled reference data."""
    __tablename__ = "catalog_regions"

    id = Column(Integer, primary_key=True, index=True)
    node = Column(String(100), nullable=False)
    name = Column(String(100), nullable=False)
    description = Column(String(255))
    continent_m49 = Column(Integer)
    country_m49 = Column(Integer)
    country_a2 = Column(String(2))
    placement = Column(String(100))
    region_m49 = Column(Integer)
    sub_region = Column(String(100))
    latitude = Column(Float)
    longitude = Column(Float)

    __table_args__ = (
        UniqueConstraint("node", "name", name="uq_region_node_name"),
    )


class PriceTerm(Base):
    """Commitment/billing model: pay-as-you-go, reservations, low priority."""
    __tablename__ = "catalog_price_terms"

    id = Column(Integer, primary_key=True, index=True)
    node = Column(String(100), nullable=False)
    code = Column(String(100), nullable=False)
    name = Column(String(255))
    description = Column(String(255))
    period = Column(Integer, nullable=False, default=0)
    reservation = Column(Boolean, nullable=False, default=False)
    convertible_family = Column(Boolean, nullable=False, default=False)
    convertible_type = Column(Boolean, nullable=False, default=False)
    convertible_location = Column(Boolean, nullable=False, default=False)
    convertible_os = Column(Boolean, nullable=False, default=False)
    ephemeral = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("node", "code", name="uq_term_node_code"),
    )


# ============================================================================
# TYPES
# ============================================================================

class ComputeTypeMixin:
    """Columns shared by instance and database types."""

    id = Column(Integer, primary_key=True, index=True)
    node = Column(String(100), nullable=False)
    code = Column(String(100), nullable=False)
    name = Column(String(255))
    description = Column(Text)
    cpu = Column(Float)
    ram = Column(Integer)
    constant = Column(Boolean)
    auto_scale = Column(Boolean, default=False)
    cpu_rate = Column(String(10))
    ram_rate = Column(String(10))
    network_rate = Column(String(10))
    storage_rate = Column(String(10))


class InstanceType(ComputeTypeMixin, Base):
    """Virtual machine size."""
    __tablename__ = "catalog_instance_types"

    __table_args__ = (
        UniqueConstraint("node", "code", name="uq_instance_type_node_code"),
    )


class DatabaseType(ComputeTypeMixin, Base):
    """Managed database compute tier/generation/vCore combination."""
    __tablename__ = "catalog_database_types"

    __table_args__ = (
        UniqueConstraint("node", "code", name="uq_database_type_node_code"),
    )


class StorageType(Base):
    """Block storage or database storage class."""
    __tablename__ = "catalog_storage_types"

    id = Column(Integer, primary_key=True, index=True)
    node = Column(String(100), nullable=False)
    code = Column(String(100), nullable=False)
    name = Column(String(255))
    description = Column(Text)
    latency = Column(String(10))
    optimized = Column(String(20))
    minimal = Column(Float)
    maximal = Column(Float)
    iops = Column(Integer)
    throughput = Column(Integer)
    instance_type = Column(String(255))
    database_type = Column(String(255))
    engine = Column(String(50))
    availability = Column(Float)
    durability9 = Column(Integer)

    __table_args__ = (
        UniqueConstraint("node", "code", name="uq_storage_type_node_code"),
    )


class SupportType(Base):
    """Support plan."""
    __tablename__ = "catalog_support_types"

    id = Column(Integer, primary_key=True, index=True)
    node = Column(String(100), nullable=False)
    code = Column(String(100), nullable=False)
    name = Column(String(255))
    description = Column(Text)
    access_api = Column(String(20))
    access_chat = Column(String(20))
    access_email = Column(String(20))
    access_phone = Column(String(20))
    slo_critical = Column(Integer)
    slo_urgent = Column(Integer)
    slo_medium = Column(Integer)
    slo_low = Column(Integer)
    commitment = Column(Integer)
    seats = Column(Integer)
    level = Column(String(10))

    __table_args__ = (
        UniqueConstraint("node", "code", name="uq_support_type_node_code"),
    )


# ============================================================================
# PRICES
# ============================================================================

class PriceMixin:
    """Natural code, monthly cost and term/location references."""

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(255), nullable=False, unique=True)
    cost = Column(COST)
    cost_period = Column(COST)

    @declared_attr
    def term_id(cls):
        return Column(Integer, ForeignKey("catalog_price_terms.id"))

    @declared_attr
    def location_id(cls):
        return Column(Integer, ForeignKey("catalog_regions.id"))

    @declared_attr
    def term(cls):
        return relationship("PriceTerm")

    @declared_attr
    def location(cls):
        return relationship("Region")


class InstancePrice(PriceMixin, Base):
    """Monthly cost of a VM size for an OS, software and term in a region."""
    __tablename__ = "catalog_instance_prices"

    type_id = Column(Integer, ForeignKey("catalog_instance_types.id"), nullable=False)
    os = Column(String(20))
    software = Column(String(100))
    license = Column(String(20))
    tenancy = Column(String(20), default="SHARED")
    period = Column(Integer, default=0)

    type = relationship("InstanceType")

    __table_args__ = (
        Index("idx_instance_prices_type", "type_id"),
    )


class DatabasePrice(PriceMixin, Base):
    """Monthly cost of a database type for an engine and term in a region."""
    __tablename__ = "catalog_database_prices"

    type_id = Column(Integer, ForeignKey("catalog_database_types.id"), nullable=False)
    engine = Column(String(50), nullable=False)
    edition = Column(String(50))
    storage_engine = Column(String(50))
    license = Column(String(20))
    period = Column(Integer, default=0)

    type = relationship("DatabaseType")

    __table_args__ = (
        Index("idx_database_prices_engine", "engine"),
    )


class StoragePrice(PriceMixin, Base):
    """Storage cost: fixed monthly, per GB and per million transactions."""
    __tablename__ = "catalog_storage_prices"

    type_id = Column(Integer, ForeignKey("catalog_storage_types.id"), nullable=False)
    cost_gb = Column(COST)
    cost_transaction = Column(COST)

    type = relationship("StorageType")


class SupportPrice(PriceMixin, Base):
    """Support plan cost."""
    __tablename__ = "catalog_support_prices"

    type_id = Column(Integer, ForeignKey("catalog_support_types.id"), nullable=False)
    min = Column(COST)
    limit = Column(COST)
    rate = Column(String(100))

    type = relationship("SupportType")


# ============================================================================
# QUOTE LINES (owned by the quoting engine)
# ============================================================================

class QuoteLineMixin:
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255))
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


class QuoteInstance(QuoteLineMixin, Base):
    __tablename__ = "quote_instances"

    price_id = Column(Integer, ForeignKey("catalog_instance_prices.id"), nullable=False)
    price = relationship("InstancePrice")


class QuoteDatabase(QuoteLineMixin, Base):
    __tablename__ = "quote_databases"

    price_id = Column(Integer, ForeignKey("catalog_database_prices.id"), nullable=False)
    price = relationship("DatabasePrice")


class QuoteStorage(QuoteLineMixin, Base):
    __tablename__ = "quote_storages"

    price_id = Column(Integer, ForeignKey("catalog_storage_prices.id"), nullable=False)
    price = relationship("StoragePrice")


class QuoteSupport(QuoteLineMixin, Base):
    __tablename__ = "quote_supports"

    price_id = Column(Integer, ForeignKey("catalog_support_prices.id"), nullable=False)
    price = relationship("SupportPrice")


# ============================================================================
# AUDIT
# ============================================================================

class CatalogImportLog(Base):
    """One row per category per sync run."""
    __tablename__ = "catalog_import_logs"

    id = Column(Integer, primary_key=True, index=True)
    node = Column(String(100), nullable=False)
    category = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False)
    force = Column(Boolean, nullable=False, default=False)
    records_processed = Column(Integer, default=0)
    records_purged = Column(Integer, default=0)
    error_message = Column(Text)
    started_at = Column(DateTime, nullable=False, server_default=func.now())
    completed_at = Column(DateTime)

    __table_args__ = (
        Index("idx_import_logs_category", "category"),
        Index("idx_import_logs_started", "started_at"),
    )
