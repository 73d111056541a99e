"""
Unit tests for SKU and offer decoding.
"""
import pytest

from azure_catalog.catalog.decoder import (
    DATABASE_ENGINES,
    SQL_COMPUTE_RULES,
    SQL_STORAGE_RULES,
    STD_COMPUTE_RULES,
    STD_STORAGE_RULES,
    ComputeRole,
    RuleTable,
    StorageRole,
    decode_database_offer,
    decode_software,
    decode_vm_offer,
    find_os,
    is_ignored_database_sku,
    split_component,
)


class TestRuleTable:
    """Ordered first-match decoding."""

    def test_first_match_wins(self):
        table = RuleTable([
            ("a-.*", lambda m: StorageRole(("first",))),
            ("a-b", lambda m: StorageRole(("second",))),
        ])

        assert table.decode("a-b") == StorageRole(("first",))

    def test_no_match(self):
        assert STD_COMPUTE_RULES.decode("unknown") is None

    def test_full_match_only(self):
        assert STD_STORAGE_RULES.decode("basic-storage-extra") is None


class TestStandardEngines:
    """MySQL, MariaDB and PostgreSQL tables."""

    @pytest.mark.parametrize("offer_id, expected", [
        ("basic-compute-g4-1", ComputeRole("basic", 4, 1)),
        ("generalpurpose-compute-g5-32", ComputeRole("gp", 5, 32)),
        ("memoryoptimized-compute-g5-16", ComputeRole("mo", 5, 16)),
    ])
    def test_compute(self, offer_id, expected):
        assert STD_COMPUTE_RULES.decode(offer_id) == expected

    @pytest.mark.parametrize("offer_id, codes", [
        ("basic-storage", ("db-standard",)),
        ("generalpurpose-storage", ("db-premium",)),
        ("memoryoptimized-storage", ("db-premium",)),
        ("generalpurpose-backup-lrs", ("db-backup-lrs",)),
        ("basic-backup-grs", ("db-backup-grs",)),
    ])
    def test_storage(self, offer_id, codes):
        assert STD_STORAGE_RULES.decode(offer_id) == StorageRole(codes)

    def test_type_code(self):
        assert ComputeRole("basic", 4, 1).type_code() == "basic-gen4-1"


class TestSqlServer:
    """SQL Server vCore table."""

    def test_compute_with_suffix(self):
        role = SQL_COMPUTE_RULES.decode("elastic-vcore-business-critical-gen5-8-zone-redundancy")

        assert role == ComputeRole("sql-bc", 5, 8)
        assert role.type_code() == "sql-bc-gen5-8"

    def test_general_purpose(self):
        assert SQL_COMPUTE_RULES.decode("elastic-vcore-general-purpose-gen4-2") == ComputeRole("sql-gp", 4, 2)

    def test_business_critical_storage_prices_four_types(self):
        role = SQL_STORAGE_RULES.decode("elastic-vcore-business-critical-storage")

        assert role.type_codes == ("sql-bc-4", "sql-bc-5", "sql-bc-5-8", "sql-bc-5-24")

    def test_backups(self):
        assert SQL_STORAGE_RULES.decode("elastic-vcore-backup").type_codes == ("db-backup-lrs",)
        assert SQL_STORAGE_RULES.decode(
            "managed-instance-pitr-backup-storage-ra-grs"
        ).type_codes == ("db-backup-grs",)


class TestDatabaseOffers:
    """Role selection by dimension."""

    def test_per_gb_offer_uses_storage_rules(self):
        mysql = DATABASE_ENGINES[0]

        assert decode_database_offer(mysql, "basic-storage", {"pergb": {}}) == StorageRole(("db-standard",))
        assert decode_database_offer(mysql, "basic-compute-g4-1", {"pergb": {}}) is None

    def test_hourly_offer_uses_compute_rules(self):
        mysql = DATABASE_ENGINES[0]

        assert decode_database_offer(mysql, "basic-compute-g4-1", {"perhour": {}}) == ComputeRole("basic", 4, 1)
        assert decode_database_offer(mysql, "basic-storage", {"perhour": {}}) is None

    def test_engine_order(self):
        assert [e.engine for e in DATABASE_ENGINES] == ["MYSQL", "MARIADB", "POSTGRESQL", "SQL SERVER"]
        assert DATABASE_ENGINES[-1].edition == "ENTERPRISE"
        assert DATABASE_ENGINES[-1].storage_engine == "SQL SERVER"

    @pytest.mark.parametrize("sku, ignored", [
        ("basic-dtu-5", True),
        ("generalpurpose-compute-g5-2", False),
        ("sql-software-enterprise", True),
        ("hyperscale-gen5-2", True),
        ("managed-vcore-gp-gen5-2", True),
        ("elastic-vcore-general-purpose-gen5-2", False),
    ])
    def test_ignored_skus(self, sku, ignored):
        assert is_ignored_database_sku(sku) is ignored


class TestComputeDecoding:
    """Virtual machine offers and SKUs."""

    def test_standard_offer(self):
        key = decode_vm_offer("linux-ds4v2-standard")

        assert key.os == "LINUX"
        assert key.type_code == "ds4v2"
        assert key.basic is False
        assert key.low_priority is False

    def test_basic_offer(self):
        assert decode_vm_offer("windows-a1-basic").type_code == "a1-b"

    def test_low_priority_basic_offer(self):
        key = decode_vm_offer("windows-a1-basic-lowpriority")

        assert key.low_priority is True
        assert key.type_code == "a1-b"

    def test_os_aliases(self):
        assert find_os(["redhat", "d2v3"]) == "RHEL"
        assert find_os(["sles", "d2v3"]) == "SUSE"
        assert find_os(["sql", "standard"]) is None

    def test_software_most_specific_prefix(self):
        software = {"sql": "SQL", "sql-standard": "SQL Standard"}

        assert decode_software("sql-standard-ds4v2", software) == "SQL STANDARD"
        assert decode_software("sql-web-ds4v2", software) == "SQL"
        assert decode_software("linux-ds4v2", software) is None


class TestComponents:
    def test_split(self):
        assert split_component("linux-ds4v2-standard--perhour") == ("linux-ds4v2-standard", "perhour")

    @pytest.mark.parametrize("component", ["no-separator", "a--b--c"])
    def test_malformed(self, component):
        assert split_component(component) is None
