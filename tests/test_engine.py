"""Tests for resolving a CPE against a product tree and classifying vulnerabilities."""

import pytest

from cvrfeval.engine import (
    classify_model,
    filter_model_by_cpe,
    filter_product_tree_by_cpe,
    filter_vulnerability_by_product,
    matched_product_ids,
    product_id_from_cpe,
    product_vulnerability_fixed,
    vulnerability_status,
)
from cvrfeval.enums import ProductStatusType
from cvrfeval.exceptions import CvrfResolutionError
from cvrfeval.models import ProductStatus, Vulnerability
from cvrfeval.parser import parse_model_markup


# =============================================================================
# Product resolution
# =============================================================================


class TestProductResolution:
    def test_resolves_nested_branch(self, sample_model, rhel7_cpe) -> None:
        assert product_id_from_cpe(sample_model.tree, rhel7_cpe) == "7Server-7.4.Z"

    def test_resolves_other_platform(self, sample_model) -> None:
        assert product_id_from_cpe(sample_model.tree, "cpe:/o:redhat:enterprise_linux:6") == "6Server-6.9.Z"

    def test_exact_match_only(self, sample_model) -> None:
        with pytest.raises(CvrfResolutionError) as exc_info:
            product_id_from_cpe(sample_model.tree, "cpe:/o:redhat:enterprise_linux")
        assert exc_info.value.product_id is None

    def test_unknown_cpe(self, sample_model) -> None:
        with pytest.raises(CvrfResolutionError) as exc_info:
            filter_model_by_cpe(sample_model, "cpe:/o:redhat:enterprise_linux:8")
        assert exc_info.value.cpe == "cpe:/o:redhat:enterprise_linux:8"
        assert "cpe:/o:redhat:enterprise_linux:8" in str(exc_info.value)

    def test_no_relationship_for_resolved_product(self, sample_model, rhel7_cpe) -> None:
        tree = sample_model.tree
        tree.relationships = [r for r in tree.relationships if r.relates_to_ref != "7Server-7.4.Z"]
        with pytest.raises(CvrfResolutionError) as exc_info:
            filter_model_by_cpe(sample_model, rhel7_cpe)
        assert exc_info.value.product_id == "7Server-7.4.Z"

    def test_relationship_filter(self, sample_model, rhel7_cpe, rhel7_product_ids) -> None:
        tree = sample_model.tree.clone()
        assert filter_product_tree_by_cpe(tree, rhel7_cpe) == "7Server-7.4.Z"
        assert [r.relates_to_ref for r in tree.relationships] == ["7Server-7.4.Z"] * 2
        assert matched_product_ids(tree) == rhel7_product_ids


# =============================================================================
# Filtering
# =============================================================================


class TestFilterVulnerability:
    def test_prefix_filter_keeps_matching_ids(self) -> None:
        status = ProductStatus(
            type=ProductStatusType.FIXED,
            product_ids=["cpe:/o:redhat:x:7:pkgA", "cpe:/o:redhat:x:7:pkgB", "other:id"],
        )
        vuln = Vulnerability(ordinal=1, product_statuses=[status])
        assert filter_vulnerability_by_product(vuln, ("cpe:/o:redhat:x:7",))
        assert status.product_ids == ["cpe:/o:redhat:x:7:pkgA", "cpe:/o:redhat:x:7:pkgB"]

    def test_empty_status_fails_and_keeps_everything(self) -> None:
        kept = ProductStatus(type=ProductStatusType.FIXED, product_ids=["a:1", "b:1"])
        emptied = ProductStatus(type=ProductStatusType.KNOWN_AFFECTED, product_ids=["b:2"])
        vuln = Vulnerability(ordinal=1, product_statuses=[kept, emptied])
        assert not filter_vulnerability_by_product(vuln, ("a",))
        assert kept.product_ids == ["a:1", "b:1"]
        assert emptied.product_ids == ["b:2"]

    def test_vulnerability_without_statuses(self) -> None:
        assert filter_vulnerability_by_product(Vulnerability(ordinal=1), ("a",))


class TestFilterModel:
    def test_filters_a_copy(self, sample_model, rhel7_cpe, rhel7_product_ids) -> None:
        original = sample_model.clone()
        result = filter_model_by_cpe(sample_model, rhel7_cpe)

        assert sample_model == original
        assert result.model is not sample_model
        assert result.product_id == "7Server-7.4.Z"
        assert result.product_ids == rhel7_product_ids
        assert result.failed_ordinals == []
        for vuln in result.model.vulnerabilities:
            assert vuln.product_statuses[0].product_ids == rhel7_product_ids

    def test_filter_failure_does_not_stop_siblings(self, sample_model, rhel7_cpe, rhel7_product_ids) -> None:
        # A Fixed status that only lists the RHEL 6 package
        sample_model.vulnerabilities[1].product_statuses.append(
            ProductStatus(
                type=ProductStatusType.FIXED,
                product_ids=["6Server-6.9.Z:bash-0:4.1.2-48.el6"],
            )
        )
        result = filter_model_by_cpe(sample_model, rhel7_cpe)

        assert result.failed_ordinals == [2]
        first, second = result.model.vulnerabilities
        assert first.product_statuses[0].product_ids == rhel7_product_ids
        assert len(second.product_statuses[0].product_ids) == 3
        assert second.product_statuses[1].product_ids == ["6Server-6.9.Z:bash-0:4.1.2-48.el6"]

        classified = classify_model(result)
        assert [v.filter_failed for v in classified] == [False, True]
        assert [p.status for p in classified[1].products] == ["VULNERABLE", "VULNERABLE"]

    def test_filter_by_cpe_prefix(self, cvrf_doc) -> None:
        tree = (
            '<ProductTree xmlns="http://www.icasi.org/CVRF/schema/prod/1.1">'
            '<Branch Type="Product Name" Name="cpe:/o:redhat:x:7">'
            '<FullProductName ProductID="rhel-x-7">X 7</FullProductName>'
            "</Branch>"
            '<Relationship ProductReference="pkgA" RelationType="Default Component Of" '
            'RelatesToProductReference="rhel-x-7">'
            '<FullProductName ProductID="cpe:/o:redhat:x:7:pkgA">pkgA</FullProductName>'
            "</Relationship>"
            "</ProductTree>"
        )
        vuln = (
            '<Vulnerability Ordinal="1" xmlns="http://www.icasi.org/CVRF/schema/vuln/1.1">'
            '<ProductStatuses><Status Type="Fixed">'
            "<ProductID>cpe:/o:redhat:x:7:pkgA</ProductID>"
            "<ProductID>cpe:/o:redhat:x:7:pkgB</ProductID>"
            "<ProductID>other:id</ProductID>"
            "</Status></ProductStatuses>"
            "</Vulnerability>"
        )
        model = parse_model_markup(cvrf_doc(vulnerabilities=vuln, product_tree=tree))
        result = filter_model_by_cpe(model, "cpe:/o:redhat:x:7")
        assert result.model.vulnerabilities[0].product_statuses[0].product_ids == [
            "cpe:/o:redhat:x:7:pkgA",
            "cpe:/o:redhat:x:7:pkgB",
        ]


# =============================================================================
# Classification
# =============================================================================


class TestClassification:
    def test_fixed_and_vulnerable(self, sample_model, rhel7_cpe, rhel7_product_ids) -> None:
        result = filter_model_by_cpe(sample_model, rhel7_cpe)
        first, second = result.model.vulnerabilities
        for product_id in rhel7_product_ids:
            assert product_vulnerability_fixed(first, product_id)
            assert vulnerability_status(first, product_id) == "FIXED"
            assert not product_vulnerability_fixed(second, product_id)
            assert vulnerability_status(second, product_id) == "VULNERABLE"

    def test_only_fixed_status_counts(self) -> None:
        vuln = Vulnerability(
            ordinal=1,
            product_statuses=[ProductStatus(type=ProductStatusType.FIRST_FIXED, product_ids=["p"])],
        )
        assert vulnerability_status(vuln, "p") == "VULNERABLE"

    def test_unlisted_product_is_vulnerable(self) -> None:
        assert vulnerability_status(Vulnerability(ordinal=1), "anything") == "VULNERABLE"

    def test_every_pair_gets_exactly_one_status(self, sample_model, rhel7_cpe) -> None:
        result = filter_model_by_cpe(sample_model, rhel7_cpe)
        classified = classify_model(result)
        assert len(classified) == 2
        for vuln in classified:
            assert [p.product_id for p in vuln.products] == result.product_ids
            assert all(p.status in ("FIXED", "VULNERABLE") for p in vuln.products)
        assert classified[0].cve_id == "CVE-2016-0634"
