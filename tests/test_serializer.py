"""Tests for serializing the document model back to CVRF XML."""

from lxml import etree

from cvrfeval.constants import CVRF_NS, PROD_NS, VULN_NS, XML_LANG
from cvrfeval.cvss import CvssImpact
from cvrfeval.enums import ItemType, NoteType, RemediationType
from cvrfeval.engine import filter_model_by_cpe
from cvrfeval.models import Index, Model, Note, Remediation, ScoreSet, Vulnerability
from cvrfeval.parser import parse_index_markup, parse_model_markup
from cvrfeval.serializer import (
    index_to_element,
    list_to_elements,
    model_results_to_element,
    model_to_element,
    remediation_to_element,
    to_bytes,
    vulnerability_to_element,
)


def local(element) -> str:
    return etree.QName(element).localname


class TestRoundTrip:
    def test_reparse_is_deep_equal(self, sample_model) -> None:
        reparsed = parse_model_markup(to_bytes(model_to_element(sample_model)))
        assert reparsed == sample_model

    def test_second_round_trip_is_stable(self, sample_model) -> None:
        first = to_bytes(model_to_element(sample_model))
        second = to_bytes(model_to_element(parse_model_markup(first)))
        assert first == second

    def test_index_round_trip(self, sample_model) -> None:
        index = Index(models=[sample_model, sample_model.clone()])
        reparsed = parse_index_markup(to_bytes(index_to_element(index)))
        assert reparsed.models == index.models

    def test_model_without_product_tree(self) -> None:
        model = Model(doc_title="t", vulnerabilities=[Vulnerability(ordinal=1, cve_id="CVE-1")])
        element = model_to_element(model)
        assert [local(e) for e in element] == ["DocumentTitle", "Vulnerability"]
        assert parse_model_markup(to_bytes(element)) == model


class TestNamespaces:
    def test_namespaces_declared_at_owning_elements(self, sample_model) -> None:
        root = model_to_element(sample_model)
        assert etree.QName(root).namespace == CVRF_NS
        tree = root.find(f"{{{PROD_NS}}}ProductTree")
        assert tree is not None
        assert tree.nsmap[None] == PROD_NS
        vulns = root.findall(f"{{{VULN_NS}}}Vulnerability")
        assert len(vulns) == 2
        assert vulns[0].nsmap[None] == VULN_NS

    def test_children_inherit_parent_namespace(self, sample_model) -> None:
        root = model_to_element(sample_model)
        assert root.find(f"{{{CVRF_NS}}}DocumentTracking") is not None
        assert root.find(f"{{{PROD_NS}}}ProductTree/{{{PROD_NS}}}Relationship") is not None
        assert root.find(f"{{{VULN_NS}}}Vulnerability/{{{VULN_NS}}}CVE").text == "CVE-2016-0634"

    def test_language_attributes(self, sample_model) -> None:
        root = model_to_element(sample_model)
        assert root.find(f"{{{CVRF_NS}}}DocumentTitle").get(XML_LANG) == "en"
        assert root.find(f"{{{CVRF_NS}}}DocumentDistribution").get(XML_LANG) == "en"


class TestOmission:
    def test_unset_fields_are_omitted(self) -> None:
        parent = etree.Element("parent")
        remediation_to_element(Remediation(), parent)
        element = parent[0]
        assert element.attrib == {}
        assert len(element) == 0

    def test_unknown_enum_is_not_written(self) -> None:
        parent = etree.Element("parent")
        element = remediation_to_element(Remediation(type=RemediationType.UNKNOWN, url="u"), parent)
        assert "Type" not in element.attrib
        assert [local(e) for e in element] == ["URL"]

    def test_absent_scores_are_omitted(self) -> None:
        parent = etree.Element("parent")
        vuln = Vulnerability(
            ordinal=4,
            score_sets=[ScoreSet(impact=CvssImpact(temporal_score=2.5), product_ids=["p"])],
        )
        element = vulnerability_to_element(vuln, parent)
        assert element.get("Ordinal") == "4"
        score_set = element.find(f"{{{VULN_NS}}}CVSSScoreSets/{{{VULN_NS}}}ScoreSet")
        assert [local(e) for e in score_set] == ["TemporalScore", "ProductID"]
        assert score_set[0].text == "2.5"

    def test_empty_list_writes_no_container(self) -> None:
        parent = etree.Element("parent")
        list_to_elements([], ItemType.NOTE, parent)
        assert len(parent) == 0

    def test_container_wraps_items(self) -> None:
        parent = etree.Element("parent")
        notes = [Note(ordinal=1, type=NoteType.GENERAL, contents="a"), Note(ordinal=2, contents="b")]
        list_to_elements(notes, ItemType.DOCUMENT_NOTE, parent)
        container = parent[0]
        assert container.tag == "DocumentNotes"
        assert [n.get("Ordinal") for n in container] == ["1", "2"]
        assert container[0].get("Type") == "General"
        assert "Type" not in container[1].attrib


class TestResultsDocument:
    def test_results_per_vulnerability(self, sample_model, rhel7_cpe, rhel7_product_ids) -> None:
        result = filter_model_by_cpe(sample_model, rhel7_cpe)
        root = model_results_to_element(result.model, result.product_ids)

        assert root.find(f"{{{PROD_NS}}}ProductTree") is None
        assert root.findtext(f"{{{CVRF_NS}}}DocumentTitle").startswith("Moderate: bash")

        statuses = []
        for vuln in root.findall(f"{{{VULN_NS}}}Vulnerability"):
            results = vuln.findall(f"{{{VULN_NS}}}Results/{{{VULN_NS}}}Result")
            assert [r.findtext(f"{{{VULN_NS}}}ProductID") for r in results] == rhel7_product_ids
            statuses.append([r.findtext(f"{{{VULN_NS}}}VulnerabilityStatus") for r in results])
        assert statuses == [["FIXED", "FIXED"], ["VULNERABLE", "VULNERABLE"]]

    def test_results_document_parses_back(self, sample_model, rhel7_cpe) -> None:
        result = filter_model_by_cpe(sample_model, rhel7_cpe)
        reparsed = parse_model_markup(to_bytes(model_results_to_element(result.model, result.product_ids)))
        assert [v.cve_id for v in reparsed.vulnerabilities] == ["CVE-2016-0634", "CVE-2016-7543"]
        assert reparsed.tree.is_empty
