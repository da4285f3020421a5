"""Build CVRF XML element trees from the document model."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from lxml import etree

from . import constants as c
from .cvss import CvssCategory
from .engine import vulnerability_status
from .enums import ItemType, TextEnum
from .models import (
    Acknowledgment,
    Branch,
    Cwe,
    DocPublisher,
    DocTracking,
    Document,
    Group,
    Index,
    Involvement,
    Model,
    Note,
    ProductName,
    ProductStatus,
    ProductTree,
    Reference,
    Relationship,
    Remediation,
    Revision,
    ScoreSet,
    Threat,
    Vulnerability,
)

logger = logging.getLogger(__name__)

SCORE_TAGS = (
    (c.TAG_BASE_SCORE, CvssCategory.BASE),
    (c.TAG_ENVIRONMENTAL_SCORE, CvssCategory.ENVIRONMENTAL),
    (c.TAG_TEMPORAL_SCORE, CvssCategory.TEMPORAL),
)


def _child(parent: etree._Element, tag: str) -> etree._Element:
    """Append an element in the parent's namespace."""
    namespace = etree.QName(parent).namespace
    return etree.SubElement(parent, f"{{{namespace}}}{tag}" if namespace else tag)


def _text_child(parent: etree._Element, tag: str, text: Optional[str]) -> Optional[etree._Element]:
    if text is None:
        return None
    element = _child(parent, tag)
    element.text = text
    return element


def _text_children(parent: etree._Element, tag: str, values: Iterable[str]) -> None:
    for value in values:
        _text_child(parent, tag, value)


def _set_attr(element: etree._Element, name: str, value: Optional[str]) -> None:
    if value is not None:
        element.set(name, value)


def _set_enum(element: etree._Element, name: str, value: TextEnum) -> None:
    # UNKNOWN has no text and is never written
    _set_attr(element, name, value.text)


def list_to_elements(items: list, item_type: ItemType, parent: etree._Element) -> None:
    """Serialize a list of entities under its container element.

    Nothing is written for an empty list. Unwrapped item types are
    appended directly to ``parent``.
    """
    if not items:
        return
    container = _child(parent, item_type.container) if item_type.container else parent
    to_element = ITEM_SERIALIZERS[item_type]
    for item in items:
        to_element(item, container)


# Document level


def revision_to_element(revision: Revision, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_REVISION)
    _text_child(element, c.TAG_NUMBER, revision.number)
    _text_child(element, c.TAG_DATE, revision.date)
    _text_child(element, c.TAG_DESCRIPTION, revision.description)
    return element


def note_to_element(note: Note, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_NOTE)
    _set_enum(element, c.ATTR_TYPE, note.type)
    element.set(c.ATTR_ORDINAL, str(note.ordinal))
    _set_attr(element, c.ATTR_TITLE, note.title)
    _set_attr(element, c.ATTR_AUDIENCE, note.audience)
    element.text = note.contents
    return element


def reference_to_element(reference: Reference, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_REFERENCE)
    _set_enum(element, c.ATTR_TYPE, reference.type)
    _text_child(element, c.TAG_URL, reference.url)
    _text_child(element, c.TAG_DESCRIPTION, reference.description)
    return element


def acknowledgment_to_element(ack: Acknowledgment, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_ACKNOWLEDGMENT)
    _text_children(element, c.TAG_NAME, ack.names)
    _text_children(element, c.TAG_ORGANIZATION, ack.organizations)
    _text_child(element, c.TAG_DESCRIPTION, ack.description)
    _text_children(element, c.TAG_URL, ack.urls)
    return element


def doc_tracking_to_element(tracking: DocTracking, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_DOCUMENT_TRACKING)
    if tracking.tracking_id is not None or tracking.aliases:
        identification = _child(element, c.TAG_IDENTIFICATION)
        _text_child(identification, c.TAG_ID, tracking.tracking_id)
        _text_children(identification, c.TAG_ALIAS, tracking.aliases)
    _text_child(element, c.TAG_STATUS, tracking.status.text)
    _text_child(element, c.TAG_VERSION, tracking.version)
    list_to_elements(tracking.revision_history, ItemType.REVISION, element)
    _text_child(element, c.TAG_INITIAL_RELEASE_DATE, tracking.init_release_date)
    _text_child(element, c.TAG_CURRENT_RELEASE_DATE, tracking.cur_release_date)
    if tracking.generator_engine is not None or tracking.generator_date is not None:
        generator = _child(element, c.TAG_GENERATOR)
        _text_child(generator, c.TAG_ENGINE, tracking.generator_engine)
        _text_child(generator, c.TAG_DATE, tracking.generator_date)
    return element


def doc_publisher_to_element(publisher: DocPublisher, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_PUBLISHER)
    _set_enum(element, c.ATTR_TYPE, publisher.type)
    _set_attr(element, c.ATTR_VENDOR_ID, publisher.vendor_id)
    _text_child(element, c.TAG_CONTACT_DETAILS, publisher.contact_details)
    _text_child(element, c.TAG_ISSUING_AUTHORITY, publisher.issuing_authority)
    return element


def document_to_elements(document: Document, parent: etree._Element) -> None:
    """Append the document-level metadata elements to a cvrfdoc element."""
    # Empty publisher and tracking elements do not parse back
    if document.publisher != DocPublisher():
        doc_publisher_to_element(document.publisher, parent)
    if document.tracking != DocTracking():
        doc_tracking_to_element(document.tracking, parent)
    list_to_elements(document.notes, ItemType.DOCUMENT_NOTE, parent)
    distribution = _text_child(parent, c.TAG_DISTRIBUTION, document.distribution)
    if distribution is not None:
        distribution.set(c.XML_LANG, c.DEFAULT_LANG)
    severity = _text_child(parent, c.TAG_AGGREGATE_SEVERITY, document.aggregate_severity)
    if severity is not None:
        _set_attr(severity, c.ATTR_NAMESPACE, document.namespace)
    list_to_elements(document.references, ItemType.DOCUMENT_REFERENCE, parent)
    list_to_elements(document.acknowledgments, ItemType.ACKNOWLEDGMENT, parent)


# Product tree


def product_name_to_element(product: ProductName, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_PRODUCT_NAME)
    _set_attr(element, c.ATTR_PRODUCT_ID, product.product_id)
    _set_attr(element, c.ATTR_CPE, product.cpe)
    element.text = product.name
    return element


def branch_to_element(branch: Branch, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_BRANCH)
    _set_enum(element, c.ATTR_TYPE, branch.type)
    _set_attr(element, c.ATTR_NAME, branch.name)
    if branch.is_leaf:
        if branch.product_name is not None:
            product_name_to_element(branch.product_name, element)
    else:
        list_to_elements(branch.subbranches, ItemType.BRANCH, element)
    return element


def relationship_to_element(relationship: Relationship, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_RELATIONSHIP)
    _set_attr(element, c.ATTR_PRODUCT_REFERENCE, relationship.product_reference)
    _set_enum(element, c.ATTR_RELATION_TYPE, relationship.relation_type)
    _set_attr(element, c.ATTR_RELATES_TO_REF, relationship.relates_to_ref)
    if relationship.product_name is not None:
        product_name_to_element(relationship.product_name, element)
    return element


def group_to_element(group: Group, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_GROUP)
    _set_attr(element, c.ATTR_GROUP_ID, group.group_id)
    _text_child(element, c.TAG_DESCRIPTION, group.description)
    _text_children(element, c.TAG_PRODUCT_ID, group.product_ids)
    return element


def product_tree_to_element(tree: ProductTree, parent: etree._Element) -> etree._Element:
    element = etree.SubElement(
        parent, f"{{{c.PROD_NS}}}{c.TAG_PRODUCT_TREE}", nsmap={None: c.PROD_NS}
    )
    list_to_elements(tree.branches, ItemType.BRANCH, element)
    list_to_elements(tree.product_names, ItemType.PRODUCT_NAME, element)
    list_to_elements(tree.relationships, ItemType.RELATIONSHIP, element)
    list_to_elements(tree.groups, ItemType.GROUP, element)
    return element


# Vulnerability


def cwe_to_element(cwe: Cwe, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_CWE)
    _set_attr(element, c.ATTR_ID, cwe.id)
    element.text = cwe.cwe
    return element


def involvement_to_element(involvement: Involvement, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_INVOLVEMENT)
    _set_enum(element, c.ATTR_PARTY, involvement.party)
    _set_enum(element, c.ATTR_STATUS, involvement.status)
    _text_child(element, c.TAG_DESCRIPTION, involvement.description)
    return element


def score_set_to_element(score_set: ScoreSet, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_SCORE_SET)
    for tag, category in SCORE_TAGS:
        _text_child(element, tag, score_set.impact.score_text(category))
    _text_child(element, c.TAG_VECTOR, score_set.vector)
    _text_children(element, c.TAG_PRODUCT_ID, score_set.product_ids)
    return element


def product_status_to_element(status: ProductStatus, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_STATUS)
    _set_enum(element, c.ATTR_TYPE, status.type)
    _text_children(element, c.TAG_PRODUCT_ID, status.product_ids)
    return element


def threat_to_element(threat: Threat, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_THREAT)
    _set_enum(element, c.ATTR_TYPE, threat.type)
    _set_attr(element, c.ATTR_DATE, threat.date)
    _text_child(element, c.TAG_DESCRIPTION, threat.description)
    _text_children(element, c.TAG_PRODUCT_ID, threat.product_ids)
    _text_children(element, c.TAG_GROUP_ID, threat.group_ids)
    return element


def remediation_to_element(remediation: Remediation, parent: etree._Element) -> etree._Element:
    element = _child(parent, c.TAG_REMEDIATION)
    _set_enum(element, c.ATTR_TYPE, remediation.type)
    _set_attr(element, c.ATTR_DATE, remediation.date)
    description = _text_child(element, c.TAG_DESCRIPTION, remediation.description)
    if description is not None:
        description.set(c.XML_LANG, c.DEFAULT_LANG)
    _text_child(element, c.TAG_URL, remediation.url)
    _text_child(element, c.TAG_ENTITLEMENT, remediation.entitlement)
    _text_children(element, c.TAG_PRODUCT_ID, remediation.product_ids)
    _text_children(element, c.TAG_GROUP_ID, remediation.group_ids)
    return element


def vulnerability_to_element(vuln: Vulnerability, parent: etree._Element) -> etree._Element:
    element = etree.SubElement(
        parent, f"{{{c.VULN_NS}}}{c.TAG_VULNERABILITY}", nsmap={None: c.VULN_NS}
    )
    element.set(c.ATTR_ORDINAL, str(vuln.ordinal))
    _text_child(element, c.TAG_TITLE, vuln.title)
    system_id = _text_child(element, c.TAG_ID, vuln.system_id)
    if system_id is not None:
        _set_attr(system_id, c.ATTR_SYSTEM_NAME, vuln.system_name)
    list_to_elements(vuln.notes, ItemType.NOTE, element)
    _text_child(element, c.TAG_DISCOVERY_DATE, vuln.discovery_date)
    _text_child(element, c.TAG_RELEASE_DATE, vuln.release_date)
    list_to_elements(vuln.involvements, ItemType.INVOLVEMENT, element)
    _text_child(element, c.TAG_CVE, vuln.cve_id)
    list_to_elements(vuln.cwes, ItemType.CWE, element)
    list_to_elements(vuln.product_statuses, ItemType.PRODUCT_STATUS, element)
    list_to_elements(vuln.threats, ItemType.THREAT, element)
    list_to_elements(vuln.score_sets, ItemType.SCORE_SET, element)
    list_to_elements(vuln.remediations, ItemType.REMEDIATION, element)
    list_to_elements(vuln.references, ItemType.REFERENCE, element)
    list_to_elements(vuln.acknowledgments, ItemType.ACKNOWLEDGMENT, element)
    return element


ITEM_SERIALIZERS: dict[ItemType, Callable[[object, etree._Element], etree._Element]] = {
    ItemType.REVISION: revision_to_element,
    ItemType.NOTE: note_to_element,
    ItemType.DOCUMENT_NOTE: note_to_element,
    ItemType.REFERENCE: reference_to_element,
    ItemType.DOCUMENT_REFERENCE: reference_to_element,
    ItemType.ACKNOWLEDGMENT: acknowledgment_to_element,
    ItemType.PRODUCT_NAME: product_name_to_element,
    ItemType.BRANCH: branch_to_element,
    ItemType.RELATIONSHIP: relationship_to_element,
    ItemType.GROUP: group_to_element,
    ItemType.VULNERABILITY: vulnerability_to_element,
    ItemType.CWE: cwe_to_element,
    ItemType.INVOLVEMENT: involvement_to_element,
    ItemType.PRODUCT_STATUS: product_status_to_element,
    ItemType.THREAT: threat_to_element,
    ItemType.SCORE_SET: score_set_to_element,
    ItemType.REMEDIATION: remediation_to_element,
}


# Documents


def _cvrfdoc_element(model: Model, parent: Optional[etree._Element]) -> etree._Element:
    tag = f"{{{c.CVRF_NS}}}{c.TAG_CVRF_DOC}"
    nsmap = {None: c.CVRF_NS, c.CVRF_PREFIX: c.CVRF_NS}
    if parent is None:
        root = etree.Element(tag, nsmap=nsmap)
    else:
        root = etree.SubElement(parent, tag, nsmap=nsmap)
    title = _text_child(root, c.TAG_DOC_TITLE, model.doc_title)
    if title is not None:
        title.set(c.XML_LANG, c.DEFAULT_LANG)
    _text_child(root, c.TAG_DOC_TYPE, model.doc_type)
    document_to_elements(model.document, root)
    return root


def model_to_element(model: Model, parent: Optional[etree._Element] = None) -> etree._Element:
    """Serialize a Model to a cvrfdoc element, optionally appended to ``parent``."""
    root = _cvrfdoc_element(model, parent)
    # An empty ProductTree does not parse back
    if not model.tree.is_empty:
        product_tree_to_element(model.tree, root)
    list_to_elements(model.vulnerabilities, ItemType.VULNERABILITY, root)
    return root


def index_to_element(index: Index) -> etree._Element:
    root = etree.Element(c.TAG_INDEX)
    for model in index.models:
        model_to_element(model, root)
    return root


def model_results_to_element(
    model: Model,
    product_ids: list[str],
    parent: Optional[etree._Element] = None,
) -> etree._Element:
    """Build the results document for a filtered model.

    Each vulnerability gets a Results block with the FIXED/VULNERABLE
    status of every matched product id.
    """
    root = _cvrfdoc_element(model, parent)
    for vuln in model.vulnerabilities:
        element = vulnerability_to_element(vuln, root)
        results = _child(element, c.TAG_RESULTS)
        for product_id in product_ids:
            result = _child(results, c.TAG_RESULT)
            _text_child(result, c.TAG_PRODUCT_ID, product_id)
            _text_child(result, c.TAG_VULNERABILITY_STATUS, vulnerability_status(vuln, product_id))
    logger.debug(
        "Built results for %s: %d vulnerabilities x %d products",
        model.identification,
        len(model.vulnerabilities),
        len(product_ids),
    )
    return root


def to_bytes(element: etree._Element) -> bytes:
    return etree.tostring(element, xml_declaration=True, encoding="UTF-8", pretty_print=True)
