"""Recursive-descent parsing of CVRF 1.1 documents into the document model."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Union

from . import constants as c
from .cursor import ElementCursor
from .cvss import CvssCategory
from .enums import (
    BranchType,
    DocStatusType,
    InvolvementStatusType,
    ItemType,
    NoteType,
    ProductStatusType,
    PublisherType,
    ReferenceType,
    RelationshipType,
    RemediationType,
    ThreatType,
)
from .exceptions import CvrfParseError
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

SCORE_TAGS = {
    c.TAG_BASE_SCORE: CvssCategory.BASE,
    c.TAG_ENVIRONMENTAL_SCORE: CvssCategory.ENVIRONMENTAL,
    c.TAG_TEMPORAL_SCORE: CvssCategory.TEMPORAL,
}


def _skip_unexpected(cursor: ElementCursor, child: str, parent: str) -> None:
    logger.debug("Skipping unexpected <%s> in <%s>", child, parent)
    cursor.skip()


def _append_text(cursor: ElementCursor, target: list[str]) -> None:
    text = cursor.text()
    if text is not None:
        target.append(text)


def _parse_ordinal(cursor: ElementCursor, tag: str) -> int:
    text = cursor.attr(c.ATTR_ORDINAL)
    if text is None:
        raise CvrfParseError(tag, "Missing Ordinal attribute")
    try:
        return int(text, 10)
    except ValueError:
        raise CvrfParseError(tag, f"Invalid Ordinal attribute '{text}'") from None


def parse_container(cursor: ElementCursor, item_type: ItemType, target: list) -> None:
    """Parse a container element, appending one entity per item child.

    Children that are not ``item_type``'s tag are skipped. An item that
    fails to parse aborts the whole container.
    """
    container = cursor.name
    parse_item = ITEM_PARSERS[item_type]
    for child in cursor.children():
        if child != item_type.tag:
            _skip_unexpected(cursor, child, container)
            continue
        try:
            target.append(parse_item(cursor))
        except CvrfParseError as e:
            raise CvrfParseError(e.element, f"{e.message} in <{container}>") from e


# Document level


def parse_revision(cursor: ElementCursor) -> Revision:
    revision = Revision()
    for child in cursor.children():
        if child == c.TAG_NUMBER:
            revision.number = cursor.text()
        elif child == c.TAG_DATE:
            revision.date = cursor.text()
        elif child == c.TAG_DESCRIPTION:
            revision.description = cursor.text()
    return revision


def parse_note(cursor: ElementCursor) -> Note:
    if cursor.is_empty:
        raise CvrfParseError(c.TAG_NOTE, "Empty element")
    note = Note(
        ordinal=_parse_ordinal(cursor, c.TAG_NOTE),
        type=NoteType.from_text(cursor.attr(c.ATTR_TYPE)),
        audience=cursor.attr(c.ATTR_AUDIENCE),
        title=cursor.attr(c.ATTR_TITLE),
    )
    note.contents = cursor.text()
    return note


def parse_reference(cursor: ElementCursor) -> Reference:
    reference = Reference(type=ReferenceType.from_text(cursor.attr(c.ATTR_TYPE)))
    for child in cursor.children():
        if child == c.TAG_URL:
            reference.url = cursor.text()
        elif child == c.TAG_DESCRIPTION:
            reference.description = cursor.text()
    return reference


def parse_acknowledgment(cursor: ElementCursor) -> Acknowledgment:
    ack = Acknowledgment()
    for child in cursor.children():
        if child == c.TAG_NAME:
            _append_text(cursor, ack.names)
        elif child == c.TAG_ORGANIZATION:
            _append_text(cursor, ack.organizations)
        elif child == c.TAG_DESCRIPTION:
            ack.description = cursor.text()
        elif child == c.TAG_URL:
            _append_text(cursor, ack.urls)
    return ack


def parse_doc_tracking(cursor: ElementCursor) -> DocTracking:
    if cursor.is_empty:
        raise CvrfParseError(c.TAG_DOCUMENT_TRACKING, "Empty element")
    tracking = DocTracking()
    for child in cursor.children():
        if child == c.TAG_IDENTIFICATION:
            for ident in cursor.children():
                if ident == c.TAG_ID:
                    tracking.tracking_id = cursor.text()
                elif ident == c.TAG_ALIAS:
                    _append_text(cursor, tracking.aliases)
        elif child == c.TAG_STATUS:
            tracking.status = DocStatusType.from_text(cursor.text())
        elif child == c.TAG_VERSION:
            tracking.version = cursor.text()
        elif child == ItemType.REVISION.container:
            parse_container(cursor, ItemType.REVISION, tracking.revision_history)
        elif child == c.TAG_INITIAL_RELEASE_DATE:
            tracking.init_release_date = cursor.text()
        elif child == c.TAG_CURRENT_RELEASE_DATE:
            tracking.cur_release_date = cursor.text()
        elif child == c.TAG_GENERATOR:
            for gen in cursor.children():
                if gen == c.TAG_ENGINE:
                    tracking.generator_engine = cursor.text()
                elif gen == c.TAG_DATE:
                    tracking.generator_date = cursor.text()
        else:
            _skip_unexpected(cursor, child, c.TAG_DOCUMENT_TRACKING)
    return tracking


def parse_doc_publisher(cursor: ElementCursor) -> DocPublisher:
    publisher = DocPublisher(
        type=PublisherType.from_text(cursor.attr(c.ATTR_TYPE)),
        vendor_id=cursor.attr(c.ATTR_VENDOR_ID),
    )
    if publisher.type is PublisherType.UNKNOWN and cursor.is_empty:
        raise CvrfParseError(c.TAG_PUBLISHER, "Empty element without a publisher type")
    for child in cursor.children():
        if child == c.TAG_CONTACT_DETAILS:
            publisher.contact_details = cursor.text()
        elif child == c.TAG_ISSUING_AUTHORITY:
            publisher.issuing_authority = cursor.text()
    return publisher


DOCUMENT_CONTAINERS = {
    ItemType.DOCUMENT_NOTE.container: (ItemType.DOCUMENT_NOTE, "notes"),
    ItemType.DOCUMENT_REFERENCE.container: (ItemType.DOCUMENT_REFERENCE, "references"),
    ItemType.ACKNOWLEDGMENT.container: (ItemType.ACKNOWLEDGMENT, "acknowledgments"),
}

DOCUMENT_TAGS = {
    c.TAG_PUBLISHER,
    c.TAG_DOCUMENT_TRACKING,
    c.TAG_DISTRIBUTION,
    c.TAG_AGGREGATE_SEVERITY,
    *DOCUMENT_CONTAINERS,
}


def parse_document_child(cursor: ElementCursor, child: str, document: Document) -> None:
    """Parse one document-level metadata element of a cvrfdoc into ``document``."""
    if child == c.TAG_PUBLISHER:
        document.publisher = parse_doc_publisher(cursor)
    elif child == c.TAG_DOCUMENT_TRACKING:
        document.tracking = parse_doc_tracking(cursor)
    elif child == c.TAG_DISTRIBUTION:
        document.distribution = cursor.text()
    elif child == c.TAG_AGGREGATE_SEVERITY:
        document.namespace = cursor.attr(c.ATTR_NAMESPACE)
        document.aggregate_severity = cursor.text()
    elif child in DOCUMENT_CONTAINERS:
        item_type, field_name = DOCUMENT_CONTAINERS[child]
        parse_container(cursor, item_type, getattr(document, field_name))
    else:
        _skip_unexpected(cursor, child, c.TAG_CVRF_DOC)


# Product tree


def parse_product_name(cursor: ElementCursor) -> ProductName:
    product = ProductName(
        product_id=cursor.attr(c.ATTR_PRODUCT_ID),
        cpe=cursor.attr(c.ATTR_CPE),
    )
    product.name = cursor.text()
    return product


def parse_branch(cursor: ElementCursor) -> Branch:
    branch = Branch(
        type=BranchType.from_text(cursor.attr(c.ATTR_TYPE)),
        name=cursor.attr(c.ATTR_NAME),
    )
    for child in cursor.children():
        if branch.is_leaf and child == c.TAG_PRODUCT_NAME:
            branch.product_name = parse_product_name(cursor)
        elif not branch.is_leaf and child == c.TAG_BRANCH:
            branch.subbranches.append(parse_branch(cursor))
        else:
            logger.debug(
                "Skipping <%s> in %s branch '%s'", child, branch.type.text, branch.name
            )
    return branch


def parse_relationship(cursor: ElementCursor) -> Relationship:
    relationship = Relationship(
        product_reference=cursor.attr(c.ATTR_PRODUCT_REFERENCE),
        relation_type=RelationshipType.from_text(cursor.attr(c.ATTR_RELATION_TYPE)),
        relates_to_ref=cursor.attr(c.ATTR_RELATES_TO_REF),
    )
    for child in cursor.children():
        if child == c.TAG_PRODUCT_NAME:
            relationship.product_name = parse_product_name(cursor)
    return relationship


def parse_group(cursor: ElementCursor) -> Group:
    group = Group(group_id=cursor.attr(c.ATTR_GROUP_ID))
    for child in cursor.children():
        if child == c.TAG_DESCRIPTION:
            group.description = cursor.text()
        elif child == c.TAG_PRODUCT_ID:
            _append_text(cursor, group.product_ids)
    return group


def parse_product_tree(cursor: ElementCursor) -> ProductTree:
    if cursor.is_empty:
        raise CvrfParseError(c.TAG_PRODUCT_TREE, "Empty element")
    tree = ProductTree()
    for child in cursor.children():
        if child == c.TAG_PRODUCT_NAME:
            tree.product_names.append(parse_product_name(cursor))
        elif child == c.TAG_BRANCH:
            tree.branches.append(parse_branch(cursor))
        elif child == c.TAG_RELATIONSHIP:
            tree.relationships.append(parse_relationship(cursor))
        elif child == ItemType.GROUP.container:
            parse_container(cursor, ItemType.GROUP, tree.groups)
        else:
            _skip_unexpected(cursor, child, c.TAG_PRODUCT_TREE)
    return tree


# Vulnerability


def parse_cwe(cursor: ElementCursor) -> Cwe:
    cwe = Cwe(id=cursor.attr(c.ATTR_ID))
    cwe.cwe = cursor.text()
    return cwe


def parse_involvement(cursor: ElementCursor) -> Involvement:
    involvement = Involvement(
        status=InvolvementStatusType.from_text(cursor.attr(c.ATTR_STATUS)),
        party=PublisherType.from_text(cursor.attr(c.ATTR_PARTY)),
    )
    for child in cursor.children():
        if child == c.TAG_DESCRIPTION:
            involvement.description = cursor.text()
    return involvement


def parse_score_set(cursor: ElementCursor) -> ScoreSet:
    score_set = ScoreSet()
    for child in cursor.children():
        if child in SCORE_TAGS:
            text = cursor.text()
            if not score_set.impact.set_score_text(SCORE_TAGS[child], text):
                logger.warning("Ignoring invalid <%s> value '%s'", child, text)
        elif child == c.TAG_VECTOR:
            score_set.vector = cursor.text()
        elif child == c.TAG_PRODUCT_ID:
            _append_text(cursor, score_set.product_ids)
    return score_set


def parse_product_status(cursor: ElementCursor) -> ProductStatus:
    status = ProductStatus(type=ProductStatusType.from_text(cursor.attr(c.ATTR_TYPE)))
    for child in cursor.children():
        if child == c.TAG_PRODUCT_ID:
            _append_text(cursor, status.product_ids)
    return status


def parse_threat(cursor: ElementCursor) -> Threat:
    threat = Threat(
        type=ThreatType.from_text(cursor.attr(c.ATTR_TYPE)),
        date=cursor.attr(c.ATTR_DATE),
    )
    for child in cursor.children():
        if child == c.TAG_DESCRIPTION:
            threat.description = cursor.text()
        elif child == c.TAG_PRODUCT_ID:
            _append_text(cursor, threat.product_ids)
        elif child == c.TAG_GROUP_ID:
            _append_text(cursor, threat.group_ids)
    return threat


def parse_remediation(cursor: ElementCursor) -> Remediation:
    remediation = Remediation(
        type=RemediationType.from_text(cursor.attr(c.ATTR_TYPE)),
        date=cursor.attr(c.ATTR_DATE),
    )
    for child in cursor.children():
        if child == c.TAG_DESCRIPTION:
            remediation.description = cursor.text()
        elif child == c.TAG_URL:
            remediation.url = cursor.text()
        elif child == c.TAG_ENTITLEMENT:
            remediation.entitlement = cursor.text()
        elif child == c.TAG_PRODUCT_ID:
            _append_text(cursor, remediation.product_ids)
        elif child == c.TAG_GROUP_ID:
            _append_text(cursor, remediation.group_ids)
    return remediation


VULNERABILITY_CONTAINERS = {
    ItemType.NOTE.container: (ItemType.NOTE, "notes"),
    ItemType.INVOLVEMENT.container: (ItemType.INVOLVEMENT, "involvements"),
    ItemType.PRODUCT_STATUS.container: (ItemType.PRODUCT_STATUS, "product_statuses"),
    ItemType.THREAT.container: (ItemType.THREAT, "threats"),
    ItemType.SCORE_SET.container: (ItemType.SCORE_SET, "score_sets"),
    ItemType.REMEDIATION.container: (ItemType.REMEDIATION, "remediations"),
    ItemType.REFERENCE.container: (ItemType.REFERENCE, "references"),
    ItemType.ACKNOWLEDGMENT.container: (ItemType.ACKNOWLEDGMENT, "acknowledgments"),
}


def parse_vulnerability(cursor: ElementCursor) -> Vulnerability:
    vuln = Vulnerability(ordinal=_parse_ordinal(cursor, c.TAG_VULNERABILITY))
    for child in cursor.children():
        if child == c.TAG_TITLE:
            vuln.title = cursor.text()
        elif child == c.TAG_ID:
            vuln.system_name = cursor.attr(c.ATTR_SYSTEM_NAME)
            vuln.system_id = cursor.text()
        elif child == c.TAG_DISCOVERY_DATE:
            vuln.discovery_date = cursor.text()
        elif child == c.TAG_RELEASE_DATE:
            vuln.release_date = cursor.text()
        elif child == c.TAG_CVE:
            vuln.cve_id = cursor.text()
        elif child == c.TAG_CWE:
            vuln.cwes.append(parse_cwe(cursor))
        elif child in VULNERABILITY_CONTAINERS:
            item_type, field_name = VULNERABILITY_CONTAINERS[child]
            parse_container(cursor, item_type, getattr(vuln, field_name))
        else:
            _skip_unexpected(cursor, child, c.TAG_VULNERABILITY)
    return vuln


ITEM_PARSERS: dict[ItemType, Callable[[ElementCursor], object]] = {
    ItemType.REVISION: parse_revision,
    ItemType.NOTE: parse_note,
    ItemType.DOCUMENT_NOTE: parse_note,
    ItemType.REFERENCE: parse_reference,
    ItemType.DOCUMENT_REFERENCE: parse_reference,
    ItemType.ACKNOWLEDGMENT: parse_acknowledgment,
    ItemType.PRODUCT_NAME: parse_product_name,
    ItemType.BRANCH: parse_branch,
    ItemType.RELATIONSHIP: parse_relationship,
    ItemType.GROUP: parse_group,
    ItemType.VULNERABILITY: parse_vulnerability,
    ItemType.CWE: parse_cwe,
    ItemType.INVOLVEMENT: parse_involvement,
    ItemType.PRODUCT_STATUS: parse_product_status,
    ItemType.THREAT: parse_threat,
    ItemType.SCORE_SET: parse_score_set,
    ItemType.REMEDIATION: parse_remediation,
}


# Entry points


def parse_model(cursor: ElementCursor) -> Model:
    """Parse a cvrfdoc element into a Model.

    The cursor must be on the cvrfdoc start event and is left just past
    its end event.
    """
    cursor.expect(c.TAG_CVRF_DOC)
    model = Model()
    for child in cursor.children():
        if child == c.TAG_DOC_TITLE:
            model.doc_title = cursor.text()
        elif child == c.TAG_DOC_TYPE:
            model.doc_type = cursor.text()
        elif child in DOCUMENT_TAGS:
            parse_document_child(cursor, child, model.document)
        elif child == c.TAG_PRODUCT_TREE:
            model.tree = parse_product_tree(cursor)
        elif child == c.TAG_VULNERABILITY:
            model.vulnerabilities.append(parse_vulnerability(cursor))
        else:
            _skip_unexpected(cursor, child, c.TAG_CVRF_DOC)

    if not model.vulnerabilities:
        logger.warning("Document %s declares no vulnerabilities", model.identification)
    logger.debug(
        "Parsed document %s: %d vulnerabilities",
        model.identification,
        len(model.vulnerabilities),
    )
    return model


def parse_index(cursor: ElementCursor, source_url: Optional[str] = None) -> Index:
    """Parse an Index element wrapping one cvrfdoc per model."""
    cursor.expect(c.TAG_INDEX)
    index = Index(source_url=source_url)
    for child in cursor.children():
        if child == c.TAG_CVRF_DOC:
            index.models.append(parse_model(cursor))
        else:
            _skip_unexpected(cursor, child, c.TAG_INDEX)
    return index


def parse_model_markup(markup: Union[str, bytes]) -> Model:
    """Parse a complete CVRF document."""
    return parse_model(ElementCursor.from_markup(markup))


def parse_index_markup(markup: Union[str, bytes], source_url: Optional[str] = None) -> Index:
    """Parse a complete Index document."""
    return parse_index(ElementCursor.from_markup(markup), source_url)
