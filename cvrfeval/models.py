"""Data models for CVRF documents and evaluation runs."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from typing import Optional

from .cvss import CvssImpact
from .enums import (
    BranchType,
    DocStatusType,
    InvolvementStatusType,
    NoteType,
    ProductStatusType,
    PublisherType,
    ReferenceType,
    RelationshipType,
    RemediationType,
    ThreatType,
)


class Entity:
    """Ownership helpers shared by every model class."""

    def clone(self):
        """Deep copy. Nothing is shared with the original."""
        return copy.deepcopy(self)

    def free(self) -> None:
        """Recursively release owned children."""
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, list):
                for item in value:
                    if isinstance(item, Entity):
                        item.free()
                value.clear()
            elif isinstance(value, Entity):
                value.free()


@dataclass
class Revision(Entity):
    number: Optional[str] = None
    date: Optional[str] = None
    description: Optional[str] = None


@dataclass
class Note(Entity):
    ordinal: int = 0
    type: NoteType = NoteType.UNKNOWN
    audience: Optional[str] = None
    title: Optional[str] = None
    contents: Optional[str] = None


@dataclass
class Reference(Entity):
    type: ReferenceType = ReferenceType.UNKNOWN
    url: Optional[str] = None
    description: Optional[str] = None


@dataclass
class Acknowledgment(Entity):
    names: list[str] = field(default_factory=list)
    organizations: list[str] = field(default_factory=list)
    description: Optional[str] = None
    urls: list[str] = field(default_factory=list)


@dataclass
class DocTracking(Entity):
    tracking_id: Optional[str] = None
    aliases: list[str] = field(default_factory=list)
    status: DocStatusType = DocStatusType.UNKNOWN
    version: Optional[str] = None
    revision_history: list[Revision] = field(default_factory=list)
    init_release_date: Optional[str] = None
    cur_release_date: Optional[str] = None
    generator_engine: Optional[str] = None
    generator_date: Optional[str] = None


@dataclass
class DocPublisher(Entity):
    type: PublisherType = PublisherType.UNKNOWN
    vendor_id: Optional[str] = None
    contact_details: Optional[str] = None
    issuing_authority: Optional[str] = None


@dataclass
class Document(Entity):
    """Document-level metadata of a cvrfdoc."""

    distribution: Optional[str] = None
    aggregate_severity: Optional[str] = None
    namespace: Optional[str] = None  # AggregateSeverity Namespace attribute
    tracking: DocTracking = field(default_factory=DocTracking)
    publisher: DocPublisher = field(default_factory=DocPublisher)
    notes: list[Note] = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)
    acknowledgments: list[Acknowledgment] = field(default_factory=list)


@dataclass
class ProductName(Entity):
    """A FullProductName entry. product_id is unique within a document."""

    product_id: Optional[str] = None
    name: Optional[str] = None  # element text: CPE or vendor-specific name
    cpe: Optional[str] = None  # optional CPE attribute


@dataclass
class Branch(Entity):
    """Product tree branch. Product family branches hold sub-branches, all others a product name."""

    type: BranchType = BranchType.UNKNOWN
    name: Optional[str] = None
    product_name: Optional[ProductName] = None
    subbranches: list[Branch] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return self.type.is_leaf


@dataclass
class Relationship(Entity):
    product_reference: Optional[str] = None
    relation_type: RelationshipType = RelationshipType.UNKNOWN
    relates_to_ref: Optional[str] = None
    product_name: Optional[ProductName] = None


@dataclass
class Group(Entity):
    group_id: Optional[str] = None
    description: Optional[str] = None
    product_ids: list[str] = field(default_factory=list)


@dataclass
class ProductTree(Entity):
    product_names: list[ProductName] = field(default_factory=list)
    branches: list[Branch] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)
    groups: list[Group] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.product_names or self.branches or self.relationships or self.groups)


@dataclass
class Cwe(Entity):
    id: Optional[str] = None
    cwe: Optional[str] = None  # element text, e.g. the weakness name


@dataclass
class Involvement(Entity):
    status: InvolvementStatusType = InvolvementStatusType.UNKNOWN
    party: PublisherType = PublisherType.UNKNOWN
    description: Optional[str] = None


@dataclass
class ScoreSet(Entity):
    vector: Optional[str] = None
    impact: CvssImpact = field(default_factory=CvssImpact)
    product_ids: list[str] = field(default_factory=list)


@dataclass
class ProductStatus(Entity):
    type: ProductStatusType = ProductStatusType.UNKNOWN
    product_ids: list[str] = field(default_factory=list)


@dataclass
class Threat(Entity):
    type: ThreatType = ThreatType.UNKNOWN
    date: Optional[str] = None
    description: Optional[str] = None
    product_ids: list[str] = field(default_factory=list)
    group_ids: list[str] = field(default_factory=list)


@dataclass
class Remediation(Entity):
    type: RemediationType = RemediationType.UNKNOWN
    date: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    entitlement: Optional[str] = None
    product_ids: list[str] = field(default_factory=list)
    group_ids: list[str] = field(default_factory=list)


@dataclass
class Vulnerability(Entity):
    """A single Vulnerability. ordinal is its 1-based position as declared in the document."""

    ordinal: int = 0
    title: Optional[str] = None
    system_id: Optional[str] = None
    system_name: Optional[str] = None
    discovery_date: Optional[str] = None
    release_date: Optional[str] = None
    cve_id: Optional[str] = None
    cwes: list[Cwe] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)
    involvements: list[Involvement] = field(default_factory=list)
    score_sets: list[ScoreSet] = field(default_factory=list)
    product_statuses: list[ProductStatus] = field(default_factory=list)
    threats: list[Threat] = field(default_factory=list)
    remediations: list[Remediation] = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)
    acknowledgments: list[Acknowledgment] = field(default_factory=list)


@dataclass
class Model(Entity):
    """One CVRF document."""

    doc_title: Optional[str] = None
    doc_type: Optional[str] = None
    document: Document = field(default_factory=Document)
    tree: ProductTree = field(default_factory=ProductTree)
    vulnerabilities: list[Vulnerability] = field(default_factory=list)

    @property
    def identification(self) -> Optional[str]:
        return self.document.tracking.tracking_id


@dataclass
class Index(Entity):
    """A set of CVRF documents processed together."""

    source_url: Optional[str] = None
    index_file: Optional[str] = None
    models: list[Model] = field(default_factory=list)


@dataclass
class ProductResult:
    """Status of one matched product for one vulnerability."""

    product_id: str
    status: str  # "FIXED" or "VULNERABLE"


@dataclass
class VulnerabilityResult:
    ordinal: int
    cve_id: Optional[str] = None
    title: Optional[str] = None
    products: list[ProductResult] = field(default_factory=list)
    filter_failed: bool = False


@dataclass
class DocumentResult:
    """Outcome of cross-referencing one document against the target CPE."""

    origin: str
    identification: Optional[str] = None
    product_id: Optional[str] = None  # resolved platform product id
    product_ids: list[str] = field(default_factory=list)
    vulnerabilities: list[VulnerabilityResult] = field(default_factory=list)
    definition_ids: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class RunReport:
    """Aggregated result of the entire run."""

    cpe: str = ""
    documents: list[DocumentResult] = field(default_factory=list)
    total_documents: int = 0
    total_succeeded: int = 0
    total_failed: int = 0
    errors: list[str] = field(default_factory=list)
    run_timestamp: str = ""
