"""Enumerations used by the CVRF document model.

Each enumeration maps the literal text found in CVRF documents to a variant.
Unrecognized text maps to ``UNKNOWN``; callers treat that as a soft
validation signal, never as a parse failure.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from . import constants as c

logger = logging.getLogger(__name__)


class TextEnum(Enum):
    """Enum whose values are the literal CVRF texts, with UNKNOWN = None."""

    @classmethod
    def from_text(cls, text: Optional[str]):
        if text is None:
            return cls.UNKNOWN
        normalized = text.strip()
        for member in cls:
            if member.value is not None and member.value.lower() == normalized.lower():
                return member
        logger.warning("Unknown %s value '%s'", cls.__name__, text)
        return cls.UNKNOWN

    @property
    def text(self) -> Optional[str]:
        return self.value


class DocStatusType(TextEnum):
    UNKNOWN = None
    DRAFT = "Draft"
    INTERIM = "Interim"
    FINAL = "Final"


class PublisherType(TextEnum):
    UNKNOWN = None
    VENDOR = "Vendor"
    DISCOVERER = "Discoverer"
    COORDINATOR = "Coordinator"
    USER = "User"
    OTHER = "Other"


class NoteType(TextEnum):
    UNKNOWN = None
    GENERAL = "General"
    DETAILS = "Details"
    DESCRIPTION = "Description"
    SUMMARY = "Summary"
    FAQ = "FAQ"
    LEGAL_DISCLAIMER = "Legal Disclaimer"
    OTHER = "Other"


class ReferenceType(TextEnum):
    UNKNOWN = None
    EXTERNAL = "External"
    SELF = "Self"


class BranchType(TextEnum):
    UNKNOWN = None
    VENDOR = "Vendor"
    PRODUCT_FAMILY = "Product Family"
    PRODUCT_NAME = "Product Name"
    PRODUCT_VERSION = "Product Version"
    PATCH_LEVEL = "Patch Level"
    SERVICE_PACK = "Service Pack"
    ARCHITECTURE = "Architecture"
    LANGUAGE = "Language"
    LEGACY = "Legacy"
    SPECIFICATION = "Specification"

    @property
    def is_leaf(self) -> bool:
        # Only product family branches hold sub-branches
        return self is not BranchType.PRODUCT_FAMILY


class RelationshipType(TextEnum):
    UNKNOWN = None
    DEFAULT_COMPONENT_OF = "Default Component Of"
    OPTIONAL_COMPONENT_OF = "Optional Component Of"
    EXTERNAL_COMPONENT_OF = "External Component Of"
    INSTALLED_ON = "Installed On"
    INSTALLED_WITH = "Installed With"


class ProductStatusType(TextEnum):
    UNKNOWN = None
    FIRST_AFFECTED = "First Affected"
    KNOWN_AFFECTED = "Known Affected"
    KNOWN_NOT_AFFECTED = "Known Not Affected"
    FIRST_FIXED = "First Fixed"
    FIXED = "Fixed"
    RECOMMENDED = "Recommended"
    LAST_AFFECTED = "Last Affected"


class InvolvementStatusType(TextEnum):
    UNKNOWN = None
    OPEN = "Open"
    DISPUTED = "Disputed"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CONTACT_ATTEMPTED = "Contact Attempted"
    NOT_CONTACTED = "Not Contacted"


class ThreatType(TextEnum):
    UNKNOWN = None
    IMPACT = "Impact"
    EXPLOIT_STATUS = "Exploit Status"
    TARGET_SET = "Target Set"


class RemediationType(TextEnum):
    UNKNOWN = None
    WORKAROUND = "Workaround"
    MITIGATION = "Mitigation"
    VENDOR_FIX = "Vendor Fix"
    NONE_AVAILABLE = "None Available"
    WILL_NOT_FIX = "Will Not Fix"


class ItemType(Enum):
    """List item kinds: (item tag, container tag or None when unwrapped)."""

    REVISION = (c.TAG_REVISION, "RevisionHistory")
    NOTE = (c.TAG_NOTE, "Notes")
    DOCUMENT_NOTE = (c.TAG_NOTE, "DocumentNotes")
    REFERENCE = (c.TAG_REFERENCE, "References")
    DOCUMENT_REFERENCE = (c.TAG_REFERENCE, "DocumentReferences")
    ACKNOWLEDGMENT = (c.TAG_ACKNOWLEDGMENT, "Acknowledgments")
    PRODUCT_NAME = (c.TAG_PRODUCT_NAME, None)
    BRANCH = (c.TAG_BRANCH, None)
    RELATIONSHIP = (c.TAG_RELATIONSHIP, None)
    GROUP = (c.TAG_GROUP, "ProductGroups")
    VULNERABILITY = (c.TAG_VULNERABILITY, None)
    CWE = (c.TAG_CWE, None)
    INVOLVEMENT = (c.TAG_INVOLVEMENT, "Involvements")
    PRODUCT_STATUS = (c.TAG_STATUS, "ProductStatuses")
    THREAT = (c.TAG_THREAT, "Threats")
    SCORE_SET = (c.TAG_SCORE_SET, "CVSSScoreSets")
    REMEDIATION = (c.TAG_REMEDIATION, "Remediations")

    @property
    def tag(self) -> str:
        return self.value[0]

    @property
    def container(self) -> Optional[str]:
        return self.value[1]
