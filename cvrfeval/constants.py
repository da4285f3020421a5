"""Constants and configuration for the CVRF evaluation toolkit."""

# CVRF 1.1 namespaces. Each is declared once, at the element that owns it.
CVRF_NS = "http://www.icasi.org/CVRF/schema/cvrf/1.1"
PROD_NS = "http://www.icasi.org/CVRF/schema/prod/1.1"
VULN_NS = "http://www.icasi.org/CVRF/schema/vuln/1.1"
XML_NS = "http://www.w3.org/XML/1998/namespace"

CVRF_PREFIX = "cvrf"
XML_LANG = f"{{{XML_NS}}}lang"
DEFAULT_LANG = "en"

# Document level
TAG_CVRF_DOC = "cvrfdoc"
TAG_INDEX = "Index"
TAG_DOC_TITLE = "DocumentTitle"
TAG_DOC_TYPE = "DocumentType"
TAG_DISTRIBUTION = "DocumentDistribution"
TAG_AGGREGATE_SEVERITY = "AggregateSeverity"
TAG_PUBLISHER = "DocumentPublisher"
TAG_CONTACT_DETAILS = "ContactDetails"
TAG_ISSUING_AUTHORITY = "IssuingAuthority"
TAG_DOCUMENT_TRACKING = "DocumentTracking"
TAG_IDENTIFICATION = "Identification"
TAG_ALIAS = "Alias"
TAG_VERSION = "Version"
TAG_INITIAL_RELEASE_DATE = "InitialReleaseDate"
TAG_CURRENT_RELEASE_DATE = "CurrentReleaseDate"
TAG_GENERATOR = "Generator"
TAG_ENGINE = "Engine"
TAG_NOTE = "Note"
TAG_REVISION = "Revision"
TAG_REFERENCE = "Reference"
TAG_ACKNOWLEDGMENT = "Acknowledgment"

# Product tree
TAG_PRODUCT_TREE = "ProductTree"
TAG_BRANCH = "Branch"
TAG_PRODUCT_NAME = "FullProductName"
TAG_RELATIONSHIP = "Relationship"
TAG_GROUP = "Group"

# Vulnerability
TAG_VULNERABILITY = "Vulnerability"
TAG_DISCOVERY_DATE = "DiscoveryDate"
TAG_RELEASE_DATE = "ReleaseDate"
TAG_CVE = "CVE"
TAG_CWE = "CWE"
TAG_INVOLVEMENT = "Involvement"
TAG_SCORE_SET = "ScoreSet"
TAG_VECTOR = "Vector"
TAG_BASE_SCORE = "BaseScore"
TAG_ENVIRONMENTAL_SCORE = "EnvironmentalScore"
TAG_TEMPORAL_SCORE = "TemporalScore"
TAG_THREAT = "Threat"
TAG_REMEDIATION = "Remediation"
TAG_ENTITLEMENT = "Entitlement"

# Results document
TAG_RESULTS = "Results"
TAG_RESULT = "Result"
TAG_VULNERABILITY_STATUS = "VulnerabilityStatus"
STATUS_FIXED = "FIXED"
STATUS_VULNERABLE = "VULNERABLE"

# Shared element names
TAG_DATE = "Date"
TAG_DESCRIPTION = "Description"
TAG_GROUP_ID = "GroupID"
TAG_ID = "ID"
TAG_NAME = "Name"
TAG_NUMBER = "Number"
TAG_ORGANIZATION = "Organization"
TAG_PRODUCT_ID = "ProductID"
TAG_STATUS = "Status"
TAG_TITLE = "Title"
TAG_URL = "URL"

# Attributes
ATTR_TYPE = "Type"
ATTR_ORDINAL = "Ordinal"
ATTR_NAME = "Name"
ATTR_DATE = "Date"
ATTR_TITLE = "Title"
ATTR_AUDIENCE = "Audience"
ATTR_NAMESPACE = "Namespace"
ATTR_VENDOR_ID = "VendorID"
ATTR_PRODUCT_ID = "ProductID"
ATTR_CPE = "CPE"
ATTR_GROUP_ID = "GroupID"
ATTR_ID = "ID"
ATTR_SYSTEM_NAME = "SystemName"
ATTR_STATUS = "Status"
ATTR_PARTY = "Party"
ATTR_PRODUCT_REFERENCE = "ProductReference"
ATTR_RELATION_TYPE = "RelationType"
ATTR_RELATES_TO_REF = "RelatesToProductReference"

# OVAL synthesis
OVAL_ID_TEMPLATE = "oval:org.open-scap.unix:{kind}:{index}"
OVAL_KIND_OBJECT = "obj"
OVAL_KIND_STATE = "ste"
OVAL_KIND_TEST = "tst"
OVAL_KIND_DEFINITION = "def"
OVAL_DEFINITION_TITLE = "CVRF RPM Vulnerability Test"
OVAL_CRITERION_COMMENT = "Check for vulnerability of package {name}"

# Index manifests: one document path per line
MANIFEST_COMMENT = "#"

# CLI output files
RESULTS_XML = "results.xml"
RESULTS_JSON = "results.json"
VULNERABLE_TXT = "vulnerable.txt"
