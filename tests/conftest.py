"""
Shared fixtures for the CVRF evaluation tests.

The sample document is a two-vulnerability bash advisory covering
Red Hat Enterprise Linux 6 and 7. Vulnerability 1 is fixed for every
listed product, vulnerability 2 is known affected.
"""

from pathlib import Path

import pytest

from cvrfeval.models import Model
from cvrfeval.parser import parse_model_markup

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_path() -> Path:
    return FIXTURES / "sample_cvrf.xml"


@pytest.fixture
def sample_bytes(sample_path: Path) -> bytes:
    return sample_path.read_bytes()


@pytest.fixture
def sample_model(sample_bytes: bytes) -> Model:
    """Freshly parsed sample document; safe to mutate."""
    return parse_model_markup(sample_bytes)


@pytest.fixture
def rhel7_cpe() -> str:
    return "cpe:/o:redhat:enterprise_linux:7"


@pytest.fixture
def rhel7_product_ids() -> list:
    """Composite product ids the RHEL 7 CPE resolves to, in document order."""
    return [
        "7Server-7.4.Z:bash-0:4.2.46-28.el7",
        "7Server-7.4.Z:bash-doc-0:4.2.46-28.el7",
    ]


@pytest.fixture
def cvrf_doc():
    """Build a minimal cvrfdoc around a vulnerability body."""

    def _build(vulnerabilities: str = "", product_tree: str = "") -> str:
        return (
            '<?xml version="1.0" encoding="utf-8"?>'
            '<cvrfdoc xmlns="http://www.icasi.org/CVRF/schema/cvrf/1.1">'
            "<DocumentTitle>Test advisory</DocumentTitle>"
            "<DocumentType>Security Advisory</DocumentType>"
            f"{product_tree}{vulnerabilities}"
            "</cvrfdoc>"
        )

    return _build
