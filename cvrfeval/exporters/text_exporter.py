"""Export vulnerable CVE IDs as plain text, one per line."""

from __future__ import annotations

from pathlib import Path

from ..constants import STATUS_VULNERABLE
from ..models import RunReport


def export_text(report: RunReport, output_path: Path) -> None:
    """Write CVE IDs vulnerable for at least one matched product, sorted, one per line."""
    cve_ids: set[str] = set()
    for document in report.documents:
        for vuln in document.vulnerabilities:
            if vuln.cve_id and any(p.status == STATUS_VULNERABLE for p in vuln.products):
                cve_ids.add(vuln.cve_id)

    sorted_ids = sorted(cve_ids)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        for cve_id in sorted_ids:
            f.write(cve_id + "\n")
