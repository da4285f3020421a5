"""Export the evaluation run summary as structured JSON."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

from ..constants import STATUS_VULNERABLE
from ..models import RunReport


def export_json(report: RunReport, output_path: Path) -> None:
    """Write per-document, per-vulnerability product statuses and synthesized definition ids."""
    vulnerable_ids: set[str] = set()
    total_vulnerabilities = 0
    for document in report.documents:
        total_vulnerabilities += len(document.vulnerabilities)
        for vuln in document.vulnerabilities:
            if vuln.cve_id and any(p.status == STATUS_VULNERABLE for p in vuln.products):
                vulnerable_ids.add(vuln.cve_id)

    output = {
        "metadata": {
            "generated_at": report.run_timestamp,
            "cpe": report.cpe,
            "total_documents": report.total_documents,
            "total_succeeded": report.total_succeeded,
            "total_failed": report.total_failed,
            "total_vulnerabilities": total_vulnerabilities,
            "vulnerable_cve_ids": len(vulnerable_ids),
        },
        "documents": [],
        "errors": list(report.errors),
    }

    for document in report.documents:
        document_data = asdict(document)
        # Remove None values
        document_data = {k: v for k, v in document_data.items() if v is not None}
        output["documents"].append(document_data)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(output, f, indent=2, ensure_ascii=False)
