"""Cross-referencing CVRF documents against a target platform CPE."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from . import constants as c
from .enums import ProductStatusType
from .exceptions import CvrfResolutionError
from .models import (
    Branch,
    Model,
    ProductResult,
    ProductTree,
    Vulnerability,
    VulnerabilityResult,
)

logger = logging.getLogger(__name__)


@dataclass
class FilterResult:
    """A model restricted to the products of one target platform."""

    model: Model  # filtered copy; the input model is untouched
    product_id: str  # platform product id the CPE resolved to
    product_ids: list[str] = field(default_factory=list)
    failed_ordinals: list[int] = field(default_factory=list)


def _find_product_id(branches: list[Branch], cpe: str) -> Optional[str]:
    for branch in branches:
        if not branch.is_leaf:
            found = _find_product_id(branch.subbranches, cpe)
            if found is not None:
                return found
        elif branch.name == cpe and branch.product_name is not None:
            if branch.product_name.product_id is not None:
                return branch.product_name.product_id
    return None


def product_id_from_cpe(tree: ProductTree, cpe: str) -> str:
    """Resolve a CPE to the product id of the first branch named exactly ``cpe``.

    Raises:
        CvrfResolutionError: no branch matches
    """
    product_id = _find_product_id(tree.branches, cpe)
    if product_id is None:
        raise CvrfResolutionError(cpe)
    return product_id


def filter_product_tree_by_cpe(tree: ProductTree, cpe: str) -> str:
    """Keep only relationships built on the product ``cpe`` resolves to.

    Mutates ``tree`` and returns the resolved product id.

    Raises:
        CvrfResolutionError: the CPE does not resolve, or no relationship
            references the resolved product
    """
    product_id = product_id_from_cpe(tree, cpe)
    relationships = [r for r in tree.relationships if r.relates_to_ref == product_id]
    if not relationships:
        raise CvrfResolutionError(cpe, product_id)
    tree.relationships = relationships
    return product_id


def matched_product_ids(tree: ProductTree) -> list[str]:
    """Composite product ids of the tree's relationships, in document order."""
    return [
        r.product_name.product_id
        for r in tree.relationships
        if r.product_name is not None and r.product_name.product_id is not None
    ]


def filter_vulnerability_by_product(vuln: Vulnerability, prefixes: tuple[str, ...]) -> bool:
    """Restrict each product status to ids starting with one of ``prefixes``.

    Returns False, leaving every status untouched, when a status would
    end up empty.
    """
    filtered = []
    for status in vuln.product_statuses:
        kept = [pid for pid in status.product_ids if pid.startswith(prefixes)]
        if not kept:
            return False
        filtered.append(kept)
    for status, kept in zip(vuln.product_statuses, filtered):
        status.product_ids = kept
    return True


def filter_model_by_cpe(model: Model, cpe: str) -> FilterResult:
    """Filter a copy of ``model`` down to the products of the target platform.

    A vulnerability whose statuses cannot be filtered is kept unfiltered
    and its ordinal recorded in ``failed_ordinals``.

    Raises:
        CvrfResolutionError: resolution or relationship filtering failed
    """
    filtered = model.clone()
    product_id = filter_product_tree_by_cpe(filtered.tree, cpe)
    product_ids = matched_product_ids(filtered.tree)
    logger.info(
        "Resolved %s to product %s with %d matching products",
        cpe,
        product_id,
        len(product_ids),
    )

    failed = []
    prefixes = (cpe, product_id)
    for vuln in filtered.vulnerabilities:
        if not filter_vulnerability_by_product(vuln, prefixes):
            logger.warning(
                "Vulnerability %d (%s) has a product status with no product for %s; "
                "keeping it unfiltered",
                vuln.ordinal,
                vuln.cve_id,
                cpe,
            )
            failed.append(vuln.ordinal)

    return FilterResult(
        model=filtered,
        product_id=product_id,
        product_ids=product_ids,
        failed_ordinals=failed,
    )


def product_vulnerability_fixed(vuln: Vulnerability, product_id: str) -> bool:
    """True iff ``product_id`` is listed under a Fixed product status."""
    return any(
        status.type is ProductStatusType.FIXED and product_id in status.product_ids
        for status in vuln.product_statuses
    )


def vulnerability_status(vuln: Vulnerability, product_id: str) -> str:
    if product_vulnerability_fixed(vuln, product_id):
        return c.STATUS_FIXED
    return c.STATUS_VULNERABLE


def classify_model(result: FilterResult) -> list[VulnerabilityResult]:
    """Status of every matched product for every vulnerability of a filtered model."""
    results = []
    for vuln in result.model.vulnerabilities:
        products = [
            ProductResult(product_id=pid, status=vulnerability_status(vuln, pid))
            for pid in result.product_ids
        ]
        logger.debug(
            "Vulnerability %d (%s): %s",
            vuln.ordinal,
            vuln.cve_id,
            ", ".join(f"{p.product_id}={p.status}" for p in products),
        )
        results.append(
            VulnerabilityResult(
                ordinal=vuln.ordinal,
                cve_id=vuln.cve_id,
                title=vuln.title,
                products=products,
                filter_failed=vuln.ordinal in result.failed_ordinals,
            )
        )
    return results
