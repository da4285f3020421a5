"""Synthesis of OVAL RPM version checks from matched CVRF product ids."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from . import constants as c
from .enums import BranchType
from .exceptions import CvrfDecompositionError
from .models import Branch, ProductTree
from .oval import (
    CriteriaNode,
    OvalDatatype,
    OvalDefinition,
    OvalDefinitionModel,
    OvalEntity,
    OvalNodeType,
    OvalOperation,
)

logger = logging.getLogger(__name__)

# [<prefix>:]<name>(:|-)<epoch>:<version>-<release>
# e.g. "7Server-7.4.Z:bash-0:4.2.46-28.el7" or "cpe:/a:redhat:pkg:1:bash:0:4.2.46-20.el7"
RPM_PRODUCT_ID_PATTERN = re.compile(
    r"^(?:(?P<prefix>.*):)?(?P<name>[^:]+?)[:-](?P<evr>\d+:[^:-]+-[^:-]+)$"
)


@dataclass
class RpmAttributes:
    rpm_name: str
    evr: str
    full_package_name: str


def oval_id(kind: str, index: int) -> str:
    return c.OVAL_ID_TEMPLATE.format(kind=kind, index=index)


def _find_product_version(branches: list[Branch], product_id: str) -> Optional[Branch]:
    for branch in branches:
        if not branch.is_leaf:
            found = _find_product_version(branch.subbranches, product_id)
            if found is not None:
                return found
        elif branch.type is BranchType.PRODUCT_VERSION and branch.product_name is not None:
            version_id = branch.product_name.product_id
            if version_id and (product_id == version_id or product_id.endswith(":" + version_id)):
                return branch
    return None


def rpm_name_for_product_id(tree: ProductTree, product_id: str) -> Optional[str]:
    """Full package name from the Product Version branch the product id ends with."""
    branch = _find_product_version(tree.branches, product_id)
    if branch is None:
        return None
    return branch.product_name.name


def parse_rpm_attributes(tree: ProductTree, product_id: str) -> RpmAttributes:
    """Split a matched product id into RPM name and EVR.

    Raises:
        CvrfDecompositionError: the id has no ``<name>-<epoch>:<version>-<release>`` tail
    """
    match = RPM_PRODUCT_ID_PATTERN.match(product_id)
    if match is None:
        raise CvrfDecompositionError(product_id)
    name, evr = match.group("name"), match.group("evr")

    full_name = rpm_name_for_product_id(tree, product_id)
    if full_name is None:
        full_name = f"{name}-{evr}"
        logger.warning(
            "No Product Version branch for %s, using %s as package name", product_id, full_name
        )
    return RpmAttributes(rpm_name=name, evr=evr, full_package_name=full_name)


def create_definition(
    def_model: OvalDefinitionModel,
    attributes: RpmAttributes,
    index: int,
) -> OvalDefinition:
    """Add the object, state, test and definition checking for an older package."""
    rpm_object = def_model.get_new_object(oval_id(c.OVAL_KIND_OBJECT, index))
    rpm_object.entities.append(OvalEntity(name="name", value=attributes.rpm_name))

    state = def_model.get_new_state(oval_id(c.OVAL_KIND_STATE, index))
    state.comment = attributes.full_package_name
    state.entities.append(
        OvalEntity(
            name="name",
            value=attributes.rpm_name,
            operation=OvalOperation.PATTERN_MATCH,
        )
    )
    state.entities.append(
        OvalEntity(
            name="evr",
            value=attributes.evr,
            datatype=OvalDatatype.EVR_STRING,
            operation=OvalOperation.LESS_THAN,
        )
    )

    test = def_model.get_new_test(oval_id(c.OVAL_KIND_TEST, index))
    test.object = rpm_object
    test.states.append(state)

    definition = def_model.get_new_definition(oval_id(c.OVAL_KIND_DEFINITION, index))
    definition.title = c.OVAL_DEFINITION_TITLE
    criterion = CriteriaNode(
        type=OvalNodeType.CRITERION,
        comment=c.OVAL_CRITERION_COMMENT.format(name=attributes.rpm_name),
        test=test,
    )
    definition.criteria = CriteriaNode(type=OvalNodeType.CRITERIA, subnodes=[criterion])
    return definition


def construct_definition_model(
    tree: ProductTree,
    product_ids: list[str],
    def_model: Optional[OvalDefinitionModel] = None,
) -> OvalDefinitionModel:
    """Synthesize one definition per matched product id, numbered from 1.

    Every id is decomposed before anything is added, so a
    CvrfDecompositionError leaves ``def_model`` untouched.
    """
    if def_model is None:
        def_model = OvalDefinitionModel()
    attributes = [parse_rpm_attributes(tree, product_id) for product_id in product_ids]
    for index, attrs in enumerate(attributes, 1):
        create_definition(def_model, attrs, index)
    logger.info("Synthesized %d OVAL definitions", len(attributes))
    return def_model
