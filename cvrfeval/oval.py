"""In-memory OVAL definition model: the subset needed for RPM version checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class OvalOperation(Enum):
    EQUALS = "equals"
    PATTERN_MATCH = "pattern match"
    LESS_THAN = "less than"


class OvalDatatype(Enum):
    STRING = "string"
    EVR_STRING = "evr_string"


class OvalCheck(Enum):
    AT_LEAST_ONE = "at least one"


class OvalExistence(Enum):
    AT_LEAST_ONE_EXISTS = "at_least_one_exists"


class OvalOperator(Enum):
    AND = "AND"


class OvalSubtype(Enum):
    RPMINFO = "rpminfo"


class OvalNodeType(Enum):
    CRITERIA = "criteria"
    CRITERION = "criterion"


@dataclass
class OvalEntity:
    name: str
    value: str
    datatype: OvalDatatype = OvalDatatype.STRING
    operation: OvalOperation = OvalOperation.EQUALS


@dataclass
class OvalObject:
    id: str
    subtype: OvalSubtype = OvalSubtype.RPMINFO
    version: int = 1
    entities: list[OvalEntity] = field(default_factory=list)


@dataclass
class OvalState:
    id: str
    subtype: OvalSubtype = OvalSubtype.RPMINFO
    version: int = 1
    operator: OvalOperator = OvalOperator.AND
    comment: Optional[str] = None
    entities: list[OvalEntity] = field(default_factory=list)


@dataclass
class OvalTest:
    id: str
    subtype: OvalSubtype = OvalSubtype.RPMINFO
    version: int = 1
    check: OvalCheck = OvalCheck.AT_LEAST_ONE
    existence: OvalExistence = OvalExistence.AT_LEAST_ONE_EXISTS
    object: Optional[OvalObject] = None
    states: list[OvalState] = field(default_factory=list)


@dataclass
class CriteriaNode:
    type: OvalNodeType
    operator: OvalOperator = OvalOperator.AND
    comment: Optional[str] = None
    test: Optional[OvalTest] = None  # criterion only
    subnodes: list[CriteriaNode] = field(default_factory=list)  # criteria only


@dataclass
class OvalDefinition:
    id: str
    version: int = 1
    title: Optional[str] = None
    criteria: Optional[CriteriaNode] = None


class OvalDefinitionModel:
    """Store of OVAL definitions, tests, objects and states keyed by id.

    The ``get_new_*`` methods return the entity registered under an id,
    creating it first when the id is new.
    """

    def __init__(self):
        self._definitions: dict[str, OvalDefinition] = {}
        self._tests: dict[str, OvalTest] = {}
        self._objects: dict[str, OvalObject] = {}
        self._states: dict[str, OvalState] = {}

    def get_new_definition(self, definition_id: str) -> OvalDefinition:
        return self._definitions.setdefault(definition_id, OvalDefinition(id=definition_id))

    def get_new_test(self, test_id: str) -> OvalTest:
        return self._tests.setdefault(test_id, OvalTest(id=test_id))

    def get_new_object(self, object_id: str) -> OvalObject:
        return self._objects.setdefault(object_id, OvalObject(id=object_id))

    def get_new_state(self, state_id: str) -> OvalState:
        return self._states.setdefault(state_id, OvalState(id=state_id))

    def get_definition(self, definition_id: str) -> Optional[OvalDefinition]:
        return self._definitions.get(definition_id)

    def get_test(self, test_id: str) -> Optional[OvalTest]:
        return self._tests.get(test_id)

    def get_object(self, object_id: str) -> Optional[OvalObject]:
        return self._objects.get(object_id)

    def get_state(self, state_id: str) -> Optional[OvalState]:
        return self._states.get(state_id)

    @property
    def definitions(self) -> list[OvalDefinition]:
        return list(self._definitions.values())

    @property
    def tests(self) -> list[OvalTest]:
        return list(self._tests.values())

    @property
    def objects(self) -> list[OvalObject]:
        return list(self._objects.values())

    @property
    def states(self) -> list[OvalState]:
        return list(self._states.values())

    @property
    def definition_ids(self) -> list[str]:
        return list(self._definitions)
