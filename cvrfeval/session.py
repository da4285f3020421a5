"""Evaluation sessions: one CVRF document cross-referenced against one platform."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from lxml import etree

from . import constants as c
from .cursor import ElementCursor
from .engine import FilterResult, classify_model, filter_model_by_cpe
from .exceptions import CvrfError, CvrfParseError, CvrfResolutionError
from .exporters.xml_exporter import write_tree
from .models import DocumentResult, Index, Model
from .oval import OvalDefinitionModel
from .parser import parse_model
from .serializer import model_results_to_element
from .source import Source, manifest_entries, resolve_entry
from .synthesis import construct_definition_model

logger = logging.getLogger(__name__)


@dataclass
class IndexEntry:
    """A model of an index with the origin it was loaded from."""

    origin: str
    model: Optional[Model] = None
    error: Optional[str] = None


@dataclass
class IndexResults:
    element: etree._Element
    index: Index
    documents: list[DocumentResult] = field(default_factory=list)


def load_model(source: Source) -> Model:
    """Parse a single CVRF document."""
    model = parse_model(ElementCursor.from_markup(source.raw))
    logger.info(
        "Parsed %s (%s): %d vulnerabilities",
        source.readable_origin,
        model.identification,
        len(model.vulnerabilities),
    )
    return model


def _load_manifest(source: Source) -> tuple[Index, list[IndexEntry]]:
    index = Index(source_url=source.readable_origin, index_file=source.readable_origin)
    if source.path is not None:
        index.source_url = str(source.path.parent)
    entries = []
    for entry in manifest_entries(source):
        path = resolve_entry(source, entry)
        try:
            model = load_model(Source.from_file(path))
        except (OSError, CvrfError) as e:
            logger.error("Could not load %s: %s", path, e)
            entries.append(IndexEntry(origin=str(path), error=str(e)))
            continue
        index.models.append(model)
        entries.append(IndexEntry(origin=str(path), model=model))
    return index, entries


def _load_xml_index(source: Source) -> tuple[Index, list[IndexEntry]]:
    cursor = ElementCursor.from_markup(source.raw)
    cursor.expect(c.TAG_INDEX)
    index = Index(source_url=source.readable_origin, index_file=source.readable_origin)
    entries = []
    for child in cursor.children():
        if child != c.TAG_CVRF_DOC:
            continue
        origin = f"{source.readable_origin}#{len(entries) + 1}"
        depth = cursor.depth
        try:
            model = parse_model(cursor)
        except CvrfParseError as e:
            logger.error("Could not parse %s: %s", origin, e)
            cursor.close(c.TAG_CVRF_DOC, depth)
            entries.append(IndexEntry(origin=origin, error=str(e)))
            continue
        index.models.append(model)
        entries.append(IndexEntry(origin=origin, model=model))
    return index, entries


def load_index_entries(source: Source) -> tuple[Index, list[IndexEntry]]:
    """Load an Index from an XML Index document or a text manifest.

    Each document is loaded on its own; one that fails is reported as an
    entry with an error and its siblings are still loaded.

    Raises:
        CvrfParseError: an XML Index is malformed as a whole
    """
    if source.is_markup:
        index, entries = _load_xml_index(source)
    else:
        index, entries = _load_manifest(source)
    logger.info("Loaded index %s: %d documents", source.readable_origin, len(index.models))
    return index, entries


def load_index(source: Source) -> Index:
    return load_index_entries(source)[0]


class CvrfSession:
    """State of evaluating one document against one target CPE."""

    def __init__(self, source: Source, cpe: str, model: Optional[Model] = None,
                 origin: Optional[str] = None):
        self.source = source
        self.os_name = cpe
        self.model = model
        self.origin = origin or source.readable_origin
        self.filter_result: Optional[FilterResult] = None
        self.def_model = OvalDefinitionModel()

    @classmethod
    def from_source(cls, source: Source, cpe: str) -> CvrfSession:
        return cls(source, cpe, load_model(source))

    @property
    def product_id(self) -> Optional[str]:
        return self.filter_result.product_id if self.filter_result else None

    @property
    def product_ids(self) -> list[str]:
        return self.filter_result.product_ids if self.filter_result else []

    @property
    def filtered_model(self) -> Optional[Model]:
        return self.filter_result.model if self.filter_result else None

    def cross_reference(self) -> FilterResult:
        """Filter the model down to the target platform.

        Raises:
            CvrfResolutionError: the CPE does not resolve in this document
        """
        if self.model is None:
            raise CvrfParseError(c.TAG_CVRF_DOC, "No document loaded")
        self.filter_result = filter_model_by_cpe(self.model, self.os_name)
        return self.filter_result

    def construct_definition_model(self) -> OvalDefinitionModel:
        """Synthesize OVAL definitions for every matched product id.

        Raises:
            CvrfDecompositionError: a matched product id cannot be decomposed
        """
        if self.def_model.definition_ids:
            logger.debug("Definitions for %s already synthesized", self.origin)
            return self.def_model
        if self.filter_result is None:
            self.cross_reference()
        construct_definition_model(self.filtered_model.tree, self.product_ids, self.def_model)
        return self.def_model

    def results_element(self, parent: Optional[etree._Element] = None) -> etree._Element:
        if self.filter_result is None:
            self.cross_reference()
        return model_results_to_element(self.filtered_model, self.product_ids, parent)

    def document_result(self, error: Optional[str] = None) -> DocumentResult:
        result = DocumentResult(
            origin=self.origin,
            identification=self.model.identification if self.model else None,
            error=error,
        )
        if self.filter_result is not None and error is None:
            result.product_id = self.product_id
            result.product_ids = list(self.product_ids)
            result.vulnerabilities = classify_model(self.filter_result)
            result.definition_ids = self.def_model.definition_ids
        return result

    def evaluate(self) -> None:
        """Cross-reference and synthesize; raises on the first failure."""
        self.cross_reference()
        self.construct_definition_model()


def export_results(
    source: Source,
    export_file: Path,
    cpe: str,
    model: Optional[Model] = None,
) -> DocumentResult:
    """Evaluate one document and write its results document to ``export_file``.

    ``model`` is the already parsed document, if the caller has one.
    Nothing is written when parsing, resolution or synthesis fails.

    Raises:
        CvrfError: the document could not be evaluated
    """
    if model is None:
        session = CvrfSession.from_source(source, cpe)
    else:
        session = CvrfSession(source, cpe, model)
    session.evaluate()
    write_tree(session.results_element(), export_file)
    logger.info("Wrote results for %s to %s", session.origin, export_file)
    return session.document_result()


def index_results(source: Source, cpe: str) -> IndexResults:
    """Evaluate every document of an index.

    Documents that fail are skipped and reported; the results element
    holds one cvrfdoc per evaluated document.

    Raises:
        CvrfResolutionError: no document of the index could be evaluated
    """
    index, entries = load_index_entries(source)
    root = etree.Element(c.TAG_INDEX)
    documents = []
    succeeded = 0

    for i, entry in enumerate(entries, 1):
        logger.info("[%d/%d] Evaluating %s", i, len(entries), entry.origin)
        session = CvrfSession(source, cpe, entry.model, entry.origin)
        if entry.model is None:
            documents.append(session.document_result(error=entry.error))
            continue
        try:
            session.evaluate()
        except CvrfError as e:
            logger.error("Skipping %s: %s", entry.origin, e)
            documents.append(session.document_result(error=str(e)))
            continue
        session.results_element(root)
        documents.append(session.document_result())
        succeeded += 1

    if succeeded == 0:
        raise CvrfResolutionError(
            cpe, message="No document in the index could be evaluated for the target CPE"
        )
    logger.info("Evaluated %d of %d documents", succeeded, len(entries))
    return IndexResults(element=root, index=index, documents=documents)
