"""Write CVRF element trees to XML files."""

from __future__ import annotations

from pathlib import Path

from lxml import etree

from ..models import Index, Model
from ..serializer import index_to_element, model_to_element


def write_tree(element: etree._Element, output_path: Path) -> None:
    """Write an element tree as a UTF-8 XML document."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    etree.ElementTree(element).write(
        str(output_path),
        xml_declaration=True,
        encoding="UTF-8",
        pretty_print=True,
    )


def export_model(model: Model, output_path: Path) -> None:
    """Re-serialize a parsed document."""
    write_tree(model_to_element(model), output_path)


def export_index(index: Index, output_path: Path) -> None:
    write_tree(index_to_element(index), output_path)
