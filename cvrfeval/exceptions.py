"""
CVRF Exceptions

Exception classes raised by the parser and the cross-reference engine.
Each carries the context needed to report the failure to a caller:

- CvrfParseError: structural problem in the XML (missing close tag,
  missing or invalid mandatory attribute, empty mandatory element)
- CvrfResolutionError: the target CPE matches no product in the tree,
  or no relationship references the resolved product
- CvrfDecompositionError: a matched product id is not shaped
  ``<prefix>:<name>-<epoch>:<version>-<release>``

Unknown enumeration text and absent optional elements are not errors.
"""

from typing import Optional


class CvrfError(Exception):
    """Base class for all CVRF processing errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class CvrfParseError(CvrfError):
    """
    Structural parse error tied to the offending element.

    Attributes:
        element: Tag name of the element that could not be parsed
        message: Human-readable error description
    """

    def __init__(self, element: str, message: Optional[str] = None) -> None:
        self.element = element
        super().__init__(message or "Missing or invalid element")

    def __str__(self) -> str:
        return f"Could not parse CVRF document: {self.message} ({self.element})"


class CvrfResolutionError(CvrfError):
    """
    The target platform could not be resolved against a product tree.

    Attributes:
        cpe: Target CPE string
        product_id: Product id the CPE resolved to, when resolution got that far
    """

    def __init__(
        self,
        cpe: str,
        product_id: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        self.cpe = cpe
        self.product_id = product_id
        if message is None:
            if product_id is None:
                message = "No product branch matches the target CPE"
            else:
                message = "No relationship references the resolved product"
        super().__init__(message)

    def __str__(self) -> str:
        if self.product_id:
            return f"{self.message} (cpe: {self.cpe}, product: {self.product_id})"
        return f"{self.message} (cpe: {self.cpe})"


class CvrfDecompositionError(CvrfError):
    """
    A matched product id cannot be split into RPM name and EVR.

    Attributes:
        product_id: The offending product id
    """

    def __init__(self, product_id: str, message: Optional[str] = None) -> None:
        self.product_id = product_id
        super().__init__(message or "Product id has no <name>-<epoch>:<version>-<release> tail")

    def __str__(self) -> str:
        return f"{self.message} (product: {self.product_id})"
