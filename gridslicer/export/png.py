"""
PNG export of component images.
"""

import io

from ..analysis import ProcessedComponent


def component_filename(component: ProcessedComponent) -> str:
    return f"{component.name}.png"


def encode_png(component: ProcessedComponent) -> bytes:
    """Encode a component's cleaned pixels as an RGBA PNG."""
    output = io.BytesIO()
    component.buffer.to_image().save(output, format="PNG")
    return output.getvalue()


def export_to_png(components: list[ProcessedComponent]) -> dict[str, bytes]:
    """
    Encode every component as PNG.

    Args:
        components: Components in export order.

    Returns:
        Mapping of file name to PNG bytes, in component order.
    """
    return {component_filename(c): encode_png(c) for c in components}
