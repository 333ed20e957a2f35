"""
CSS export of component classes.
"""

from ..analysis import ProcessedComponent


def component_rule(component: ProcessedComponent) -> str:
    """
    Build the CSS rule for one component.

    Components with a nine-slice get a border-image rule that stretches
    the center and repeats the edges; others get a fixed-size background.
    """
    image = f"url('images/{component.name}.png')"
    nine = component.nine_slice

    if nine is not None:
        body = [
            f"  border-width: {nine.top}px {nine.right}px {nine.bottom}px {nine.left}px;",
            "  border-style: solid;",
            f"  border-image-source: {image};",
            f"  border-image-slice: {nine.to_css_slice()};",
            "  border-image-repeat: round;",
        ]
    else:
        body = [
            f"  width: {component.source.width}px;",
            f"  height: {component.source.height}px;",
            f"  background-image: {image};",
            "  background-repeat: no-repeat;",
        ]

    return "\n".join([f".ui-{component.name} {{", *body, "}"])


def export_to_css(components: list[ProcessedComponent]) -> str:
    """
    Build the stylesheet for the cell components.

    Grid line components and empty cells get no rule.

    Args:
        components: Components in export order.

    Returns:
        Stylesheet text.
    """
    rules = [
        component_rule(c)
        for c in components
        if c.is_cell and not c.is_empty
    ]
    header = "/* Generated UI component styles */"
    return "\n\n".join([header, *rules]) + "\n"
