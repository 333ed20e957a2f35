"""
JSON export of the grid and component descriptions.
"""

import json
from datetime import datetime, timezone
from typing import Optional

from ..analysis import GridConfig, ProcessedComponent


DOCUMENT_VERSION = "1.0.0"


def component_to_dict(component: ProcessedComponent) -> dict:
    """Flatten one component into its JSON record."""
    return {
        "id": component.id,
        "name": component.name,
        "source": component.source.to_dict(),
        "nineSlice": component.nine_slice.to_dict() if component.nine_slice else None,
        "shapes": [
            {
                "type": shape.type.value,
                "bounds": shape.bounds.to_dict(),
                "color": shape.color.to_css() if shape.color else None,
                "cornerRadius": shape.corner_radius or 0,
            }
            for shape in component.shapes
        ],
        "output": {
            "filename": f"{component.name}.png",
            "cssClass": f".ui-{component.name}",
        },
    }


def build_document(
    grid: GridConfig,
    components: list[ProcessedComponent],
    generated: Optional[datetime] = None,
) -> dict:
    """
    Build the versioned export document.

    Args:
        grid: Detected grid.
        components: Components in export order.
        generated: Timestamp to record (defaults to now, UTC).

    Returns:
        JSON-serializable document.
    """
    generated = generated or datetime.now(timezone.utc)
    return {
        "version": DOCUMENT_VERSION,
        "generated": generated.isoformat().replace("+00:00", "Z"),
        "grid": {
            "rows": grid.rows,
            "columns": grid.columns,
            "horizontalSlices": list(grid.horizontal_slices),
            "verticalSlices": list(grid.vertical_slices),
        },
        "components": [component_to_dict(c) for c in components],
    }


def export_to_json(
    grid: GridConfig,
    components: list[ProcessedComponent],
    generated: Optional[datetime] = None,
) -> str:
    """Serialize the export document with two-space indentation."""
    return json.dumps(build_document(grid, components, generated), indent=2)
