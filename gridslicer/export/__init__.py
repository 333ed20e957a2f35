"""
Exporters for analysis results.
"""

from .png import component_filename, encode_png, export_to_png
from .json_export import DOCUMENT_VERSION, build_document, export_to_json
from .css import component_rule, export_to_css
from .tar import build_bundle_files, export_to_tar, write_bundle

__all__ = [
    "encode_png",
    "export_to_png",
    "component_filename",
    "DOCUMENT_VERSION",
    "build_document",
    "export_to_json",
    "component_rule",
    "export_to_css",
    "build_bundle_files",
    "export_to_tar",
    "write_bundle",
]
