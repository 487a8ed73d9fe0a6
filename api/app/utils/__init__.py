"""
유틸리티 모듈
"""

from .negotiation import (
    JSON_MEDIA_TYPE,
    XML_MEDIA_TYPE,
    preferred_format,
    is_xml_content,
    render_xml,
    parse_xml,
    read_payload,
    render,
    render_error,
)

__all__ = [
    "JSON_MEDIA_TYPE",
    "XML_MEDIA_TYPE",
    "preferred_format",
    "is_xml_content",
    "render_xml",
    "parse_xml",
    "read_payload",
    "render",
    "render_error",
]
