"""
Content negotiation helpers.

Responses are rendered as JSON or XML depending on the Accept header;
request bodies are read as JSON or XML depending on Content-Type.

XML conventions (symmetric for rendering and parsing):
    - the document element is <root>
    - a list is rendered as repeated children named after the singular
      of the parent tag ("fields" -> <field>), or <item> when the parent
      tag is not plural
    - None is an empty element, booleans are "true"/"false"
"""

import json
import logging
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from lxml import etree

from app.exceptions import BadInputError
from app.services.projection import error_envelope

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"
XML_MEDIA_TYPE = "application/xml"

XML_ROOT = "root"
LIST_ITEM_TAG = "item"

_JSON_RANGES = {"*/*", "application/*", "application/json", "text/*", "text/html"}
_XML_RANGES = {"application/xml", "text/xml"}


# ============================================================
# Accept / Content-Type
# ============================================================

def _media_ranges(header: Optional[str]):
    """Accept 헤더의 미디어 범위 목록 (q=0 제외)"""
    if not header or not header.strip():
        return ["*/*"]

    ranges = []
    for part in header.split(","):
        pieces = [p.strip() for p in part.split(";")]
        media = pieces[0].lower()
        if not media:
            continue
        excluded = any(
            p.replace(" ", "").lower() in ("q=0", "q=0.0", "q=0.00", "q=0.000")
            for p in pieces[1:]
        )
        if not excluded:
            ranges.append(media)
    return ranges


def preferred_format(accept: Optional[str]) -> Optional[str]:
    """
    Pick the response format for an Accept header.

    Returns:
        "json", "xml", or None when neither is acceptable.
    """
    ranges = _media_ranges(accept)
    if any(r in _JSON_RANGES for r in ranges):
        return "json"
    if any(r in _XML_RANGES for r in ranges):
        return "xml"
    return None


def is_xml_content(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    media = content_type.split(";")[0].strip().lower()
    return media in _XML_RANGES


# ============================================================
# XML codec
# ============================================================

def _singular(tag: str) -> str:
    if len(tag) > 1 and tag.endswith("s"):
        return tag[:-1]
    return LIST_ITEM_TAG


def _scalar_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _make_element(parent, tag: str):
    try:
        return etree.SubElement(parent, tag)
    except ValueError:
        # 필드 이름이 XML 이름 규칙에 맞지 않는 경우
        element = etree.SubElement(parent, LIST_ITEM_TAG)
        element.set("name", tag)
        return element


def _fill(element, value: Any) -> None:
    if isinstance(value, Mapping):
        for key, child in value.items():
            _fill(_make_element(element, str(key)), child)
    elif isinstance(value, (list, tuple)):
        child_tag = _singular(element.tag if element.get("name") is None else element.get("name"))
        for item in value:
            _fill(_make_element(element, child_tag), item)
    else:
        element.text = _scalar_text(value)


def render_xml(payload: Any, root: str = XML_ROOT) -> bytes:
    """Render a JSON-like object as an XML document."""
    document = etree.Element(root)
    _fill(document, payload)
    return etree.tostring(document, pretty_print=True, xml_declaration=True, encoding="UTF-8")


def _element_value(element) -> Any:
    # 엔티티 참조, 처리 명령 노드는 건너뜀
    children = [child for child in element if isinstance(child.tag, str)]
    if not children:
        text = (element.text or "").strip()
        return text if text else None

    tags = {child.get("name") or child.tag for child in children}
    own_tag = element.get("name") or element.tag
    if len(tags) == 1 and tags.pop() in (_singular(own_tag), LIST_ITEM_TAG) and \
            all(child.get("name") is None for child in children):
        return [_element_value(child) for child in children]

    result: Dict[str, Any] = {}
    for child in children:
        key = child.get("name") or child.tag
        value = _element_value(child)
        if key in result:
            if not isinstance(result[key], list):
                result[key] = [result[key]]
            result[key].append(value)
        else:
            result[key] = value
    return result


def parse_xml(body: bytes) -> Any:
    """
    Parse an XML request body into a JSON-like object.

    The document element is unwrapped, so <root><type>Number</type></root>
    becomes {"type": "Number"}.

    Raises:
        BadInputError: malformed XML
    """
    parser = etree.XMLParser(
        resolve_entities=False, no_network=True, remove_comments=True, remove_pis=True
    )
    try:
        document = etree.fromstring(body, parser=parser)
    except etree.XMLSyntaxError as e:
        raise BadInputError(f"Malformed XML body: {e}") from e

    value = _element_value(document)
    return value if value is not None else {}


# ============================================================
# Request / Response
# ============================================================

async def read_payload(request: Request) -> Any:
    """
    Read the request body as JSON or XML.

    An empty body reads as {}.

    Raises:
        BadInputError: malformed body
    """
    body = await request.body()
    if not body or not body.strip():
        return {}

    if is_xml_content(request.headers.get("content-type")):
        return parse_xml(body)

    try:
        return json.loads(body)
    except ValueError as e:
        raise BadInputError(f"Malformed JSON body: {e}") from e


def render(
    request: Request,
    payload: Any,
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None
) -> Response:
    """
    Render payload in the format the client accepts.

    Unacceptable Accept headers get a 406 error envelope in JSON.
    """
    fmt = preferred_format(request.headers.get("accept"))
    encoded = jsonable_encoder(payload)

    if fmt == "json":
        return JSONResponse(status_code=status_code, content=encoded, headers=headers)
    if fmt == "xml":
        return Response(
            content=render_xml(encoded),
            status_code=status_code,
            media_type=XML_MEDIA_TYPE,
            headers=headers,
        )

    logger.info(f"Not acceptable: {request.headers.get('accept')}")
    return JSONResponse(status_code=406, content=error_envelope(406, "Not acceptable"))


def render_error(
    request: Request,
    status_code: int,
    message: str,
    headers: Optional[Dict[str, str]] = None
) -> Response:
    """Render an error envelope; XML only when the client asks for XML alone."""
    envelope = error_envelope(status_code, message)
    if preferred_format(request.headers.get("accept")) == "xml":
        return Response(
            content=render_xml(envelope),
            status_code=status_code,
            media_type=XML_MEDIA_TYPE,
            headers=headers,
        )
    return JSONResponse(status_code=status_code, content=envelope, headers=headers)
