import base64
import binascii

from app.relay.exceptions import InvalidAttachmentError

_BOM = "\ufeff"


def decode_xml(xml_field: str) -> str:
    """Return XML text from a base64 or plain-text field.

    Raises:
        InvalidAttachmentError: if base64 content does not decode to UTF-8, or
            the result does not look like XML.
    """
    compact = "".join(xml_field.split())
    try:
        raw = base64.b64decode(compact, validate=True) if compact else b""
    except (binascii.Error, ValueError):
        raw = None

    if raw:
        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidAttachmentError("xml base64 content is not UTF-8 text") from exc
    else:
        content = xml_field

    content = content.lstrip(_BOM)
    if not content.strip().startswith("<"):
        raise InvalidAttachmentError("xml content does not look like an XML document")
    return content
