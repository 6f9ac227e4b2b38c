"""Generic conversion between XML text and plain ``dict`` trees.

A thin layer over :mod:`lxml.etree` that knows nothing about OpenLyrics.
All document-specific behaviour comes in through :class:`ParseOptions` and
:class:`BuildOptions`.

Tree shape
----------

* An element with neither attributes nor child elements becomes its text
  (``""`` when empty).
* Any other element becomes a ``dict``:

  - attributes under their name prefixed with ``@`` (``xml:lang`` keeps its
    prefix: ``@xml:lang``),
  - child elements under their local name; repeated names collect into a
    list, and paths listed in ``always_array`` are lists even when they
    occur once,
  - non-blank text under ``#text``.

* The document root is wrapped in a single-key dict: ``{"song": {...}}``.

Paths are dotted local names from the root, e.g. ``song.lyrics.verse``.

Building accepts the same shape plus ``?xml`` (declaration attributes) and
``?<target>`` keys for processing instructions written before the root.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

from lxml import etree

from .exceptions import BuildError, ParseError

logger = logging.getLogger(__name__)

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"

# (tag name, text value, dotted path) -> replacement text, or None to keep it
ValueProcessor = Callable[[str, str, str], Optional[str]]


def keep_value(tag: str, value: str, path: str) -> str | None:
    return None


@dataclass(frozen=True)
class ParseOptions:
    always_array: frozenset[str] = frozenset()
    stop_nodes: frozenset[str] = frozenset()  # raw inner markup is kept as text
    value_processor: ValueProcessor = keep_value
    attribute_prefix: str = "@"
    text_key: str = "#text"
    trim_values: bool = True


@dataclass(frozen=True)
class BuildOptions:
    attribute_prefix: str = "@"
    text_key: str = "#text"
    pretty: bool = True
    unpaired_tags: frozenset[str] = frozenset()  # empty ones self-close
    markup_paths: frozenset[str] = frozenset()  # text inserted as an XML fragment


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse(text: str, options: ParseOptions | None = None) -> dict[str, Any]:
    """Parse XML *text* into a tree.

    Raises :class:`~openlyrics_xml.exceptions.ParseError` if the text is not
    well-formed.
    """
    options = options or ParseOptions()
    stop_tags = {path.rsplit(".", 1)[-1] for path in options.stop_nodes}
    source = _shield_stop_nodes(text, stop_tags)

    # The text is already decoded; ignore whatever the declaration claims.
    parser = etree.XMLParser(encoding="utf-8", resolve_entities=False)
    try:
        root = etree.fromstring(source.encode("utf-8"), parser)
    except etree.XMLSyntaxError as exc:
        raise ParseError(exc.msg, exc.lineno) from exc

    name = etree.QName(root).localname
    logger.debug("Parsed XML document with root <%s>", name)
    return {name: _convert(root, name, options)}


def _shield_stop_nodes(text: str, tags: set[str]) -> str:
    """Wrap the bodies of *tags* in CDATA so lxml hands them back verbatim.

    Self-closing elements are left alone; they have no body to protect.
    """
    if not tags:
        return text
    names = "|".join(re.escape(tag) for tag in sorted(tags))
    pattern = re.compile(
        rf"(<(?:{names})\b[^>]*?(?<!/)>)(.*?)(</(?:{names})\s*>)",
        re.DOTALL,
    )
    return pattern.sub(lambda m: m.group(1) + _cdata(m.group(2)) + m.group(3), text)


CDATA_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)


def _cdata(body: str) -> str:
    body = CDATA_RE.sub(r"\1", body)  # unwrap sections already in the body
    if not body:
        return body
    # "]]>" cannot appear inside a CDATA section; split it across two.
    return "<![CDATA[" + body.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def _convert(element: etree._Element, path: str, options: ParseOptions) -> Any:
    prefix = options.attribute_prefix
    node: dict[str, Any] = {}

    if element.getparent() is None and element.nsmap.get(None):
        node[prefix + "xmlns"] = element.nsmap[None]
    for name, value in element.attrib.items():
        node[prefix + _attribute_name(name)] = value

    for child in element:
        if not isinstance(child.tag, str):  # comments and PIs
            continue
        child_name = etree.QName(child).localname
        child_path = f"{path}.{child_name}"
        value = _convert(child, child_path, options)
        if child_name in node:
            if not isinstance(node[child_name], list):
                node[child_name] = [node[child_name]]
            node[child_name].append(value)
        elif child_path in options.always_array:
            node[child_name] = [value]
        else:
            node[child_name] = value

    text = _own_text(element)
    processed = options.value_processor(etree.QName(element).localname, text, path)
    if processed is not None:
        text = processed
    elif options.trim_values:
        text = text.strip()

    if not node:
        return text
    if text.strip():
        node[options.text_key] = text
    return node


def _own_text(element: etree._Element) -> str:
    """Text directly inside *element*, skipping the text of its children."""
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return "".join(parts)


def _attribute_name(name: str) -> str:
    qname = etree.QName(name)
    if qname.namespace == XML_NAMESPACE:
        return f"xml:{qname.localname}"
    return qname.localname


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


def build(tree: dict[str, Any], options: BuildOptions | None = None) -> str:
    """Serialize a tree back to XML text.

    Raises :class:`~openlyrics_xml.exceptions.BuildError` if the tree does not
    have exactly one root element or carries malformed markup.
    """
    options = options or BuildOptions()
    declaration = None
    instructions = []
    root = None

    for key, value in tree.items():
        if key == "?xml":
            declaration = value
        elif key.startswith("?"):
            instructions.append(etree.ProcessingInstruction(key[1:], _pseudo_attributes(value, options)))
        elif root is not None:
            raise BuildError(f"more than one root element: <{key}>")
        else:
            root = _build_root(key, value, options)

    if root is None:
        raise BuildError("tree has no root element")

    for instruction in instructions:
        root.addprevious(instruction)

    body = etree.tostring(root.getroottree(), encoding="unicode", pretty_print=options.pretty)
    if declaration is None:
        return body
    return f"<?xml {_pseudo_attributes(declaration, options)}?>\n{body}"


def _build_root(name: str, value: Any, options: BuildOptions) -> etree._Element:
    namespace = None
    if isinstance(value, dict):
        namespace = value.get(options.attribute_prefix + "xmlns") or None
    nsmap = {None: namespace} if namespace else None
    root = etree.Element(_qualify(name, namespace), nsmap=nsmap)
    _fill(root, value, name, namespace, options)
    return root


def _fill(element: etree._Element, value: Any, path: str, namespace: str | None,
          options: BuildOptions) -> None:
    prefix = options.attribute_prefix

    if isinstance(value, dict):
        for key, item in value.items():
            if item is None:
                continue
            if key == options.text_key:
                _set_text(element, item, path, namespace, options)
            elif key.startswith(prefix):
                name = key[len(prefix):]
                if name != "xmlns":  # handled when the root is created
                    element.set(_attribute_qname(name), _stringify(item))
            else:
                _append(element, key, item, f"{path}.{key}", namespace, options)
    elif value is not None:
        _set_text(element, value, path, namespace, options)

    # An empty text node forces an explicit closing tag.
    if element.text is None and len(element) == 0:
        if etree.QName(element).localname not in options.unpaired_tags:
            element.text = ""


def _append(parent: etree._Element, name: str, value: Any, path: str,
            namespace: str | None, options: BuildOptions) -> None:
    items = value if isinstance(value, list) else [value]
    for item in items:
        if item is None:
            continue
        child = etree.SubElement(parent, _qualify(name, namespace))
        _fill(child, item, path, namespace, options)


def _set_text(element: etree._Element, value: Any, path: str, namespace: str | None,
              options: BuildOptions) -> None:
    text = _stringify(value)
    if path not in options.markup_paths:
        element.text = text
        return

    declaration = f' xmlns="{namespace}"' if namespace else ""
    try:
        fragment = etree.fromstring(f"<fragment{declaration}>{text}</fragment>")
    except etree.XMLSyntaxError as exc:
        raise BuildError(f"malformed markup in {path}: {exc.msg}") from exc

    element.text = fragment.text
    for child in list(fragment):
        element.append(child)  # moves the child together with its tail


def _pseudo_attributes(value: Any, options: BuildOptions) -> str:
    if not isinstance(value, dict):
        return _stringify(value)
    prefix = options.attribute_prefix
    return " ".join(
        f'{key[len(prefix):]}="{_stringify(item)}"'
        for key, item in value.items()
        if key.startswith(prefix) and item is not None
    )


def _qualify(name: str, namespace: str | None) -> str:
    return f"{{{namespace}}}{name}" if namespace else name


def _attribute_qname(name: str) -> str:
    if name.startswith("xml:"):
        return f"{{{XML_NAMESPACE}}}{name[4:]}"
    return name


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
