"""Extracts a reusable title template from an FCP-exported FCPXML file."""

import logging
import os
from typing import List, Optional, Tuple

from lxml import etree

from .exceptions import MalformedTemplateError, TemplateFileNotFoundError, TemplateStructureError
from .models import FCPXMLTemplate, TemplateParam, TemplateTextStyle
from .utils import escape_xml

logger = logging.getLogger(__name__)

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


class FCPXMLTemplateParser:
    """Reads the first title of an FCPXML document into an FCPXMLTemplate."""

    def __init__(self):
        # FCPXML only declares a bare DOCTYPE; nothing external is ever needed.
        self._parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=False)

    def parse(self, file_path: str) -> FCPXMLTemplate:
        """
        Parses an FCPXML file and extracts the first title template.

        Args:
            file_path: Path to an .fcpxml file exported from Final Cut Pro.

        Returns:
            The extracted FCPXMLTemplate.

        Raises:
            TemplateFileNotFoundError: If the file does not exist.
            MalformedTemplateError: If the file is not well-formed XML.
            TemplateStructureError: If the document has no effect or no title.
        """
        logger.info(f"Loading FCPXML template from: {file_path}")
        if not os.path.isfile(file_path):
            logger.error(f"Template file not found: {file_path}")
            raise TemplateFileNotFoundError(file_path)

        try:
            with open(file_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            logger.error(f"Could not read template file {file_path}: {e}")
            raise MalformedTemplateError(f"could not read file: {e}") from e

        return self.parse_string(data, source_file=os.path.basename(file_path))

    def parse_string(self, data, source_file: str = "") -> FCPXMLTemplate:
        """
        Extracts the template from in-memory FCPXML (bytes or str).

        Raises:
            MalformedTemplateError: If the data is not well-formed XML.
            TemplateStructureError: If the document has no effect or no title.
        """
        if isinstance(data, str):
            data = data.encode('utf-8')
        try:
            root = etree.fromstring(data, parser=self._parser)
        except etree.XMLSyntaxError as e:
            logger.error(f"Template is not well-formed XML: {e}")
            raise MalformedTemplateError(str(e)) from e

        effect = _first(root.xpath('//resources/effect'))
        if effect is None:
            logger.error("Template has no <effect> under <resources>.")
            raise TemplateStructureError('effect')
        effect_uid = effect.get('uid', '')
        effect_name = effect.get('name', '')

        title = _first(root.xpath('//title'))
        if title is None:
            logger.error("Template has no <title> element.")
            raise TemplateStructureError('title')

        params = tuple(_read_param(element) for element in title.findall('param'))
        text_style = _read_text_style(title)

        template = FCPXMLTemplate(
            name=effect_name,
            effect_uid=effect_uid,
            effect_name=effect_name,
            params=params,
            text_style=text_style,
            raw_title_xml=etree.tostring(title, pretty_print=True, encoding='unicode', with_tail=False),
            source_file=source_file,
        )
        logger.info(f"Extracted template '{effect_name}' with {len(params)} params "
                    f"({'with' if text_style else 'without'} text style).")
        return template


def _first(nodes) -> Optional[etree._Element]:
    for node in nodes:
        if isinstance(node, etree._Element):
            return node
    return None


def _source_attributes(element) -> List[Tuple[str, str]]:
    """
    The element's attributes as (source name, value) pairs in document order.

    lxml reports namespaced attributes as '{uri}local'; they are turned back
    into 'prefix:local'. Every prefix used, other than 'xml', gets an
    'xmlns:prefix' pair appended so the attributes stay well-formed when
    written onto an element of another document.
    """
    prefixes = {uri: prefix for prefix, uri in element.nsmap.items() if prefix}
    attributes, declarations = [], {}
    for name, value in element.attrib.items():
        qname = etree.QName(name)
        if qname.namespace is None:
            attributes.append((qname.localname, value))
            continue
        if qname.namespace == XML_NAMESPACE:
            prefix = 'xml'
        else:
            prefix = prefixes.get(qname.namespace) or f"ns{len(declarations)}"
            declarations[prefix] = qname.namespace
        attributes.append((f"{prefix}:{qname.localname}", value))
    attributes.extend((f"xmlns:{prefix}", uri) for prefix, uri in declarations.items())
    return attributes


def _read_param(element) -> TemplateParam:
    raw_attributes = " ".join(
        f'{name}="{escape_xml(value)}"' for name, value in _source_attributes(element)
    )
    return TemplateParam(
        name=element.get('name', ''),
        key=element.get('key', ''),
        value=element.get('value', ''),
        raw_attributes=raw_attributes,
    )


def _read_text_style(title) -> Optional[TemplateTextStyle]:
    style = _first(title.xpath('.//text-style-def//text-style'))
    if style is None:
        return None
    return TemplateTextStyle(all_attributes=dict(_source_attributes(style)))
