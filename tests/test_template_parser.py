from pathlib import Path

import pytest

from fcpxsub.exceptions import MalformedTemplateError, TemplateFileNotFoundError, TemplateStructureError
from fcpxsub.template_parser import FCPXMLTemplateParser

TEMPLATE_PATH = Path(__file__).parent / "resources" / "title_template.fcpxml"

MINIMAL = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE fcpxml>
<fcpxml version="1.11">
    <resources>{resources}</resources>
    <library><event name="E"><project name="P"><sequence><spine>{spine}</spine></sequence></project></event></library>
</fcpxml>
"""


def _doc(resources='<effect id="r2" name="Basic Title" uid="basic.moti"/>', spine='<title ref="r2" name="T"/>'):
    return MINIMAL.format(resources=resources, spine=spine)


def test_parse_template_file():
    template = FCPXMLTemplateParser().parse(str(TEMPLATE_PATH))

    assert template.effect_name == "Lower Third & Logo"
    assert template.name == template.effect_name
    assert template.effect_uid.endswith("Lower Third.localized/Lower Third.moti")
    assert template.source_file == "title_template.fcpxml"
    assert [p.name for p in template.params] == ["Position", "Alignment", "Build In"]
    assert template.params[0].key == "9999/999166631/999166633/1/100/101"
    assert template.params[0].value == "0 -380"
    assert template.params[0].raw_attributes == (
        'name="Position" key="9999/999166631/999166633/1/100/101" value="0 -380"'
    )


def test_parse_template_text_style():
    style = FCPXMLTemplateParser().parse(str(TEMPLATE_PATH)).text_style

    assert style is not None
    assert style.font == "Futura"
    assert style.font_size == "40"
    assert style.font_face == "Medium"
    assert style.font_color == "1 0.9 0.2 1"
    assert style.bold == "1"
    assert style.italic is None
    assert style.stroke_color == "0 0 0 1"
    assert style.stroke_width == "3"
    assert style.all_attributes["lineSpacing"] == "-5"


def test_raw_title_xml_is_the_first_title_only():
    template = FCPXMLTemplateParser().parse(str(TEMPLATE_PATH))

    assert template.raw_title_xml.startswith('<title ref="r2"')
    assert template.raw_title_xml.rstrip().endswith("</title>")
    assert "Second" not in template.raw_title_xml


def test_parse_string_without_text_style():
    template = FCPXMLTemplateParser().parse_string(_doc())

    assert template.text_style is None
    assert template.params == ()
    assert template.source_file == ""


def test_missing_optional_attributes_are_empty_strings():
    template = FCPXMLTemplateParser().parse_string(_doc(
        resources='<effect id="r2"/>',
        spine='<title><param value="1"/></title>',
    ))

    assert template.effect_uid == ""
    assert template.effect_name == ""
    assert template.params[0].name == ""
    assert template.params[0].key == ""
    assert template.params[0].raw_attributes == 'value="1"'


def test_raw_attributes_keep_special_characters_escaped():
    template = FCPXMLTemplateParser().parse_string(_doc(
        spine='<title><param name="Note" value="a &amp; &quot;b&quot; &lt;c&gt;"/></title>',
    ))

    assert template.params[0].value == 'a & "b" <c>'
    assert template.params[0].raw_attributes == 'name="Note" value="a &amp; &quot;b&quot; &lt;c&gt;"'


def test_namespaced_attributes_keep_their_prefixes():
    template = FCPXMLTemplateParser().parse_string(
        '<fcpxml xmlns:x="urn:x"><resources><effect name="E" uid="e.moti"/></resources>'
        '<title><param name="P" x:foo="1" xml:lang="en"/>'
        '<text-style-def id="ts1"><text-style font="Futura" x:bar="2"/></text-style-def></title></fcpxml>'
    )

    assert template.params[0].raw_attributes == 'name="P" x:foo="1" xml:lang="en" xmlns:x="urn:x"'
    assert template.text_style.all_attributes == {"font": "Futura", "x:bar": "2", "xmlns:x": "urn:x"}


def test_only_direct_params_of_the_title_are_read():
    template = FCPXMLTemplateParser().parse_string(_doc(
        spine='<title><param name="Top"/><video><param name="Nested"/></video></title>',
    ))

    assert [p.name for p in template.params] == ["Top"]


def test_missing_effect_raises_structure_error():
    with pytest.raises(TemplateStructureError) as excinfo:
        FCPXMLTemplateParser().parse_string(_doc(resources='<format id="r1"/>'))
    assert excinfo.value.missing == "effect"


def test_effect_outside_resources_does_not_count():
    with pytest.raises(TemplateStructureError) as excinfo:
        FCPXMLTemplateParser().parse_string(_doc(resources="", spine='<effect name="x"/><title/>'))
    assert excinfo.value.missing == "effect"


def test_missing_title_raises_structure_error():
    with pytest.raises(TemplateStructureError) as excinfo:
        FCPXMLTemplateParser().parse_string(_doc(spine='<gap duration="5s"/>'))
    assert excinfo.value.missing == "title"
    assert "title" in str(excinfo.value)


def test_malformed_xml_raises_with_detail():
    with pytest.raises(MalformedTemplateError) as excinfo:
        FCPXMLTemplateParser().parse_string("<fcpxml><resources></fcpxml>")
    assert excinfo.value.detail
    assert "well-formed" in str(excinfo.value)


def test_missing_file_is_reported_before_parsing(tmp_path: Path):
    missing = tmp_path / "nope.fcpxml"
    with pytest.raises(TemplateFileNotFoundError) as excinfo:
        FCPXMLTemplateParser().parse(str(missing))
    assert isinstance(excinfo.value, FileNotFoundError)
    assert excinfo.value.path == str(missing)


def test_summary_lists_params_and_style():
    summary = FCPXMLTemplateParser().parse(str(TEMPLATE_PATH)).summary()

    assert "Lower Third & Logo" in summary
    assert "Position" in summary
    assert "fontSize = 40" in summary
