"""
独立SVG转换单元测试
"""

from xml.etree import ElementTree as ET

import pytest

from drawio_batch.export.svg import (
    SVG_NS,
    XHTML_NS,
    XLINK_NS,
    XML_DECLARATION,
    to_standalone_svg,
)
from drawio_batch.interfaces import RenderError


def _parse(source: str) -> ET.Element:
    return ET.fromstring(source[len(XML_DECLARATION):])


class TestToStandaloneSvg:
    """独立SVG转换测试"""

    def test_adds_missing_namespaces_and_size(self):
        """缺失 xmlns/xmlns:xlink/width/height 全部补齐"""
        source = to_standalone_svg('<svg><g><rect width="5" height="5"/></g></svg>', 121, 80.5)

        assert source[:6] == "<?xml "
        assert source.startswith('<?xml version="1.0" standalone="no"?>\r\n')
        head = source[len(XML_DECLARATION):].split(">", 1)[0]
        assert f'xmlns="{SVG_NS}"' in head
        assert f'xmlns:xlink="{XLINK_NS}"' in head
        assert 'width="121"' in head
        assert 'height="80.5"' in head

    def test_output_well_formed(self):
        """输出可被 XML 解析，根节点在 SVG 命名空间"""
        source = to_standalone_svg("<svg><g/></svg>", 10, 10)
        root = _parse(source)
        assert root.tag == f"{{{SVG_NS}}}svg"

    def test_keeps_existing_attributes(self):
        """已有宽高不覆盖"""
        markup = f'<svg xmlns="{SVG_NS}" width="300px" height="200px"><g/></svg>'
        source = to_standalone_svg(markup, 1, 1)
        root = _parse(source)
        assert root.get("width") == "300px"
        assert root.get("height") == "200px"

    def test_undeclared_xlink_prefix(self):
        """片段使用未声明的 xlink: 前缀时仍可解析"""
        markup = '<svg><image xlink:href="data:image/png;base64,AAAA" width="1" height="1"/></svg>'
        source = to_standalone_svg(markup, 1, 1)
        assert 'xlink:href="data:image/png;base64,AAAA"' in source
        image = _parse(source).find(f"{{{SVG_NS}}}image")
        assert image.get(f"{{{XLINK_NS}}}href") == "data:image/png;base64,AAAA"

    def test_text_block_styles(self):
        """文本块 div 标记 XHTML 命名空间与排版样式"""
        markup = (
            "<svg><foreignObject><div style=\"color: red\">"
            "<div>Label</div></div></foreignObject></svg>"
        )
        root = _parse(to_standalone_svg(markup, 10, 10))
        divs = list(root.iter(f"{{{XHTML_NS}}}div"))
        assert len(divs) == 2
        for div in divs:
            style = div.get("style")
            assert "white-space: nowrap;" in style
            assert "overflow: visible;" in style
        assert divs[0].get("style").startswith("color: red;")
        assert divs[1].text == "Label"

    def test_declared_outer_div_untouched(self):
        """自带 XHTML 声明的外层 div 不改样式，内层 div 固定样式"""
        markup = (
            f'<svg xmlns="{SVG_NS}"><foreignObject>'
            f'<div xmlns="{XHTML_NS}" style="display: flex"><div>t</div></div>'
            "</foreignObject></svg>"
        )
        root = _parse(to_standalone_svg(markup, 10, 10))
        outer, inner = list(root.iter(f"{{{XHTML_NS}}}div"))
        assert outer.get("style") == "display: flex"
        assert "white-space: nowrap;" in inner.get("style")

    def test_existing_white_space_overridden(self):
        markup = '<svg><foreignObject><div style="white-space: normal">t</div></foreignObject></svg>'
        root = _parse(to_standalone_svg(markup, 10, 10))
        div = root.find(f".//{{{XHTML_NS}}}div")
        assert div.get("style") == "white-space: nowrap; overflow: visible;"

    def test_data_url_style_preserved(self):
        """style 中 data URL 内的分号不被切断"""
        style = "background-image: url(data:image/png;base64,iVBORw0KGgo=); color: red"
        markup = f'<svg><foreignObject><div style="{style}">t</div></foreignObject></svg>'
        root = _parse(to_standalone_svg(markup, 10, 10))
        div = root.find(f".//{{{XHTML_NS}}}div")
        assert div.get("style") == (
            "background-image: url(data:image/png;base64,iVBORw0KGgo=); color: red; "
            "white-space: nowrap; overflow: visible;"
        )

    def test_quoted_semicolon_preserved(self):
        markup = (
            "<svg><foreignObject><div style=\"font-family: 'a;b'; overflow: hidden\">t</div>"
            "</foreignObject></svg>"
        )
        root = _parse(to_standalone_svg(markup, 10, 10))
        div = root.find(f".//{{{XHTML_NS}}}div")
        assert div.get("style") == "font-family: 'a;b'; white-space: nowrap; overflow: visible;"

    def test_text_preserved(self):
        markup = "<svg><text x=\"1\">A &amp; B</text></svg>"
        source = to_standalone_svg(markup, 10, 10)
        assert "A &amp; B" in source

    def test_no_svg_element(self):
        with pytest.raises(RenderError):
            to_standalone_svg("<div>nothing</div>", 1, 1)

    def test_unparsable_markup(self):
        with pytest.raises(RenderError):
            to_standalone_svg("<svg><g></svg>", 1, 1)
