"""
图表提取器 - 统计文档中的图表页

职责：
1. 解析输入文档（draw.io mxfile XML）
2. 按文档顺序选出全部 diagram 节点（含根节点本身，等同 //diagram）

说明：
- 只产出数量和索引，图表内容仍留在原文中；
  渲染时把整份文档连同索引交给引擎，由引擎自己取出对应页

测试要点：
- test_count_multi_page: 多页文档
- test_count_root_diagram: 根节点即 diagram
- test_malformed_document: 无法解析
"""

from __future__ import annotations

from xml.etree import ElementTree as ET

from ..interfaces import IDiagramExtractor, MalformedDocumentError
from ..models import DiagramDescriptor

DIAGRAM_TAG = "diagram"


class DiagramExtractor(IDiagramExtractor):
    """图表提取器实现"""

    def __init__(self, tag: str = DIAGRAM_TAG):
        self.tag = tag

    def extract(self, text: str) -> list[DiagramDescriptor]:
        """按文档顺序返回图表描述"""
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise MalformedDocumentError(f"文档无法解析: {e}") from e

        return [
            DiagramDescriptor(index=i)
            for i, _ in enumerate(root.iter(self.tag))
        ]

    def count_diagrams(self, text: str) -> int:
        """图表数量"""
        return len(self.extract(text))
