"""
独立SVG转换 - 把页面内联渲染的 <svg> 片段整理为可单独打开的 SVG 文档

处理步骤：
1. 根节点补齐 xmlns / xmlns:xlink 声明（引擎序列化时不一定带）
2. 根节点补齐 width / height（取页面测得的尺寸）
3. 文本块 div 标记 XHTML 命名空间，并固定 white-space:nowrap / overflow:visible
   （渲染器的文本排版依赖宿主页面，单独打开时需冻结）
4. 重新序列化为良构 XML，并加上 XML 声明头

测试要点：
- test_adds_missing_namespaces: 缺失命名空间补齐
- test_adds_missing_size: 缺失宽高补齐
- test_keeps_existing_attributes: 已有属性不覆盖
- test_text_block_styles: 文本块样式
"""

from __future__ import annotations

import re
from xml.etree import ElementTree as ET

from ..interfaces import RenderError

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
XHTML_NS = "http://www.w3.org/1999/xhtml"
XML_NS = "http://www.w3.org/XML/1998/namespace"

XML_DECLARATION = '<?xml version="1.0" standalone="no"?>\r\n'

TEXT_BLOCK_STYLE = {"white-space": "nowrap", "overflow": "visible"}

_ROOT_TAG_RE = re.compile(r"""<svg\b(?:[^>"']|"[^"]*"|'[^']*')*>""")
_KNOWN_PREFIXES = {XLINK_NS: "xlink", XML_NS: "xml"}


def to_standalone_svg(markup: str, width: float, height: float) -> str:
    """转换为带 XML 声明的独立 SVG 文档

    Args:
        markup: 页面中序列化出的 <svg> 片段
        width: 页面测得的宽度（根节点缺 width 时使用）
        height: 页面测得的高度（根节点缺 height 时使用）
    """
    markup = _declare_root_namespaces(markup)
    try:
        root = ET.fromstring(markup)
    except ET.ParseError as e:
        raise RenderError(f"SVG片段无法解析: {e}") from e

    _mark_text_blocks(root)

    extra_decls: dict[str, str] = {}
    _localize(root, None, extra_decls)

    root.set("xmlns", SVG_NS)
    root.set("xmlns:xlink", XLINK_NS)
    for uri, prefix in extra_decls.items():
        root.set(f"xmlns:{prefix}", uri)
    if not root.get("width"):
        root.set("width", _fmt(width))
    if not root.get("height"):
        root.set("height", _fmt(height))

    return XML_DECLARATION + ET.tostring(root, encoding="unicode")


def _declare_root_namespaces(markup: str) -> str:
    """在根 <svg> 起始标签上补齐命名空间声明，保证片段可解析"""
    m = _ROOT_TAG_RE.search(markup)
    if not m:
        raise RenderError("渲染结果中没有 <svg> 节点")

    tag = m.group(0)
    decls = ""
    if not re.search(r"\sxmlns\s*=", tag):
        decls += f' xmlns="{SVG_NS}"'
    if not re.search(r"\sxmlns:xlink\s*=", tag):
        decls += f' xmlns:xlink="{XLINK_NS}"'
    if not decls:
        return markup

    insert_at = m.start() + len("<svg")
    return markup[:insert_at] + decls + markup[insert_at:]


def _split(tag: str) -> tuple[str | None, str]:
    if tag.startswith("{"):
        ns, local = tag[1:].split("}", 1)
        return ns, local
    return None, tag


def _mark_text_blocks(root: ET.Element) -> None:
    """没有自身 XHTML 声明的 div 归入 XHTML 命名空间并固定排版样式"""
    parents = {child: parent for parent in root.iter() for child in parent}

    for el in list(root.iter()):
        ns, local = _split(el.tag)
        if local != "div":
            continue
        parent_ns = _split(parents[el].tag)[0] if el in parents else None
        if ns == XHTML_NS and parent_ns != XHTML_NS:
            # 自带声明的外层 div
            continue
        if ns != XHTML_NS:
            _retag_subtree(el, ns, XHTML_NS)
        el.set("style", _merge_style(el.get("style", ""), TEXT_BLOCK_STYLE))


def _retag_subtree(el: ET.Element, old_ns: str | None, new_ns: str) -> None:
    for node in el.iter():
        ns, local = _split(node.tag)
        if ns == old_ns:
            node.tag = f"{{{new_ns}}}{local}"


def _merge_style(style: str, props: dict[str, str]) -> str:
    """覆盖 props 中的属性，其余声明原样保留"""
    kept = [
        decl
        for decl in _split_declarations(style)
        if decl.split(":", 1)[0].strip().lower() not in props
    ]
    kept.extend(f"{k}: {v}" for k, v in props.items())
    return "; ".join(kept) + ";"


def _split_declarations(style: str) -> list[str]:
    """按顶层 ; 切分声明（括号与引号内的 ; 不切，如 data URL）"""
    parts: list[str] = []
    buf: list[str] = []
    depth = 0
    quote: str | None = None
    for ch in style:
        if quote:
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")" and depth:
            depth -= 1
        elif ch == ";" and depth == 0:
            parts.append("".join(buf))
            buf = []
            continue
        buf.append(ch)
    parts.append("".join(buf))
    return [p.strip() for p in parts if p.strip()]


def _localize(el: ET.Element, parent_ns: str | None, extra_decls: dict[str, str]) -> None:
    """把 {ns}tag 形式改写为字面 xmlns 属性，序列化时命名空间原样保留"""
    ns, local = _split(el.tag)
    el.tag = local
    if ns != parent_ns and ns is not None and parent_ns is not None:
        el.set("xmlns", ns)

    for key in list(el.attrib):
        attr_ns, attr_local = _split(key)
        if attr_ns is None:
            continue
        prefix = _KNOWN_PREFIXES.get(attr_ns)
        if prefix is None:
            prefix = extra_decls.setdefault(attr_ns, f"ns{len(extra_decls)}")
        el.set(f"{prefix}:{attr_local}", el.attrib.pop(key))

    for child in el:
        _localize(child, ns, extra_decls)


def _fmt(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
