"""
输出规划 - 计算每张图的输出文件名

规则：
1. 输出是已存在的目录：目录/输入文件名(去扩展名)，扩展名取 --format
2. 否则：输出路径去掉扩展名，扩展名取输出路径自身的扩展名（小写）；
   输出路径没有扩展名时退回 --format
3. 图表数 > 1：在扩展名前插入 .{索引}，例如 out.png -> out.0.png

测试要点：
- test_directory_mode: 目录模式
- test_multi_diagram_index: 多图插入索引
- test_distinct_filenames: 全部索引文件名互不相同
"""

from __future__ import annotations

import os
from pathlib import Path

from ..models import OutputTarget


def plan_output(
    output: str | Path,
    input_filename: str | Path,
    diagram_index: int,
    diagram_count: int,
    declared_format: str,
) -> OutputTarget:
    """计算单张图的输出目标"""
    output = os.fspath(output)

    if os.path.isdir(output):
        stem = os.path.splitext(os.path.basename(os.fspath(input_filename)))[0]
        base = os.path.join(output, stem)
        extension = declared_format
    else:
        base, ext = os.path.splitext(output)
        extension = ext[1:].lower() or declared_format

    is_multi = diagram_count > 1
    if is_multi:
        base = f"{base}.{diagram_index}"

    return OutputTarget(base=base, extension=extension, is_multi_diagram=is_multi)
