"""
drawio-batch - 图表文档批量导出

模块结构：
- config/     运行期配置与日志
- models/     数据模型定义
- export/     图表提取/渲染会话/几何/文件名规划/格式输出
- pipeline/   流水线编排（逐图 渲染→测量→输出→清理）
- cli.py      命令行入口
"""

__version__ = "0.1.0"
