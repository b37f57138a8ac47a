"""
命令行接口层

交互式收集凭证与保存目录，调用下载处理器并报告结果。
"""

from interfaces.cli.app import main, run

__all__ = ["main", "run"]
