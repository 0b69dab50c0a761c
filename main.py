"""
表文件维护工具入口
"""

from xbase.frontend.cli import cli


if __name__ == '__main__':
    cli()
