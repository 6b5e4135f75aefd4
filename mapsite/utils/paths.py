"""
路径处理工具

文件路径规范化以及 URL 推导用到的字符串辅助函数。
"""

import posixpath


def slash(path: str) -> str:
    """
    将 Windows 反斜杠路径转换为正斜杠路径

    扩展长度路径（\\\\?\\ 前缀）保持不变。

    Examples:
        >>> slash('blog\\\\index.html')
        'blog/index.html'
    """
    if path.startswith('\\\\?\\'):
        return path
    return path.replace('\\', '/')


def chomp_right(value: str, suffix: str) -> str:
    """去掉字符串末尾的后缀（如果存在）"""
    if suffix and value.endswith(suffix):
        return value[:-len(suffix)]
    return value


def basename(path: str) -> str:
    return posixpath.basename(path)


def extname(path: str) -> str:
    """返回扩展名（包含点），以点开头的文件名没有扩展名"""
    return posixpath.splitext(path)[1]
