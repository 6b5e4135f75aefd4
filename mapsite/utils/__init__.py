# Utils module - 工具模块
# 包含日期规范化、路径处理等工具函数

from .dates import parse_datetime, to_http_date, to_w3c_datetime
from .paths import basename, chomp_right, extname, slash

__all__ = [
    "parse_datetime",
    "to_http_date",
    "to_w3c_datetime",
    "basename",
    "chomp_right",
    "extname",
    "slash",
]
