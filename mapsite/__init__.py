"""
mapsite - 静态站点构建管道的 sitemap 生成插件

公共接口:
    插件:
        - mapsite: 插件工厂函数
        - MapsitePlugin: 插件类
    组件:
        - SitemapEntryBuilder: 条目构建器
        - SitemapSerializer: XML 序列化器
        - PathMatcher / MatchRules: glob 路径匹配
    配置:
        - MapsiteOptions: 插件选项
        - load_options: 从 YAML 配置文件加载选项
    数据模型:
        - SitemapEntry, PageType
    异常:
        - ConfigurationError, SerializationError
"""

from mapsite.builder import SitemapEntryBuilder
from mapsite.config import MapsiteOptions, load_options
from mapsite.errors import ConfigurationError, SerializationError
from mapsite.matching import MatchRules, PathMatcher
from mapsite.models import PageType, SitemapEntry
from mapsite.plugin import MapsitePlugin, mapsite
from mapsite.serializer import SitemapSerializer

__version__ = "1.0.0"

__all__ = [
    "mapsite",
    "MapsitePlugin",
    "SitemapEntryBuilder",
    "SitemapSerializer",
    "PathMatcher",
    "MatchRules",
    "MapsiteOptions",
    "load_options",
    "SitemapEntry",
    "PageType",
    "ConfigurationError",
    "SerializationError",
]
