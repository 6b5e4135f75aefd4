"""
Sitemap 插件模块
Sitemap Plugin Module

构建管道插件：扫描文件集合，生成 sitemap 条目并将 XML 文档写回文件集合。
Build-pipeline plugin: scans the file set, builds sitemap entries and writes the
XML document back into the file set.

用法 Usage:
    >>> plugin = mapsite('https://example.com')
    >>> files = {'index.html': {'contents': b''}}
    >>> plugin(files)
    [SitemapEntry(url='index.html', changefreq='weekly', priority=0.5, lastmod=None, extra={})]
    >>> 'sitemap.xml' in files
    True
"""

import logging
from typing import Any, Callable

from mapsite.builder import SitemapEntryBuilder
from mapsite.config import MapsiteOptions
from mapsite.models import SitemapEntry
from mapsite.serializer import SitemapSerializer

logger = logging.getLogger(__name__)

DoneCallback = Callable[[Exception | None], None]


class MapsitePlugin:
    """
    Sitemap 插件
    Sitemap Plugin

    构造时校验配置（缺少 hostname 立即抛出 ConfigurationError），
    调用时对文件集合执行一次完整的生成过程。
    Validates the configuration at construction (a missing hostname raises
    ConfigurationError immediately) and runs one full pass per call.

    Attributes:
        options: 插件选项
        builder: 条目构建器
        serializer: XML 序列化器
    """

    def __init__(self, options: "str | dict | MapsiteOptions | None" = None):
        self.options = MapsiteOptions.from_options(options)
        self.builder = SitemapEntryBuilder(self.options)
        self.serializer = SitemapSerializer(self.options.hostname, beautify=self.options.beautify)

    def __call__(
        self,
        files: dict[str, dict[str, Any]],
        pipeline: Any = None,
        done: DoneCallback | None = None,
    ) -> list[SitemapEntry] | None:
        """
        执行插件
        Run the plugin

        Args:
            files: 文件路径到 frontmatter 的映射，生成的文档写入其中
                   Mapping of file path to frontmatter; the document is written into it
            pipeline: 调用插件的构建管道（未使用，保持插件签名一致）
                      The invoking pipeline (unused, keeps the plugin signature)
            done: 完成回调，成功时以 None 调用，失败时以异常调用，恰好一次
                  Completion callback, called exactly once with None or the exception

        Returns:
            未提供 done 时返回条目列表；提供 done 时返回 None
            The entries when no callback is given, otherwise None

        Raises:
            SerializationError: 未提供 done 且生成 XML 失败时
        """
        if done is None:
            return self.run(files)

        try:
            self.run(files)
        except Exception as e:
            logger.error(f"生成 sitemap 失败: {e}")
            done(e)
            return None
        done(None)
        return None

    def run(self, files: dict[str, dict[str, Any]]) -> list[SitemapEntry]:
        """生成条目、序列化并写入输出文件，失败时不写入任何内容"""
        links = self.builder.build(files)

        data = self.serializer.serialize(links, output=self.options.output)
        files[self.options.output] = {'contents': data}

        logger.info(f"wrote {len(links)} urls to sitemap {self.options.output}")
        return links


def mapsite(options: "str | dict | MapsiteOptions | None" = None) -> MapsitePlugin:
    """
    创建 sitemap 插件
    Create the sitemap plugin

    Args:
        options: hostname 字符串或选项字典
                 Hostname string or options mapping

    Returns:
        MapsitePlugin 实例

    Raises:
        ConfigurationError: 缺少 hostname 或选项无效时
    """
    return MapsitePlugin(options)
