"""
Sitemap 条目构建器
Sitemap Entry Builder

遍历文件集合，应用包含/排除规则，按优先级链解析每个条目的字段，
生成有序的 sitemap 条目列表。
Iterates the file set, applies inclusion/exclusion rules, resolves each entry's
fields through the precedence chain and produces an ordered list of entries.

字段优先级（高者胜出）:
Field precedence (highest wins):
1. 配置中按路径的 overrides
   Path-keyed overrides from the configuration
2. 文件自身的 sitemap 覆盖映射
   The file's own raw sitemap override map
3. 文件 frontmatter 的值（文件声明了已知页面类型时，由该类型的默认值取代）
   Per-file frontmatter values (replaced by the defaults of a known page type)
4. 全局默认值
   Global defaults

URL 优先级:
URL precedence:
canonical 字符串 > 去掉 index.html > 去掉扩展名 > 规范化路径
"""

import logging
from typing import Any

from mapsite.config import MapsiteOptions
from mapsite.matching import MatchRules, PathMatcher
from mapsite.models import SitemapEntry, normalize_changefreq, normalize_priority
from mapsite.utils.dates import to_http_date
from mapsite.utils.paths import basename, chomp_right, extname, slash

logger = logging.getLogger(__name__)

INDEX_FILE = 'index.html'

# frontmatter 中引用页面类型的字段名
PAGE_TYPE_KEYS = ('page_type', 'pageType')


def is_absent(value: Any) -> bool:
    """None 和空字符串视为缺失，0 / 0.0 是有效值"""
    return value is None or value == ''


def merge_layers(layers: list[dict[str, Any]]) -> dict[str, Any]:
    """
    按顺序合并各层，后面的层覆盖前面的层，缺失的值不参与覆盖

    Examples:
        >>> merge_layers([{'priority': 0.5}, {'priority': None}, {'priority': 0.0}])
        {'priority': 0.0}
    """
    merged: dict[str, Any] = {}
    for layer in layers:
        for key, value in layer.items():
            if not is_absent(value):
                merged[key] = value
    return merged


def get_mtime(frontmatter: dict[str, Any]) -> Any:
    """从 stats（字典或 os.stat_result）或顶层 mtime 字段获取修改时间"""
    stats = frontmatter.get('stats')
    if isinstance(stats, dict):
        mtime = stats.get('mtime')
    else:
        mtime = getattr(stats, 'mtime', None) or getattr(stats, 'st_mtime', None)
    if is_absent(mtime):
        mtime = frontmatter.get('mtime')
    return mtime


class SitemapEntryBuilder:
    """
    Sitemap 条目构建器
    Sitemap Entry Builder

    每次调用 build() 都使用独立的累加器，调用之间不保留状态。
    Each build() call uses its own accumulator; no state is kept between calls.

    Attributes:
        options: 插件选项
                 Plugin options

    Examples:
        >>> builder = SitemapEntryBuilder(MapsiteOptions(hostname='https://example.com', omit_index=True))
        >>> [e.url for e in builder.build({'blog/index.html': {}, 'style.css': {}})]
        ['blog/']
    """

    def __init__(self, options: MapsiteOptions):
        """
        初始化构建器

        Args:
            options: 插件选项

        Raises:
            ConfigurationError: 当包含/排除模式无效时
        """
        self.options = options
        self.matcher = PathMatcher(MatchRules(
            patterns=options.pattern,
            omit_patterns=options.omit_pattern,
        ))

    def build(self, files: dict[str, dict[str, Any]]) -> list[SitemapEntry]:
        """
        构建 sitemap 条目
        Build sitemap entries

        Args:
            files: 文件路径到 frontmatter 的映射
                   Mapping of file path to frontmatter

        Returns:
            按文件集合迭代顺序排列的条目列表
            Entries in file-set iteration order
        """
        links: list[SitemapEntry] = []

        for file, frontmatter in files.items():
            frontmatter = frontmatter or {}

            if not self.check(file, frontmatter):
                continue

            entry = self.build_entry(file, frontmatter)
            logger.debug(f"sitemap 条目: {entry.to_dict()}")
            links.append(entry)

        return links

    def check(self, file: str, frontmatter: dict[str, Any]) -> bool:
        """
        判断文件是否应被处理

        Returns:
            True 如果文件匹配包含模式、不匹配排除模式且不是私有文件
        """
        if not self.matcher.matches(file):
            return False

        if frontmatter.get('private'):
            logger.debug(f"跳过私有文件: {file}")
            return False

        return True

    def build_entry(self, file: str, frontmatter: dict[str, Any]) -> SitemapEntry:
        """
        为单个文件构建条目
        Build the entry for a single file
        """
        fields = merge_layers([
            self._global_layer(),
            self._frontmatter_layer(file, frontmatter),
            self._page_type_layer(file, frontmatter),
        ])

        fields['url'] = self.build_url(file, frontmatter)

        sitemap = frontmatter.get('sitemap')
        if isinstance(sitemap, dict):
            fields.update(self._rename_loc(sitemap))
        elif sitemap is not None:
            logger.warning(f"忽略 {file} 中无效的 sitemap 覆盖: {sitemap!r}")

        override = self.options.overrides.get(file)
        if override is None:
            override = self.options.overrides.get(slash(file))
        if override:
            fields.update(self._rename_loc(override))

        return self._finalize(file, fields)

    def build_url(self, file: str, frontmatter: dict[str, Any]) -> str:
        """
        构建 URL
        Build the URL

        Examples:
            >>> builder = SitemapEntryBuilder(MapsiteOptions(hostname='https://example.com', omit_extension=True))
            >>> builder.build_url('about.html', {})
            'about'
            >>> builder.build_url('about.html', {'canonical': '/custom'})
            '/custom'
        """
        normalized_file = slash(file)

        canonical = frontmatter.get('canonical')
        if isinstance(canonical, str):
            return canonical

        if self.options.omit_index and basename(normalized_file) == INDEX_FILE:
            return chomp_right(normalized_file, INDEX_FILE)

        if self.options.omit_extension:
            return chomp_right(normalized_file, extname(normalized_file))

        return normalized_file

    def _global_layer(self) -> dict[str, Any]:
        return {
            'changefreq': self.options.changefreq,
            'priority': self.options.priority,
            'lastmod': self.options.lastmod,
        }

    def _page_type_layer(self, file: str, frontmatter: dict[str, Any]) -> dict[str, Any]:
        for key in PAGE_TYPE_KEYS:
            name = frontmatter.get(key)
            if is_absent(name):
                continue
            page_type = self.options.page_types.get(str(name))
            if page_type is None:
                logger.debug(f"{file} 的页面类型未配置: {name}")
                return {}
            return page_type.to_layer()
        return {}

    def _frontmatter_layer(self, file: str, frontmatter: dict[str, Any]) -> dict[str, Any]:
        layer: dict[str, Any] = {}

        changefreq = frontmatter.get('changefreq')
        if not is_absent(changefreq):
            layer['changefreq'] = normalize_changefreq(changefreq)
            if layer['changefreq'] is None:
                logger.warning(f"{file} 的 changefreq 无效，已忽略: {changefreq!r}")

        priority = frontmatter.get('priority')
        if not is_absent(priority):
            layer['priority'] = normalize_priority(priority)
            if layer['priority'] is None:
                logger.warning(f"{file} 的 priority 无效，已忽略: {priority!r}")

        # lastmod 来源: 显式 lastmod > date > 文件系统修改时间
        for source in (frontmatter.get('lastmod'), frontmatter.get('date'), get_mtime(frontmatter)):
            if is_absent(source):
                continue
            if to_http_date(source) is None:
                logger.warning(f"{file} 的日期无法解析，已忽略: {source!r}")
                continue
            layer['lastmod'] = source
            break

        return layer

    @staticmethod
    def _rename_loc(fields: dict[str, Any]) -> dict[str, Any]:
        """sitemap 覆盖中的 loc 等同于 url"""
        renamed = dict(fields)
        if 'loc' in renamed:
            loc = renamed.pop('loc')
            renamed.setdefault('url', loc)
        return renamed

    def _finalize(self, file: str, fields: dict[str, Any]) -> SitemapEntry:
        """规范化最终字段：lastmod 转为 HTTP-date，priority 转为 float，缺失字段省略"""
        if 'lastmod' in fields:
            lastmod = to_http_date(fields['lastmod'])
            if lastmod is None and not is_absent(fields['lastmod']):
                logger.warning(f"{file} 的 lastmod 覆盖无法解析，已忽略: {fields['lastmod']!r}")
            fields['lastmod'] = lastmod

        if 'priority' in fields and not is_absent(fields['priority']):
            priority = normalize_priority(fields['priority'])
            if priority is None:
                logger.warning(f"{file} 的 priority 覆盖无效，已忽略: {fields['priority']!r}")
            fields['priority'] = priority

        if 'changefreq' in fields and not is_absent(fields['changefreq']):
            changefreq = normalize_changefreq(fields['changefreq'])
            if changefreq is None:
                logger.warning(f"{file} 的 changefreq 覆盖无效，已忽略: {fields['changefreq']!r}")
            fields['changefreq'] = changefreq

        for key in ('changefreq', 'priority', 'lastmod'):
            if key in fields and is_absent(fields[key]):
                del fields[key]

        url = fields.get('url')
        fields['url'] = '' if url is None else str(url)

        return SitemapEntry.from_dict(fields)
