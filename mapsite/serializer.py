"""
Sitemap 序列化模块

负责将有序的 sitemap 条目转换为 sitemaps.org 0.9 格式的 XML 文档。
每个条目生成一个 <url> 元素，包含 <loc> 以及可选的 <lastmod>、<changefreq>、<priority>。
<lastmod> 以 W3C Datetime 格式写出。

条目 extra 中的扩展字段按 Google 的 sitemap 扩展写出:
- img    -> <image:image>
- video  -> <video:video>
- news   -> <news:news>
- links  -> <xhtml:link rel="alternate">
其它 extra 字段不写入文档。
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any
from urllib.parse import urljoin

from mapsite.errors import SerializationError
from mapsite.models import SitemapEntry
from mapsite.utils.dates import to_w3c_datetime

logger = logging.getLogger(__name__)

SITEMAP_NAMESPACE = 'http://www.sitemaps.org/schemas/sitemap/0.9'
IMAGE_NAMESPACE = 'http://www.google.com/schemas/sitemap-image/1.1'
VIDEO_NAMESPACE = 'http://www.google.com/schemas/sitemap-video/1.1'
NEWS_NAMESPACE = 'http://www.google.com/schemas/sitemap-news/0.9'
XHTML_NAMESPACE = 'http://www.w3.org/1999/xhtml'
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

ET.register_namespace('', SITEMAP_NAMESPACE)
ET.register_namespace('image', IMAGE_NAMESPACE)
ET.register_namespace('video', VIDEO_NAMESPACE)
ET.register_namespace('news', NEWS_NAMESPACE)
ET.register_namespace('xhtml', XHTML_NAMESPACE)

EXTENSION_FIELDS = ('img', 'video', 'news', 'links')

# (entry 字段名, 元素名)，按扩展协议要求的顺序
IMAGE_FIELDS = (
    ('caption', 'caption'),
    ('geoLocation', 'geo_location'),
    ('geo_location', 'geo_location'),
    ('title', 'title'),
    ('license', 'license'),
)

VIDEO_FIELDS = (
    'thumbnail_loc',
    'title',
    'description',
    'content_loc',
    'player_loc',
    'duration',
    'expiration_date',
    'rating',
    'view_count',
    'publication_date',
    'family_friendly',
    'restriction',
    'platform',
    'requires_subscription',
    'uploader',
    'live',
    'tag',
    'category',
)

VIDEO_URL_FIELDS = {'thumbnail_loc', 'content_loc', 'player_loc'}
VIDEO_DATE_FIELDS = {'expiration_date', 'publication_date'}

NEWS_FIELDS = ('access', 'genres', 'publication_date', 'title', 'keywords', 'stock_tickers')


def _tag(namespace: str, name: str) -> str:
    return f'{{{namespace}}}{name}'


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return 'yes' if value else 'no'
    return str(value)


class SitemapSerializer:
    """
    Sitemap 序列化器

    Attributes:
        hostname: 站点根 URL，条目中的相对 URL 相对它解析
        beautify: 是否输出带缩进的 XML
    """

    def __init__(self, hostname: str, beautify: bool = False):
        self.hostname = hostname
        self.beautify = beautify

    def serialize(self, entries: list[SitemapEntry], output: str | None = None) -> bytes:
        """
        生成 sitemap XML

        Args:
            entries: sitemap 条目列表
            output: 输出路径，仅用于错误信息

        Returns:
            UTF-8 编码的 XML 文档

        Raises:
            SerializationError: 生成 XML 失败时
        """
        try:
            urlset = self.build_tree(entries)
            if self.beautify:
                ET.indent(urlset, space='  ')
            xml_str = ET.tostring(urlset, encoding='unicode', method='xml')
        except SerializationError:
            raise
        except Exception as e:
            raise SerializationError(str(e), output=output) from e

        return (XML_DECLARATION + xml_str).encode('utf-8')

    def build_tree(self, entries: list[SitemapEntry]) -> ET.Element:
        """生成 <urlset> 元素树，使用到的扩展命名空间声明在根元素上"""
        urlset = ET.Element(_tag(SITEMAP_NAMESPACE, 'urlset'))

        for entry in entries:
            url_elem = ET.SubElement(urlset, _tag(SITEMAP_NAMESPACE, 'url'))
            ET.SubElement(url_elem, _tag(SITEMAP_NAMESPACE, 'loc')).text = self.resolve_loc(entry.url)

            if entry.lastmod is not None:
                lastmod = to_w3c_datetime(entry.lastmod)
                if lastmod is None:
                    logger.warning(f"{entry.url} 的 lastmod 无法转换，已省略: {entry.lastmod!r}")
                else:
                    ET.SubElement(url_elem, _tag(SITEMAP_NAMESPACE, 'lastmod')).text = lastmod
            if entry.changefreq is not None:
                ET.SubElement(url_elem, _tag(SITEMAP_NAMESPACE, 'changefreq')).text = entry.changefreq
            if entry.priority is not None:
                ET.SubElement(url_elem, _tag(SITEMAP_NAMESPACE, 'priority')).text = str(float(entry.priority))

            self._add_extensions(url_elem, entry)

        return urlset

    def resolve_loc(self, url: str) -> str:
        """
        将条目 URL 相对 hostname 解析为绝对 URL

        Examples:
            >>> SitemapSerializer('https://example.com').resolve_loc('blog/')
            'https://example.com/blog/'
            >>> SitemapSerializer('https://example.com').resolve_loc('')
            'https://example.com'
        """
        try:
            return urljoin(self.hostname, url)
        except ValueError as e:
            raise SerializationError(f"Cannot resolve URL {url!r}: {e}")

    def _add_extensions(self, url_elem: ET.Element, entry: SitemapEntry) -> None:
        extra = entry.extra
        if not extra:
            return

        for image in _as_list(extra.get('img')):
            self._add_image(url_elem, entry, image)
        for video in _as_list(extra.get('video')):
            self._add_video(url_elem, entry, video)
        if extra.get('news') is not None:
            self._add_news(url_elem, entry, extra['news'])
        for link in _as_list(extra.get('links')):
            self._add_link(url_elem, entry, link)

        ignored = sorted(key for key in extra if key not in EXTENSION_FIELDS)
        if ignored:
            logger.debug(f"{entry.url} 的附加字段不会写入 sitemap: {ignored}")

    def _add_image(self, url_elem: ET.Element, entry: SitemapEntry, image: Any) -> None:
        if isinstance(image, str):
            image = {'url': image}
        if not isinstance(image, dict) or not image.get('url'):
            logger.warning(f"忽略 {entry.url} 中无效的图片: {image!r}")
            return

        image_elem = ET.SubElement(url_elem, _tag(IMAGE_NAMESPACE, 'image'))
        ET.SubElement(image_elem, _tag(IMAGE_NAMESPACE, 'loc')).text = self.resolve_loc(str(image['url']))
        for key, name in IMAGE_FIELDS:
            if image.get(key) not in (None, ''):
                ET.SubElement(image_elem, _tag(IMAGE_NAMESPACE, name)).text = _text(image[key])

    def _add_video(self, url_elem: ET.Element, entry: SitemapEntry, video: Any) -> None:
        if not isinstance(video, dict) or not video.get('thumbnail_loc') or not video.get('title'):
            logger.warning(f"忽略 {entry.url} 中无效的视频（需要 thumbnail_loc 和 title）: {video!r}")
            return

        video_elem = ET.SubElement(url_elem, _tag(VIDEO_NAMESPACE, 'video'))
        for name in VIDEO_FIELDS:
            for value in _as_list(video.get(name)):
                if value in (None, ''):
                    continue
                if name in VIDEO_URL_FIELDS:
                    text = self.resolve_loc(str(value))
                elif name in VIDEO_DATE_FIELDS:
                    text = to_w3c_datetime(value)
                    if text is None:
                        logger.warning(f"{entry.url} 的视频日期无法解析，已忽略: {value!r}")
                        continue
                else:
                    text = _text(value)
                ET.SubElement(video_elem, _tag(VIDEO_NAMESPACE, name)).text = text

    def _add_news(self, url_elem: ET.Element, entry: SitemapEntry, news: Any) -> None:
        publication = news.get('publication') if isinstance(news, dict) else None
        if not isinstance(publication, dict) or not publication.get('name') or not news.get('title'):
            logger.warning(f"忽略 {entry.url} 中无效的新闻信息（需要 publication.name 和 title）: {news!r}")
            return

        news_elem = ET.SubElement(url_elem, _tag(NEWS_NAMESPACE, 'news'))
        publication_elem = ET.SubElement(news_elem, _tag(NEWS_NAMESPACE, 'publication'))
        ET.SubElement(publication_elem, _tag(NEWS_NAMESPACE, 'name')).text = str(publication['name'])
        if publication.get('language'):
            ET.SubElement(publication_elem, _tag(NEWS_NAMESPACE, 'language')).text = str(publication['language'])

        for name in NEWS_FIELDS:
            value = news.get(name)
            if value in (None, ''):
                continue
            if name == 'publication_date':
                value = to_w3c_datetime(value)
                if value is None:
                    logger.warning(f"{entry.url} 的新闻发布日期无法解析，已忽略: {news[name]!r}")
                    continue
            ET.SubElement(news_elem, _tag(NEWS_NAMESPACE, name)).text = _text(value)

    def _add_link(self, url_elem: ET.Element, entry: SitemapEntry, link: Any) -> None:
        hreflang = (link.get('hreflang') or link.get('lang')) if isinstance(link, dict) else None
        if not hreflang or not link.get('url'):
            logger.warning(f"忽略 {entry.url} 中无效的备用链接（需要 lang 和 url）: {link!r}")
            return

        ET.SubElement(url_elem, _tag(XHTML_NAMESPACE, 'link'), {
            'rel': 'alternate',
            'hreflang': str(hreflang),
            'href': self.resolve_loc(str(link['url'])),
        })
