"""
Sitemap 序列化器测试
Tests for the sitemap XML serializer
"""

import xml.etree.ElementTree as ET
from unittest.mock import patch

import pytest
from hypothesis import given, settings, strategies as st

from mapsite.errors import SerializationError
from mapsite.models import SitemapEntry
from mapsite.serializer import (
    IMAGE_NAMESPACE,
    NEWS_NAMESPACE,
    SITEMAP_NAMESPACE,
    VIDEO_NAMESPACE,
    XHTML_NAMESPACE,
    SitemapSerializer,
)

NS = {
    'sm': SITEMAP_NAMESPACE,
    'image': IMAGE_NAMESPACE,
    'video': VIDEO_NAMESPACE,
    'news': NEWS_NAMESPACE,
    'xhtml': XHTML_NAMESPACE,
}


def parse(data: bytes) -> ET.Element:
    return ET.fromstring(data)


class TestSerialize:

    def test_empty_urlset(self):
        data = SitemapSerializer('https://example.com').serialize([])
        assert data.startswith(b'<?xml version="1.0" encoding="UTF-8"?>')
        root = parse(data)
        assert root.tag == f'{{{SITEMAP_NAMESPACE}}}urlset'
        assert root.findall('sm:url', NS) == []

    def test_full_entry(self):
        entry = SitemapEntry(
            url='blog/',
            changefreq='daily',
            priority=0.8,
            lastmod='Tue, 01 Jun 2021 00:00:00 GMT',
        )
        root = parse(SitemapSerializer('https://example.com').serialize([entry]))
        url = root.find('sm:url', NS)
        assert url.findtext('sm:loc', namespaces=NS) == 'https://example.com/blog/'
        assert url.findtext('sm:changefreq', namespaces=NS) == 'daily'
        assert url.findtext('sm:priority', namespaces=NS) == '0.8'
        assert url.findtext('sm:lastmod', namespaces=NS) == '2021-06-01T00:00:00+00:00'
        assert [child.tag.split('}')[1] for child in url] == ['loc', 'lastmod', 'changefreq', 'priority']

    def test_optional_fields_are_omitted(self):
        root = parse(SitemapSerializer('https://example.com').serialize([SitemapEntry(url='a')]))
        url = root.find('sm:url', NS)
        assert [child.tag.split('}')[1] for child in url] == ['loc']

    def test_zero_priority_is_written(self):
        root = parse(SitemapSerializer('https://example.com').serialize([SitemapEntry(url='a', priority=0.0)]))
        assert root.find('sm:url', NS).findtext('sm:priority', namespaces=NS) == '0.0'

    def test_absolute_url_is_kept(self):
        serializer = SitemapSerializer('https://example.com')
        assert serializer.resolve_loc('https://other.org/x') == 'https://other.org/x'
        assert serializer.resolve_loc('/custom') == 'https://example.com/custom'

    def test_special_characters_are_escaped(self):
        data = SitemapSerializer('https://example.com').serialize([SitemapEntry(url='search?a=1&b=2')])
        assert b'&amp;' in data
        loc = parse(data).find('sm:url', NS).findtext('sm:loc', namespaces=NS)
        assert loc == 'https://example.com/search?a=1&b=2'

    def test_unknown_extra_fields_are_not_written(self):
        entry = SitemapEntry(url='a', extra={'layout': 'post.njk'})
        data = SitemapSerializer('https://example.com').serialize([entry])
        assert b'layout' not in data
        assert b'post.njk' not in data

    def test_beautify_indents(self):
        data = SitemapSerializer('https://example.com', beautify=True).serialize([SitemapEntry(url='a')])
        assert b'\n  <url>\n    <loc>' in data
        plain = SitemapSerializer('https://example.com').serialize([SitemapEntry(url='a')])
        assert b'\n  <url>' not in plain

    def test_failure_is_wrapped(self):
        serializer = SitemapSerializer('https://example.com')
        with patch('mapsite.serializer.ET.tostring', side_effect=RuntimeError('boom')):
            with pytest.raises(SerializationError) as exc_info:
                serializer.serialize([SitemapEntry(url='a')], output='sitemap.xml')
        assert exc_info.value.output == 'sitemap.xml'
        assert 'boom' in str(exc_info.value)

    @given(urls=st.lists(st.from_regex(r'[a-z0-9/_-]{0,20}', fullmatch=True), max_size=20))
    @settings(max_examples=50)
    def test_one_url_element_per_entry(self, urls):
        entries = [SitemapEntry(url=u) for u in urls]
        root = parse(SitemapSerializer('https://example.com').serialize(entries))
        locs = [u.findtext('sm:loc', namespaces=NS) for u in root.findall('sm:url', NS)]
        assert len(locs) == len(urls)
        assert all(locs)


class TestLastmod:
    """<lastmod> 使用 W3C Datetime"""

    @pytest.mark.parametrize('lastmod, expected', [
        ('Tue, 01 Jun 2021 00:00:00 GMT', '2021-06-01T00:00:00+00:00'),
        ('Tue, 01 Jun 2021 10:30:15 GMT', '2021-06-01T10:30:15+00:00'),
    ])
    def test_http_date_is_written_as_w3c_datetime(self, lastmod, expected):
        root = parse(SitemapSerializer('https://example.com').serialize([SitemapEntry(url='a', lastmod=lastmod)]))
        assert root.find('sm:url', NS).findtext('sm:lastmod', namespaces=NS) == expected

    def test_unconvertible_lastmod_is_omitted(self):
        root = parse(SitemapSerializer('https://example.com').serialize([SitemapEntry(url='a', lastmod='soon')]))
        assert root.find('sm:url', NS).find('sm:lastmod', NS) is None


class TestExtensions:
    """图片、视频、新闻和多语言链接扩展"""

    def serialize_one(self, **extra) -> ET.Element:
        data = SitemapSerializer('https://example.com').serialize([SitemapEntry(url='a.html', extra=extra)])
        return parse(data).find('sm:url', NS)

    def test_images(self):
        url = self.serialize_one(img=[
            {'url': 'https://cdn.example.com/a.png', 'caption': 'A caption', 'title': 'A'},
            'b.png',
        ])
        images = url.findall('image:image', NS)
        assert [i.findtext('image:loc', namespaces=NS) for i in images] == [
            'https://cdn.example.com/a.png',
            'https://example.com/b.png',
        ]
        assert images[0].findtext('image:caption', namespaces=NS) == 'A caption'
        assert images[0].findtext('image:title', namespaces=NS) == 'A'

    def test_single_image_mapping(self):
        url = self.serialize_one(img={'url': '/a.png'})
        assert url.find('image:image', NS).findtext('image:loc', namespaces=NS) == 'https://example.com/a.png'

    def test_invalid_image_is_skipped(self):
        url = self.serialize_one(img=[{'caption': 'no url'}, 5])
        assert url.findall('image:image', NS) == []

    def test_alternate_links(self):
        url = self.serialize_one(links=[
            {'lang': 'en', 'url': 'https://example.com/a.html'},
            {'lang': 'de', 'url': '/de/a.html'},
        ])
        links = url.findall('xhtml:link', NS)
        assert [(l.get('rel'), l.get('hreflang'), l.get('href')) for l in links] == [
            ('alternate', 'en', 'https://example.com/a.html'),
            ('alternate', 'de', 'https://example.com/de/a.html'),
        ]

    def test_link_without_lang_is_skipped(self):
        url = self.serialize_one(links=[{'url': '/de/a.html'}])
        assert url.findall('xhtml:link', NS) == []

    def test_news(self):
        url = self.serialize_one(news={
            'publication': {'name': 'Example Times', 'language': 'en'},
            'publication_date': '2021-06-01',
            'title': 'Launch',
        })
        news = url.find('news:news', NS)
        assert news.findtext('news:publication/news:name', namespaces=NS) == 'Example Times'
        assert news.findtext('news:publication/news:language', namespaces=NS) == 'en'
        assert news.findtext('news:publication_date', namespaces=NS) == '2021-06-01T00:00:00+00:00'
        assert news.findtext('news:title', namespaces=NS) == 'Launch'

    def test_video(self):
        url = self.serialize_one(video=[{
            'thumbnail_loc': '/thumb.jpg',
            'title': 'Demo',
            'description': 'A demo',
            'content_loc': 'https://cdn.example.com/demo.mp4',
            'duration': 120,
            'family_friendly': True,
            'tag': ['a', 'b'],
        }])
        video = url.find('video:video', NS)
        assert video.findtext('video:thumbnail_loc', namespaces=NS) == 'https://example.com/thumb.jpg'
        assert video.findtext('video:duration', namespaces=NS) == '120'
        assert video.findtext('video:family_friendly', namespaces=NS) == 'yes'
        assert [t.text for t in video.findall('video:tag', NS)] == ['a', 'b']
        assert [child.tag.split('}')[1] for child in video][:3] == ['thumbnail_loc', 'title', 'description']

    def test_video_without_title_is_skipped(self):
        url = self.serialize_one(video={'thumbnail_loc': '/thumb.jpg'})
        assert url.find('video:video', NS) is None

    def test_namespaces_declared_on_urlset(self):
        entry = SitemapEntry(url='a', extra={
            'img': ['a.png'],
            'links': [{'lang': 'en', 'url': '/a'}],
        })
        data = SitemapSerializer('https://example.com').serialize([entry])
        head = data.split(b'>', 2)[1]
        assert b'xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"' in head
        assert b'xmlns:image="http://www.google.com/schemas/sitemap-image/1.1"' in head
        assert b'xmlns:xhtml="http://www.w3.org/1999/xhtml"' in head
        assert b'<image:image><image:loc>https://example.com/a.png</image:loc></image:image>' in data
