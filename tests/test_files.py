"""
文件集合读写测试
Tests for reading and writing file sets
"""

import os
from datetime import date
from pathlib import Path

from mapsite.files import parse_front_matter, read_files, write_files

import pytest


class TestParseFrontMatter:

    def test_yaml_front_matter(self):
        meta, body = parse_front_matter(b'---\ntitle: Hello\ndate: 2021-06-01\nprivate: true\n---\n<p>body</p>')
        assert meta == {'title': 'Hello', 'date': date(2021, 6, 1), 'private': True}
        assert body == b'<p>body</p>'

    def test_nested_sitemap_map(self):
        meta, _ = parse_front_matter(b'---\nsitemap:\n  priority: 0.9\n  changefreq: daily\n---\n')
        assert meta == {'sitemap': {'priority': 0.9, 'changefreq': 'daily'}}

    def test_crlf_line_endings(self):
        meta, body = parse_front_matter(b'---\r\ncanonical: /x\r\n---\r\nbody')
        assert meta == {'canonical': '/x'}
        assert body == b'body'

    def test_no_front_matter(self):
        raw = b'<html></html>'
        assert parse_front_matter(raw) == ({}, raw)

    def test_invalid_yaml_is_tolerated(self):
        raw = b'---\n: : [\n---\nbody'
        assert parse_front_matter(raw) == ({}, raw)

    def test_non_mapping_yaml_is_ignored(self):
        raw = b'---\n- a\n- b\n---\nbody'
        assert parse_front_matter(raw) == ({}, raw)


class TestReadWriteFiles:

    def test_read_files(self, tmp_path: Path):
        (tmp_path / 'blog').mkdir()
        (tmp_path / 'index.html').write_bytes(b'<html></html>')
        (tmp_path / 'blog' / 'post.html').write_bytes(b'---\npriority: 0.8\n---\n<p>post</p>')
        (tmp_path / 'style.css').write_bytes(b'---\nnot: parsed\n---\n')
        os.utime(tmp_path / 'index.html', (1622505600, 1622505600))

        files = read_files(tmp_path)

        assert list(files) == ['blog/post.html', 'index.html', 'style.css']
        assert files['blog/post.html']['priority'] == 0.8
        assert files['blog/post.html']['contents'] == b'<p>post</p>'
        assert files['index.html']['stats']['mtime'] == 1622505600
        assert 'not' not in files['style.css']

    def test_read_missing_directory_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            read_files(tmp_path / 'missing')

    def test_write_files(self, tmp_path: Path):
        files = {
            'sitemap.xml': {'contents': b'<urlset/>'},
            'nested/a.txt': {'contents': 'text'},
            'skip.html': {'contents': b'x'},
        }
        written = write_files(files, tmp_path, only=['sitemap.xml', 'nested/a.txt'])

        assert sorted(p.name for p in written) == ['a.txt', 'sitemap.xml']
        assert (tmp_path / 'sitemap.xml').read_bytes() == b'<urlset/>'
        assert (tmp_path / 'nested' / 'a.txt').read_text(encoding='utf-8') == 'text'
        assert not (tmp_path / 'skip.html').exists()

    def test_only_page_files_are_read(self, tmp_path: Path):
        (tmp_path / 'index.html').write_bytes(b'<html></html>')
        (tmp_path / 'logo.png').write_bytes(b'\x89PNG\r\n')

        files = read_files(tmp_path)

        assert files['index.html']['contents'] == b'<html></html>'
        assert 'contents' not in files['logo.png']
        assert 'mtime' in files['logo.png']['stats']

    def test_records_without_contents_are_not_written(self, tmp_path: Path):
        (tmp_path / 'logo.png').write_bytes(b'\x89PNG\r\n')
        files = read_files(tmp_path)

        written = write_files(files, tmp_path)

        assert written == []
        assert (tmp_path / 'logo.png').read_bytes() == b'\x89PNG\r\n'
