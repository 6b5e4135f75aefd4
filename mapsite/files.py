"""
文件集合读写模块
File Set I/O Module

将构建目录读取为文件集合（路径 -> frontmatter 字典），并将文件集合写回磁盘。
Reads a build directory into a file set (path -> frontmatter mapping) and writes a
file set back to disk.

每条记录包含:
Each record contains:
- contents: 去掉 front matter 后的文件内容（bytes），只有页面文件会被读取
  Page body without front matter, only read for page files (.html, .md, ...)
- stats: {'mtime': 修改时间戳}
- front matter 中的所有字段（YAML 格式，以 --- 包围）
"""

import logging
import re
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

FRONT_MATTER_RE = re.compile(rb'\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)', re.DOTALL)

# 只解析这些扩展名文件的 front matter
FRONT_MATTER_SUFFIXES = {'.html', '.htm', '.md', '.markdown'}


def parse_front_matter(raw: bytes) -> tuple[dict[str, Any], bytes]:
    """
    解析 YAML front matter
    Parse YAML front matter

    解析失败时返回空字典和原始内容（容错）。
    On parse errors returns an empty dict and the original contents.

    Returns:
        (meta_dict, body)

    Examples:
        >>> parse_front_matter(b'---\\nprivate: true\\n---\\n<p>hi</p>')
        ({'private': True}, b'<p>hi</p>')
    """
    m = FRONT_MATTER_RE.match(raw)
    if not m:
        return {}, raw

    try:
        meta = yaml.safe_load(m.group(1).decode('utf-8'))
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        logger.warning(f"front matter 解析失败: {e}")
        return {}, raw

    if not isinstance(meta, dict):
        return {}, raw
    return meta, raw[m.end():]


def read_files(source_dir: str | Path) -> dict[str, dict[str, Any]]:
    """
    读取构建目录为文件集合
    Read a build directory into a file set

    Args:
        source_dir: 构建输出目录

    Returns:
        按路径排序的文件集合，路径为相对 source_dir 的 POSIX 路径

    Raises:
        FileNotFoundError: 目录不存在
    """
    root = Path(source_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"目录不存在: {source_dir}")

    files: dict[str, dict[str, Any]] = {}
    for path in sorted(p for p in root.rglob('*') if p.is_file()):
        rel = path.relative_to(root).as_posix()
        record: dict[str, Any] = {}
        if path.suffix.lower() in FRONT_MATTER_SUFFIXES:
            meta, body = parse_front_matter(path.read_bytes())
            record.update(meta)
            record['contents'] = body

        record['stats'] = {'mtime': path.stat().st_mtime}
        files[rel] = record

    logger.info(f"从 {root} 读取了 {len(files)} 个文件")
    return files


def write_files(files: dict[str, dict[str, Any]], destination_dir: str | Path, only: list[str] | None = None) -> list[Path]:
    """
    将文件集合写入目录

    没有 contents 的记录（未读取内容的非页面文件）被跳过，磁盘上的原文件保持不变。

    Args:
        files: 文件集合
        destination_dir: 目标目录
        only: 只写入这些路径（可选）

    Returns:
        写入的文件路径列表
    """
    root = Path(destination_dir)
    written = []
    for rel, record in files.items():
        if only is not None and rel not in only:
            continue
        if 'contents' not in record:
            logger.debug(f"跳过没有内容的文件: {rel}")
            continue
        contents = record['contents']
        if isinstance(contents, str):
            contents = contents.encode('utf-8')

        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(contents)
        written.append(target)

    logger.debug(f"写入了 {len(written)} 个文件到 {root}")
    return written
