"""
数据模型模块

定义 sitemap 条目和页面类型的数据模型。
"""

import math
from dataclasses import dataclass, field
from typing import Any


# sitemaps.org 协议允许的 changefreq 取值
CHANGEFREQ_VALUES = frozenset({
    "always",
    "hourly",
    "daily",
    "weekly",
    "monthly",
    "yearly",
    "never",
})

# 条目的标准字段，其余字段进入 extra
STANDARD_FIELDS = ("url", "lastmod", "changefreq", "priority")


def normalize_priority(value: Any) -> float | None:
    """
    解析 priority 值
    Parse a priority value

    Args:
        value: 数字或数字字符串
               Number or numeric string

    Returns:
        float 值（0.0-1.0），无效时返回 None
        float value (0.0-1.0), or None when invalid

    Examples:
        >>> normalize_priority('0.8')
        0.8
        >>> normalize_priority(0) == 0.0
        True
        >>> normalize_priority('high') is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        priority = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(priority) or not 0.0 <= priority <= 1.0:
        return None
    return priority


def normalize_changefreq(value: Any) -> str | None:
    """解析 changefreq 值，不在协议取值范围内时返回 None"""
    if not isinstance(value, str):
        return None
    changefreq = value.strip().lower()
    if changefreq in CHANGEFREQ_VALUES:
        return changefreq
    return None


@dataclass
class SitemapEntry:
    """
    Sitemap 条目
    Sitemap Entry

    表示生成的 sitemap 中的单个 URL 条目。
    Represents a single URL entry of the generated sitemap.

    Attributes:
        url: 页面 URL（必需，允许为空字符串，序列化时相对 hostname 解析）
             Page URL (required, may be empty, resolved against hostname on output)
        changefreq: 更新频率（可选），如 'daily', 'weekly'
                    Change frequency (optional)
        priority: 优先级（可选），范围 0.0-1.0，0.0 是有效值
                  Priority (optional), range 0.0-1.0, 0.0 is a valid value
        lastmod: HTTP-date 格式的最后修改时间（可选）
                 Last modification time in HTTP-date form (optional)
        extra: 从文件 sitemap 覆盖映射合并进来的其它字段
               Additional fields merged from a file's sitemap override map

    Examples:
        >>> entry = SitemapEntry(url='blog/', changefreq='weekly', priority=0.5)
        >>> entry.to_dict()
        {'url': 'blog/', 'changefreq': 'weekly', 'priority': 0.5}
    """
    url: str = ""
    changefreq: str | None = None
    priority: float | None = None
    lastmod: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """
        转换为字典，缺失的可选字段被省略

        Returns:
            包含 url 与所有已设置字段的字典
        """
        result: dict[str, Any] = {"url": self.url}
        if self.changefreq is not None:
            result["changefreq"] = self.changefreq
        if self.priority is not None:
            result["priority"] = self.priority
        if self.lastmod is not None:
            result["lastmod"] = self.lastmod
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SitemapEntry":
        """
        从字典创建 SitemapEntry，非标准字段放入 extra

        Args:
            data: 条目字典

        Returns:
            SitemapEntry 对象
        """
        extra = {k: v for k, v in data.items() if k not in STANDARD_FIELDS}
        return cls(
            url=data.get("url", ""),
            changefreq=data.get("changefreq"),
            priority=data.get("priority"),
            lastmod=data.get("lastmod"),
            extra=extra,
        )


@dataclass
class PageType:
    """
    页面类型默认值

    按页面类别提供 changefreq/priority 的默认值。

    Attributes:
        name: 页面类型名称
        changefreq: 该类型的默认更新频率
        priority: 该类型的默认优先级
    """
    name: str
    changefreq: str | None = None
    priority: float | None = None

    def to_layer(self) -> dict[str, Any]:
        """返回用于字段解析的层（只包含已设置的字段）"""
        layer: dict[str, Any] = {}
        if self.changefreq is not None:
            layer["changefreq"] = self.changefreq
        if self.priority is not None:
            layer["priority"] = self.priority
        return layer

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any] | None) -> "PageType":
        data = data or {}
        return cls(
            name=name,
            changefreq=data.get("changefreq"),
            priority=data.get("priority"),
        )
