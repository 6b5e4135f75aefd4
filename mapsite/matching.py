"""
路径匹配模块
Path Matching Module

根据 glob 模式判断文件路径是否应被纳入 sitemap。
Decides whether a file path should be included in the sitemap based on glob patterns.

支持的 glob 语法:
Supported glob syntax:
- *      : 匹配任意字符（不包括路径分隔符 /）
- **     : 作为独立路径段时匹配零层或多层目录
- ?      : 匹配单个字符（不包括 /）
- [seq]  : 匹配 seq 中的任意字符，[!seq] 取反
- {a,b}  : 匹配任一备选项
- 模式列表中以 ! 开头的模式为排除模式，按顺序应用
  Patterns prefixed with ! inside a pattern list are negations, applied in order
"""

import fnmatch
import logging
import re
from dataclasses import dataclass, field

from mapsite.errors import ConfigurationError
from mapsite.utils.paths import slash

logger = logging.getLogger(__name__)

GLOBSTAR = "**"


@dataclass
class MatchRules:
    """
    匹配规则配置
    Match Rules Configuration

    Attributes:
        patterns: 包含模式列表，可包含 ! 开头的否定模式
                  Include patterns, may contain !-prefixed negations
        omit_patterns: 排除模式列表，匹配的路径总是被跳过（优先级高于 patterns）
                       Exclude patterns, matching paths are always skipped

    Examples:
        >>> rules = MatchRules(patterns=['**/*.html'], omit_patterns=['drafts/**'])
    """
    patterns: list[str] = field(default_factory=lambda: ['**/*.html'])
    omit_patterns: list[str] = field(default_factory=list)


class PathMatcher:
    """
    路径匹配器
    Path Matcher

    规则优先级逻辑:
    Rule Priority Logic:
    1. 如果路径匹配任何 omit_patterns，则跳过（排除优先）
       If the path matches any omit pattern, skip it (exclude wins)
    2. 依次应用 patterns：正向模式匹配则纳入，! 模式匹配则移除
       Apply patterns in order: positive matches include, ! matches remove
    3. 最终未被纳入的路径被跳过
       Paths not included at the end are skipped

    Examples:
        >>> matcher = PathMatcher(MatchRules(patterns=['**/*.html']))
        >>> matcher.matches('blog/index.html')
        True
        >>> matcher.matches('index.html')
        True
        >>> matcher.matches('style.css')
        False
    """

    def __init__(self, rules: MatchRules):
        """
        初始化匹配器并编译所有模式

        Args:
            rules: 匹配规则配置

        Raises:
            ConfigurationError: 当模式无效时
        """
        self.rules = rules
        self._compiled_patterns: list[tuple[bool, CompiledGlob]] = []
        self._compiled_omit: list[CompiledGlob] = []
        self._compile_patterns()

    def matches(self, path: str) -> bool:
        """
        判断路径是否应被纳入
        Check whether a path should be included

        Args:
            path: 文件路径（允许使用反斜杠分隔符）
                  File path (backslash separators allowed)

        Returns:
            True 如果路径应被纳入，False 否则
        """
        normalized = slash(path)

        if any(p.match(normalized) for p in self._compiled_omit):
            return False

        included = False
        for negated, pattern in self._compiled_patterns:
            if negated:
                if included and pattern.match(normalized):
                    included = False
            elif not included and pattern.match(normalized):
                included = True
        return included

    def _compile_patterns(self) -> None:
        for pattern in self.rules.patterns:
            negated = isinstance(pattern, str) and pattern.startswith('!')
            body = pattern[1:] if negated else pattern
            self._compiled_patterns.append((negated, self._compile_single_pattern(body)))

        for pattern in self.rules.omit_patterns:
            self._compiled_omit.append(self._compile_single_pattern(pattern))

        logger.debug(
            f"已编译 {len(self._compiled_patterns)} 个包含模式, {len(self._compiled_omit)} 个排除模式"
        )

    def _compile_single_pattern(self, pattern: str) -> 'CompiledGlob':
        """
        编译单个 glob 模式

        Raises:
            ConfigurationError: 当模式无效时
        """
        if not isinstance(pattern, str) or not pattern:
            raise ConfigurationError("Empty or non-string glob pattern", option="pattern", value=pattern)
        try:
            return CompiledGlob(pattern)
        except re.error as e:
            raise ConfigurationError(f"Invalid glob pattern: {e}", option="pattern", value=pattern)


class CompiledGlob:
    """
    编译后的 glob 模式
    Compiled glob pattern

    大括号展开为多个备选模式，每个备选模式按 / 切分为路径段。
    ** 段匹配零层或多层目录，其余段交给 fnmatch.translate 转换，
    因此 * 和 ? 不会跨越目录。
    Braces expand into alternatives, each split into path segments. A ** segment
    matches zero or more directories; other segments go through fnmatch.translate,
    so * and ? never cross a directory boundary.

    Examples:
        >>> CompiledGlob('**/*.html').match('blog/index.html')
        True
        >>> CompiledGlob('*.html').match('blog/index.html')
        False
    """

    def __init__(self, pattern: str):
        self.pattern = pattern
        self.alternatives: list[list[re.Pattern | None]] = [
            [None if segment == GLOBSTAR else re.compile(fnmatch.translate(segment))
             for segment in alternative.split('/')]
            for alternative in expand_braces(pattern)
        ]

    def match(self, path: str) -> bool:
        segments = path.split('/')
        return any(_match_segments(alternative, segments) for alternative in self.alternatives)


def _match_segments(pattern_segments: list[re.Pattern | None], path_segments: list[str]) -> bool:
    if not pattern_segments:
        return not path_segments

    head, rest = pattern_segments[0], pattern_segments[1:]
    if head is None:
        # ** 可以吞掉任意数量的目录
        return any(_match_segments(rest, path_segments[i:]) for i in range(len(path_segments) + 1))

    if not path_segments or not head.match(path_segments[0]):
        return False
    return _match_segments(rest, path_segments[1:])


def expand_braces(pattern: str) -> list[str]:
    """
    展开 {a,b} 备选项，未闭合的大括号按字面量处理
    Expand {a,b} alternatives, unbalanced braces are kept literally

    Examples:
        >>> expand_braces('**/*.{html,htm}')
        ['**/*.html', '**/*.htm']
        >>> expand_braces('{a.html')
        ['{a.html']
    """
    start = pattern.find('{')
    while start != -1:
        depth = 0
        options = []
        last = start + 1
        for i in range(start, len(pattern)):
            c = pattern[i]
            if c == '{':
                depth += 1
            elif c == '}':
                depth -= 1
                if depth == 0:
                    options.append(pattern[last:i])
                    prefix, suffix = pattern[:start], pattern[i + 1:]
                    return [
                        expanded
                        for option in options
                        for expanded in expand_braces(prefix + option + suffix)
                    ]
            elif c == ',' and depth == 1:
                options.append(pattern[last:i])
                last = i + 1
        start = pattern.find('{', start + 1)
    return [pattern]
