"""
路径匹配器测试
Tests for the glob path matcher

Property: 排除模式优先于包含模式
For any path matching both an include pattern and an omit pattern, the path is skipped.
"""

import pytest
from hypothesis import given, settings, strategies as st

from mapsite.errors import ConfigurationError
from mapsite.matching import CompiledGlob, MatchRules, PathMatcher, expand_braces


segment_strategy = st.from_regex(r'[a-z0-9][a-z0-9_-]{0,8}', fullmatch=True)

path_strategy = st.builds(
    lambda parts, name, ext: '/'.join(parts + [f'{name}.{ext}']),
    st.lists(segment_strategy, min_size=0, max_size=4),
    segment_strategy,
    st.sampled_from(['html', 'css', 'js', 'xml']),
)


def matcher(patterns, omit=None) -> PathMatcher:
    return PathMatcher(MatchRules(patterns=patterns, omit_patterns=omit or []))


class TestGlobSyntax:
    """glob 语法"""

    @pytest.mark.parametrize('path, expected', [
        ('index.html', True),
        ('blog/index.html', True),
        ('blog/2021/06/post.html', True),
        ('style.css', False),
        ('blog/index.html.bak', False),
    ])
    def test_default_pattern(self, path, expected):
        assert matcher(['**/*.html']).matches(path) is expected

    def test_single_star_does_not_cross_directories(self):
        m = matcher(['*.html'])
        assert m.matches('index.html')
        assert not m.matches('blog/index.html')

    def test_question_mark(self):
        m = matcher(['page?.html'])
        assert m.matches('page1.html')
        assert not m.matches('page10.html')
        assert not m.matches('page/.html')

    def test_character_class(self):
        m = matcher(['[ab].html'])
        assert m.matches('a.html')
        assert not m.matches('c.html')

    def test_negated_character_class(self):
        m = matcher(['[!ab].html'])
        assert m.matches('c.html')
        assert not m.matches('a.html')

    def test_character_range(self):
        m = matcher(['v[0-9].html'])
        assert m.matches('v3.html')
        assert not m.matches('vx.html')

    def test_braces(self):
        m = matcher(['**/*.{html,htm}'])
        assert m.matches('a/b.htm')
        assert m.matches('b.html')
        assert not m.matches('b.xhtml')

    def test_unbalanced_brace_is_literal(self):
        m = matcher(['{a.html'])
        assert m.matches('{a.html')

    def test_trailing_double_star(self):
        m = matcher(['blog/**'])
        assert m.matches('blog/a.html')
        assert m.matches('blog/x/y/a.html')
        assert not m.matches('other/a.html')

    def test_dots_are_literal(self):
        m = matcher(['a.html'])
        assert not m.matches('aXhtml')

    def test_backslash_paths_are_normalized(self):
        assert matcher(['blog/*.html']).matches('blog\\a.html')

    def test_brace_expansion(self):
        assert expand_braces('**/*.{html,htm}') == ['**/*.html', '**/*.htm']
        assert expand_braces('{a,b}/{c,d}') == ['a/c', 'a/d', 'b/c', 'b/d']
        assert expand_braces('{a.html') == ['{a.html']

    def test_double_star_inside_segment_stays_in_segment(self):
        m = matcher(['a**.html'])
        assert m.matches('abc.html')
        assert not m.matches('a/b.html')

    @given(path=path_strategy)
    @settings(max_examples=100)
    def test_default_pattern_matches_exactly_html(self, path: str):
        assert matcher(['**/*.html']).matches(path) is path.endswith('.html')

    @given(path=path_strategy)
    @settings(max_examples=100)
    def test_compiled_glob_agrees_with_suffix(self, path: str):
        assert CompiledGlob('**/*.css').match(path) is path.endswith('.css')


class TestPatternLists:
    """模式列表与否定模式"""

    def test_negation_removes_match(self):
        m = matcher(['**/*.html', '!404.html'])
        assert m.matches('index.html')
        assert not m.matches('404.html')

    def test_later_positive_readds(self):
        m = matcher(['**/*.html', '!blog/**', 'blog/keep.html'])
        assert not m.matches('blog/drop.html')
        assert m.matches('blog/keep.html')

    def test_only_negation_matches_nothing(self):
        assert not matcher(['!404.html']).matches('index.html')

    @given(path=path_strategy)
    @settings(max_examples=100)
    def test_omit_always_wins(self, path: str):
        m = matcher(['**/*'], omit=['**/*'])
        assert not m.matches(path)

    def test_omit_pattern(self):
        m = matcher(['**/*.html'], omit=['drafts/**', 'secret.html'])
        assert m.matches('blog/a.html')
        assert not m.matches('drafts/a.html')
        assert not m.matches('secret.html')


class TestInvalidPatterns:

    @pytest.mark.parametrize('pattern', ['', None, 5])
    def test_invalid_pattern_raises(self, pattern):
        with pytest.raises(ConfigurationError) as exc_info:
            matcher([pattern])
        assert exc_info.value.option == 'pattern'

    def test_invalid_omit_pattern_raises(self):
        with pytest.raises(ConfigurationError):
            matcher(['**/*.html'], omit=[''])
