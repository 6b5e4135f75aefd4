"""
配置加载模块
Config Loading Module

实现YAML配置文件加载、环境变量替换以及插件选项的规范化。
Implements YAML config file loading, environment variable substitution and
normalization of the plugin options.

插件选项可以是一个 hostname 字符串，也可以是完整的选项字典。
Plugin options may be a bare hostname string or a full options mapping.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from mapsite.errors import ConfigurationError
from mapsite.models import PageType, normalize_changefreq, normalize_priority
from mapsite.utils.dates import parse_datetime
from mapsite.utils.paths import slash

logger = logging.getLogger(__name__)

DEFAULT_CHANGEFREQ = 'weekly'
DEFAULT_PRIORITY = 0.5
DEFAULT_OUTPUT = 'sitemap.xml'
DEFAULT_PATTERN = '**/*.html'

# camelCase 选项名到 snake_case 的映射
# camelCase option names accepted as aliases of the snake_case ones
OPTION_ALIASES = {
    'omitPattern': 'omit_pattern',
    'omitExtension': 'omit_extension',
    'omitIndex': 'omit_index',
    'pageTypes': 'page_types',
}


def load_env_file(env_path: str | None = None) -> bool:
    """
    加载.env文件中的环境变量。
    Load environment variables from .env file.

    Args:
        env_path: .env文件路径，默认为None（自动查找）
                  Path to .env file, defaults to None (auto-discover)

    Returns:
        是否成功加载了.env文件
        Whether .env file was successfully loaded
    """
    if env_path:
        env_file = Path(env_path)
        if env_file.exists():
            load_dotenv(env_file)
            return True
        return False

    # 自动查找.env文件
    # Auto-discover .env file
    return load_dotenv()


def replace_env_vars(value: Any) -> Any:
    """
    递归替换配置值中的环境变量占位符。
    Recursively substitute environment variable placeholders in config values.

    支持 ${VAR_NAME} 和 ${VAR_NAME:default} 格式。
    Supports ${VAR_NAME} and ${VAR_NAME:default} formats.

    Examples:
        >>> os.environ['SITE_HOST'] = 'https://example.com'
        >>> replace_env_vars({'hostname': '${SITE_HOST}'})
        {'hostname': 'https://example.com'}
        >>> replace_env_vars('${NONEXISTENT_VAR:fallback}')
        'fallback'
    """
    if isinstance(value, str):
        pattern = r'\$\{([^}:]+)(?::([^}]*))?\}'

        def replacer(match: re.Match) -> str:
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ''
            return os.environ.get(var_name, default_value)

        return re.sub(pattern, replacer, value)

    elif isinstance(value, dict):
        return {k: replace_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [replace_env_vars(item) for item in value]

    # 对于其他类型（int, float, bool, None等），直接返回
    # For other types (int, float, bool, None, etc.), return as-is
    return value


def load_config(config_path: str = "mapsite.yaml", env_path: str | None = None) -> dict:
    """
    加载YAML配置文件并替换环境变量。
    Load YAML config file and substitute environment variables.

    Args:
        config_path: 配置文件路径，默认为 "mapsite.yaml"
                     Config file path, defaults to "mapsite.yaml"
        env_path: .env文件路径，默认为None（自动查找）
                  Path to .env file, defaults to None (auto-discover)

    Returns:
        解析并替换环境变量后的配置字典
        Parsed config dict with environment variables substituted

    Raises:
        FileNotFoundError: 配置文件不存在
                          Config file not found
        yaml.YAMLError: YAML解析错误
                       YAML parsing error
    """
    load_env_file(env_path)

    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"配置文件不存在: {config_path}")

    with open(config_file, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}

    return replace_env_vars(config)


def get_config_value(config: dict, key_path: str, default: Any = None) -> Any:
    """
    通过点分隔的路径获取配置值。
    Get config value by dot-separated path.

    Examples:
        >>> config = {'mapsite': {'hostname': 'https://example.com'}}
        >>> get_config_value(config, 'mapsite.hostname')
        'https://example.com'
        >>> get_config_value(config, 'mapsite.missing', 'default')
        'default'
    """
    keys = key_path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


# 默认配置值
# Default Configuration Values
DEFAULT_CONFIG: dict[str, Any] = {
    'mapsite': {
        'hostname': '',
        'output': DEFAULT_OUTPUT,
        'pattern': DEFAULT_PATTERN,
        'omit_pattern': None,
        'changefreq': DEFAULT_CHANGEFREQ,
        'priority': DEFAULT_PRIORITY,
        'lastmod': None,
        'omit_extension': False,
        'omit_index': False,
        'beautify': False,
        'overrides': {},
        'page_types': {},
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """
    深度合并两个字典，override中的值覆盖base中的值。
    Deep merge two dictionaries, values in override take precedence over base.

    Examples:
        >>> _deep_merge({'a': {'b': 1, 'c': 2}}, {'a': {'b': 10}})
        {'a': {'b': 10, 'c': 2}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def apply_defaults(config: dict) -> dict:
    """
    将默认配置应用到用户配置中，缺失的配置项使用默认值。
    Apply default configuration to user config, missing items use defaults.
    """
    return _deep_merge(DEFAULT_CONFIG, config)


def normalize_option_keys(options: dict) -> dict:
    """将 camelCase 选项名转换为 snake_case，snake_case 名称优先"""
    normalized = {}
    for key, value in options.items():
        target = OPTION_ALIASES.get(key, key)
        if target != key and target in options:
            continue
        normalized[target] = value
    return normalized


def _as_pattern_list(value: Any, option: str) -> list[str]:
    if value is None or value == '':
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)) and all(isinstance(p, str) for p in value):
        return list(value)
    raise ConfigurationError("Pattern must be a string or a list of strings", option=option, value=value)


@dataclass
class MapsiteOptions:
    """
    插件选项
    Plugin Options

    一次调用期间固定不变的全局配置。
    Global configuration, fixed for the duration of one invocation.

    Attributes:
        hostname: 站点根 URL（必需）
        output: 生成文档在文件集合中的路径
        pattern: 包含模式列表
        omit_pattern: 排除模式列表
        changefreq: 全局默认更新频率
        priority: 全局默认优先级
        lastmod: 全局默认最后修改时间
        omit_extension: 是否去掉 URL 中的扩展名
        omit_index: 是否去掉 URL 中的 index.html
        overrides: 按文件路径的条目覆盖（最高优先级）
        page_types: 页面类型默认值
        beautify: 是否格式化输出的 XML
    """
    hostname: str
    output: str = DEFAULT_OUTPUT
    pattern: list[str] = field(default_factory=lambda: [DEFAULT_PATTERN])
    omit_pattern: list[str] = field(default_factory=list)
    changefreq: str | None = DEFAULT_CHANGEFREQ
    priority: float | None = DEFAULT_PRIORITY
    lastmod: Any = None
    omit_extension: bool = False
    omit_index: bool = False
    overrides: dict[str, dict[str, Any]] = field(default_factory=dict)
    page_types: dict[str, PageType] = field(default_factory=dict)
    beautify: bool = False

    @classmethod
    def from_options(cls, options: "str | dict | MapsiteOptions | None") -> "MapsiteOptions":
        """
        从 hostname 字符串或选项字典创建 MapsiteOptions
        Create MapsiteOptions from a hostname string or an options mapping

        Args:
            options: hostname 字符串、选项字典或已有的 MapsiteOptions

        Returns:
            规范化后的 MapsiteOptions

        Raises:
            ConfigurationError: 缺少 hostname 或包含模式类型无效时

        Examples:
            >>> MapsiteOptions.from_options('https://example.com').output
            'sitemap.xml'
            >>> MapsiteOptions.from_options({})
            Traceback (most recent call last):
            ...
            mapsite.errors.ConfigurationError: Configuration error: "hostname" option required (option: 'hostname')
        """
        if isinstance(options, MapsiteOptions):
            return options
        if options is None:
            options = {}
        if isinstance(options, str):
            options = {'hostname': options}
        if not isinstance(options, dict):
            raise ConfigurationError("Options must be a hostname string or a mapping", value=options)

        opts = normalize_option_keys(options)

        hostname = opts.get('hostname')
        if not hostname or not isinstance(hostname, str):
            raise ConfigurationError('"hostname" option required', option='hostname')

        changefreq = DEFAULT_CHANGEFREQ
        if opts.get('changefreq'):
            changefreq = normalize_changefreq(opts['changefreq'])
            if changefreq is None:
                logger.warning(f"未知的全局 changefreq，使用 {DEFAULT_CHANGEFREQ}: {opts['changefreq']!r}")
                changefreq = DEFAULT_CHANGEFREQ

        priority = _resolve_default_priority(opts.get('priority'))

        lastmod = opts.get('lastmod')
        if lastmod not in (None, '') and parse_datetime(lastmod) is None:
            logger.warning(f"无法解析全局 lastmod，已忽略: {lastmod!r}")
            lastmod = None

        return cls(
            hostname=hostname,
            output=opts.get('output') or DEFAULT_OUTPUT,
            pattern=_as_pattern_list(opts.get('pattern'), 'pattern') or [DEFAULT_PATTERN],
            omit_pattern=_as_pattern_list(opts.get('omit_pattern'), 'omit_pattern'),
            changefreq=changefreq,
            priority=priority,
            lastmod=lastmod or None,
            omit_extension=bool(opts.get('omit_extension')),
            omit_index=bool(opts.get('omit_index')),
            overrides=_parse_overrides(opts.get('overrides')),
            page_types=_parse_page_types(opts.get('page_types')),
            beautify=bool(opts.get('beautify')),
        )


def _resolve_default_priority(value: Any) -> float:
    """全局优先级：不是 0-1 范围内的有效数字时使用 0.5"""
    if value is None or isinstance(value, bool):
        return DEFAULT_PRIORITY
    try:
        number = float(value)
    except (TypeError, ValueError):
        return DEFAULT_PRIORITY
    if number != number:  # NaN
        return DEFAULT_PRIORITY
    priority = normalize_priority(number)
    if priority is None:
        logger.warning(f"全局 priority 超出 0.0-1.0 范围，使用 {DEFAULT_PRIORITY}: {value!r}")
        return DEFAULT_PRIORITY
    return priority


def _parse_overrides(value: Any) -> dict[str, dict[str, Any]]:
    if not value:
        return {}
    if not isinstance(value, dict):
        logger.warning(f"overrides 必须是路径到条目字段的映射，已忽略: {value!r}")
        return {}

    overrides = {}
    for path, fields in value.items():
        if not isinstance(fields, dict):
            logger.warning(f"忽略无效的覆盖配置 {path}: {fields!r}")
            continue
        overrides[slash(str(path))] = dict(fields)
    return overrides


def _parse_page_types(value: Any) -> dict[str, PageType]:
    """解析页面类型默认值，无效的类型或取值记录警告后丢弃"""
    if not value:
        return {}
    if not isinstance(value, dict):
        logger.warning(f"page_types 必须是名称到默认值的映射，已忽略: {value!r}")
        return {}

    page_types = {}
    for name, defaults in value.items():
        if defaults is not None and not isinstance(defaults, dict):
            logger.warning(f"页面类型 {name} 的默认值必须是映射，已忽略: {defaults!r}")
            continue
        page_type = PageType.from_dict(str(name), defaults)

        if page_type.changefreq is not None:
            changefreq = normalize_changefreq(page_type.changefreq)
            if changefreq is None:
                logger.warning(f"页面类型 {name} 的 changefreq 无效，已忽略: {page_type.changefreq!r}")
            page_type.changefreq = changefreq

        if page_type.priority is not None:
            priority = normalize_priority(page_type.priority)
            if priority is None:
                logger.warning(f"页面类型 {name} 的 priority 无效，已忽略: {page_type.priority!r}")
            page_type.priority = priority

        page_types[page_type.name] = page_type
    return page_types


def load_options(
    config_path: str | None = None,
    env_path: str | None = None,
    overrides: dict | None = None,
) -> MapsiteOptions:
    """
    加载配置文件中的 mapsite 部分并生成插件选项。
    Load the mapsite section of a config file and build plugin options.

    Args:
        config_path: 配置文件路径，为 None 时只使用默认值
                     Config file path, defaults only when None
        env_path: .env文件路径
                  Path to .env file
        overrides: 覆盖配置文件的选项（如命令行参数），值为 None 的项被忽略
                   Options overriding the file (e.g. CLI flags), None values ignored

    Returns:
        MapsiteOptions

    Raises:
        FileNotFoundError: 配置文件不存在
        ConfigurationError: 选项无效
    """
    if config_path:
        config = load_config_with_defaults(config_path, env_path)
    else:
        load_env_file(env_path)
        config = apply_defaults({})

    options = normalize_option_keys(get_config_value(config, 'mapsite', {}) or {})
    for key, value in (overrides or {}).items():
        if value is not None:
            options[key] = value

    return MapsiteOptions.from_options(options)


def load_config_with_defaults(config_path: str = "mapsite.yaml", env_path: str | None = None) -> dict:
    """
    加载配置文件并应用默认值。
    Load configuration file and apply defaults.
    """
    config = load_config(config_path, env_path)
    if 'mapsite' in config and isinstance(config['mapsite'], dict):
        config['mapsite'] = normalize_option_keys(config['mapsite'])
    return apply_defaults(config)
