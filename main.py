#!/usr/bin/env python3
"""
mapsite - 主程序入口
mapsite - Main Entry Point

读取构建输出目录，生成 sitemap 并写回该目录。
Reads a build output directory, generates the sitemap and writes it back.

使用方法 Usage:
    # 使用命令行指定 hostname
    python main.py build --hostname https://example.com

    # 使用配置文件（mapsite 部分）
    python main.py build --config mapsite.yaml

    # 去掉 index.html 并格式化输出
    python main.py build --hostname https://example.com --omit-index --beautify
"""

import argparse
import logging
import sys
from pathlib import Path

# 确保项目根目录在Python路径中
project_root = Path(__file__).resolve().parent
sys.path.insert(0, str(project_root))

from mapsite.config import load_options
from mapsite.errors import ConfigurationError, SerializationError
from mapsite.files import read_files, write_files
from mapsite.plugin import MapsitePlugin


# 配置日志格式
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(verbose: bool = False) -> None:
    """
    配置日志系统
    Setup logging system

    Args:
        verbose: 是否启用详细日志（DEBUG级别）
                 Whether to enable verbose logging (DEBUG level)
    """
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # 降低第三方库的日志级别
    logging.getLogger('dotenv').setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    解析命令行参数
    Parse command line arguments
    """
    parser = argparse.ArgumentParser(
        description='mapsite - 为静态站点构建输出生成 sitemap.xml',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例 Examples:
  python main.py build --hostname https://example.com
  python main.py build --config mapsite.yaml --verbose
  python main.py build --hostname https://example.com --omit-index --omit-extension
        """
    )

    parser.add_argument(
        'build_dir',
        help='构建输出目录 / Build output directory'
    )

    # 配置参数
    config_group = parser.add_argument_group('配置选项 Config Options')
    config_group.add_argument(
        '--config', '-c',
        type=str,
        default=None,
        help='配置文件路径（读取 mapsite 部分）/ Config file path (mapsite section)'
    )
    config_group.add_argument(
        '--env',
        type=str,
        default=None,
        help='.env文件路径 (默认: 自动查找) / .env file path (default: auto-discover)'
    )

    # sitemap 选项，未指定时使用配置文件中的值
    sitemap_group = parser.add_argument_group('Sitemap 选项 Sitemap Options')
    sitemap_group.add_argument(
        '--hostname', '-H',
        type=str,
        default=None,
        help='站点根 URL / Site root URL'
    )
    sitemap_group.add_argument(
        '--output', '-o',
        type=str,
        default=None,
        help='输出文件路径 (默认: sitemap.xml) / Output path (default: sitemap.xml)'
    )
    sitemap_group.add_argument(
        '--pattern',
        type=str,
        action='append',
        default=None,
        help='包含模式，可重复 (默认: **/*.html) / Include pattern, repeatable'
    )
    sitemap_group.add_argument(
        '--omit-pattern',
        type=str,
        action='append',
        default=None,
        help='排除模式，可重复 / Exclude pattern, repeatable'
    )
    sitemap_group.add_argument(
        '--changefreq',
        type=str,
        default=None,
        help='默认更新频率 (默认: weekly) / Default change frequency'
    )
    sitemap_group.add_argument(
        '--priority',
        type=float,
        default=None,
        help='默认优先级 (默认: 0.5) / Default priority'
    )
    sitemap_group.add_argument(
        '--omit-extension',
        action='store_true',
        default=None,
        help='去掉 URL 中的扩展名 / Strip file extensions from URLs'
    )
    sitemap_group.add_argument(
        '--omit-index',
        action='store_true',
        default=None,
        help='去掉 URL 中的 index.html / Strip index.html from URLs'
    )
    sitemap_group.add_argument(
        '--beautify',
        action='store_true',
        default=None,
        help='格式化输出的 XML / Pretty-print the XML'
    )

    # 通用参数
    general_group = parser.add_argument_group('通用选项 General Options')
    general_group.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='启用详细日志输出 / Enable verbose logging'
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """
    主函数
    Main function

    Returns:
        退出码：0表示成功，非0表示失败
        Exit code: 0 for success, non-zero for failure
    """
    args = parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    cli_options = {
        'hostname': args.hostname,
        'output': args.output,
        'pattern': args.pattern,
        'omit_pattern': args.omit_pattern,
        'changefreq': args.changefreq,
        'priority': args.priority,
        'omit_extension': args.omit_extension,
        'omit_index': args.omit_index,
        'beautify': args.beautify,
    }

    try:
        options = load_options(args.config, args.env, overrides=cli_options)
        plugin = MapsitePlugin(options)
    except FileNotFoundError as e:
        logger.error(str(e))
        print(f"错误: {e}", file=sys.stderr)
        return 1
    except ConfigurationError as e:
        logger.error(f"配置无效: {e}")
        print(f"错误: {e}", file=sys.stderr)
        return 1

    try:
        files = read_files(args.build_dir)
    except FileNotFoundError as e:
        logger.error(str(e))
        print(f"错误: {e}", file=sys.stderr)
        return 1

    try:
        plugin(files)
    except SerializationError as e:
        logger.error(f"生成 sitemap 失败: {e}")
        print(f"错误: {e}", file=sys.stderr)
        return 1

    written = write_files(files, args.build_dir, only=[options.output])
    for path in written:
        logger.info(f"已写入: {path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
