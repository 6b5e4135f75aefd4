"""
异常定义模块
Exceptions Module

定义 sitemap 生成过程中使用的异常类型。
Defines the exception types raised while generating a sitemap.
"""


class ConfigurationError(ValueError):
    """
    配置错误
    Configuration Error

    当插件配置无效时抛出此异常（例如缺少 hostname 或 glob 模式无效）。
    Raised when the plugin configuration is invalid (e.g. missing hostname or
    an invalid glob pattern).

    Attributes:
        message: 错误描述信息
                 Error description message
        option: 导致错误的配置项（可选）
                The option that caused the error (optional)
        value: 导致错误的配置值（可选）
               The offending value (optional)

    Examples:
        >>> raise ConfigurationError('"hostname" option required', option="hostname")
        ConfigurationError: Configuration error: "hostname" option required (option: 'hostname')
    """

    def __init__(self, message: str, option: str | None = None, value=None):
        self.message = message
        self.option = option
        self.value = value
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """格式化错误消息"""
        base_msg = f"Configuration error: {self.message}"
        if self.option is not None:
            base_msg += f" (option: '{self.option}'"
            if self.value is not None:
                base_msg += f", value: {self.value!r}"
            base_msg += ")"
        return base_msg


class SerializationError(Exception):
    """
    序列化错误
    Serialization Error

    当 sitemap 条目无法转换为 XML 文档时抛出此异常。
    Raised when sitemap entries cannot be converted into the XML document.

    Attributes:
        message: 错误描述信息
                 Error description message
        output: 目标输出路径（可选）
                Target output path (optional)
    """

    def __init__(self, message: str, output: str | None = None):
        self.message = message
        self.output = output
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """格式化错误消息"""
        if self.output:
            return f"Failed to serialize sitemap '{self.output}': {self.message}"
        return f"Sitemap serialization error: {self.message}"
