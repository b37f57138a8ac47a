"""
应用配置管理

使用 pydantic-settings 管理环境变量和配置
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.mail.value_objects.imap_endpoint import ImapEndpoint


class Settings(BaseSettings):
    """
    应用配置类

    自动从环境变量和 .env 文件读取配置
    """

    # ========== 应用环境 ==========
    app_env: Literal["test", "dev", "prod"] = "dev"
    app_name: str = "Mailbox Downloader"
    app_version: str = "1.0.0"
    debug: bool = False

    # ========== IMAP 服务器 ==========
    imap_host: str = "imap.gmail.com"
    imap_port: int = Field(default=993, ge=1, le=65535)
    imap_mailbox: str = "INBOX"
    imap_connect_timeout: float = Field(default=30.0, gt=0)  # 秒
    imap_read_timeout: Optional[float] = Field(default=60.0, gt=0)  # 秒，None 表示无限等待

    # ========== 批次下载 ==========
    fetch_batch_size: int = Field(default=10, ge=1)
    fetch_max_concurrent: int = Field(default=5, ge=1)
    fetch_launch_delay: float = Field(default=0.05, ge=0)  # 秒
    fetch_batch_timeout: Optional[float] = Field(default=None, gt=0)  # 秒

    # ========== 日志配置 ==========
    log_level: str = "INFO"
    log_file: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # 忽略未定义的环境变量
    )

    @property
    def is_test(self) -> bool:
        """是否为测试环境"""
        return self.app_env == "test"

    @property
    def is_dev(self) -> bool:
        """是否为开发环境"""
        return self.app_env == "dev"

    @property
    def imap_endpoint(self) -> ImapEndpoint:
        """IMAP 服务端点值对象"""
        return ImapEndpoint(
            host=self.imap_host,
            port=self.imap_port,
            mailbox=self.imap_mailbox,
        )


# 全局配置实例（单例）
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    获取配置实例（单例模式）

    Returns:
        Settings 实例
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
