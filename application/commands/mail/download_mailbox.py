"""下载邮箱命令"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class DownloadMailboxCommand:
    """
    下载邮箱命令

    Attributes:
        username: 邮箱地址/用户名
        password: IMAP 密码（应用专用密码）
        destination: 保存目录（由前端创建）
        max_concurrent: 并发连接上限，None 时使用配置的默认值
    """

    username: str
    password: str = field(repr=False)
    destination: str
    max_concurrent: Optional[int] = None
