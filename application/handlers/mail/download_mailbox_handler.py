"""下载邮箱处理器"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from application.commands.mail.download_mailbox import DownloadMailboxCommand
from application.mail.services.mailbox_download_service import MailboxDownloadService
from domain.common.exceptions import (
    DomainException,
    InvalidInputException,
    InvalidValueObjectException,
)
from domain.mail.services.batch_fetch_service import BatchFetchService
from domain.mail.value_objects.batch_result import RunSummary
from domain.mail.value_objects.credentials import Credentials


@dataclass
class DownloadMailboxResult:
    """
    下载邮箱结果

    只要邮件数量查询成功，运行即视为完成（success=True），
    即使所有批次都失败；批次失败记录在 summary 中。

    Attributes:
        success: 运行是否完成
        message_count: 邮箱中的邮件数量（查询成功时）
        summary: 运行汇总（完成时）
        message: 结果消息
        error_code: 错误代码（失败时）
    """

    success: bool
    message_count: Optional[int] = None
    summary: Optional[RunSummary] = None
    message: str = ""
    error_code: Optional[str] = None


class DownloadMailboxHandler:
    """
    下载邮箱处理器

    业务流程：
    1. 验证输入（在打开任何连接之前拒绝无效配置）
    2. 单独连接一次查询邮件数量，失败则整个运行失败
    3. 交给下载服务分批并发下载
    4. 返回运行汇总
    """

    def __init__(
        self,
        fetch_service: BatchFetchService,
        download_service: MailboxDownloadService,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化处理器

        Args:
            fetch_service: 批次收取服务（用于查询邮件数量）
            download_service: 邮箱下载服务
            logger: 可选的日志记录器
        """
        self._fetch_service = fetch_service
        self._download_service = download_service
        self._logger = logger or logging.getLogger(__name__)

    async def handle(self, command: DownloadMailboxCommand) -> DownloadMailboxResult:
        """
        处理下载邮箱命令

        Args:
            command: 下载邮箱命令

        Returns:
            DownloadMailboxResult 处理结果
        """
        # 1. 验证输入
        try:
            credentials = Credentials(username=command.username, password=command.password)
            destination = self._validate_destination(command.destination)
            max_concurrent = self._validate_max_concurrent(command.max_concurrent)
        except (InvalidValueObjectException, InvalidInputException) as e:
            return DownloadMailboxResult(
                success=False,
                message=e.message,
                error_code="INVALID_INPUT",
            )

        # 2. 查询邮件数量（阻塞 IO 在线程中执行）
        try:
            message_count = await asyncio.to_thread(
                self._fetch_service.count_messages, credentials
            )
        except DomainException as e:
            self._logger.error(f"Failed to get email count: {e}")
            return DownloadMailboxResult(
                success=False,
                message=e.message,
                error_code=e.code,
            )

        if message_count == 0:
            self._logger.info("No emails found in mailbox")
        else:
            self._logger.info(f"Found {message_count} emails in mailbox")

        # 3. 分批下载
        try:
            summary = await self._download_service.download(
                message_count,
                credentials,
                destination,
                max_concurrent=max_concurrent,
            )
        except DomainException as e:
            return DownloadMailboxResult(
                success=False,
                message_count=message_count,
                message=e.message,
                error_code=e.code,
            )

        return DownloadMailboxResult(
            success=True,
            message_count=message_count,
            summary=summary,
            message=(
                f"Saved {summary.total_saved} of {message_count} emails to {destination}"
            ),
        )

    @staticmethod
    def _validate_destination(destination: str) -> Path:
        if not destination or not str(destination).strip():
            raise InvalidInputException(field="destination", reason="path cannot be empty")

        path = Path(destination)
        if not path.is_dir():
            raise InvalidInputException(
                field="destination",
                reason=f"{destination} is not an existing directory",
            )
        return path

    @staticmethod
    def _validate_max_concurrent(max_concurrent: Optional[int]) -> Optional[int]:
        if max_concurrent is None:
            return None
        if isinstance(max_concurrent, bool) or not isinstance(max_concurrent, int) or max_concurrent < 1:
            raise InvalidInputException(
                field="max_concurrent",
                reason=f"must be a positive integer, got {max_concurrent!r}",
            )
        return max_concurrent
