"""异步邮箱下载服务实现 - 有界并发批次下载"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from application.mail.services.mailbox_download_service import MailboxDownloadService
from domain.common.exceptions import BatchTaskError, DomainException, InvalidInputException
from domain.mail.services.batch_fetch_service import BatchFetchService
from domain.mail.value_objects.batch_result import BatchResult, RunSummary
from domain.mail.value_objects.credentials import Credentials
from domain.mail.value_objects.fetch_range import FetchRange


class AsyncMailboxDownloadService(MailboxDownloadService):
    """
    异步邮箱下载服务实现

    使用 asyncio 调度批次，阻塞的 IMAP 交换在线程池中执行：
    - 每个区间一个任务，使用 Semaphore 限制同时执行的批次数
    - 线程池大小与并发上限一致，超时的批次也不会让连接数超过上限
    - 相邻两次任务启动之间插入固定间隔，避免连接请求集中爆发
    - 使用 asyncio.gather(return_exceptions=True) 收集结果，
      单批次失败不会取消或阻塞其他批次
    - 可选的单批次超时（使用 wait_for），从批次实际开始执行时计时
    """

    def __init__(
        self,
        fetch_service: BatchFetchService,
        batch_size: int = MailboxDownloadService.DEFAULT_BATCH_SIZE,
        max_concurrent_connections: int = MailboxDownloadService.DEFAULT_MAX_CONCURRENT,
        launch_delay: float = MailboxDownloadService.DEFAULT_LAUNCH_DELAY,
        batch_timeout: Optional[float] = MailboxDownloadService.DEFAULT_BATCH_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化下载服务

        Args:
            fetch_service: 批次收取服务（Worker）
            batch_size: 每批邮件数，默认 10
            max_concurrent_connections: 默认最大并发连接数，默认 5
            launch_delay: 批次启动间隔（秒），默认 0.05 秒
            batch_timeout: 单批次超时（秒），None 表示不限制
            logger: 可选的日志记录器
        """
        self._fetch_service = fetch_service
        self._batch_size = batch_size
        self._max_concurrent = max_concurrent_connections
        self._launch_delay = launch_delay
        self._batch_timeout = batch_timeout
        self._logger = logger or logging.getLogger(__name__)

    @property
    def batch_size(self) -> int:
        """获取每批邮件数"""
        return self._batch_size

    @property
    def max_concurrent_connections(self) -> int:
        """获取默认最大并发连接数"""
        return self._max_concurrent

    @property
    def launch_delay(self) -> float:
        """获取批次启动间隔（秒）"""
        return self._launch_delay

    async def download(
        self,
        total_count: int,
        credentials: Credentials,
        destination: Path,
        max_concurrent: Optional[int] = None,
    ) -> RunSummary:
        """
        下载邮箱中的全部邮件

        Args:
            total_count: 邮件总数
            credentials: 登录凭证
            destination: 保存目录
            max_concurrent: 本次运行的并发上限，None 时使用默认值

        超时的批次记为失败后不会被中止：它的线程可能在本方法返回后继续写入
        email_XXXXX.eml，因此该区间的部分文件可能存在，但不计入 total_saved。

        Returns:
            RunSummary 运行汇总

        Raises:
            InvalidInputException: 并发上限不是正整数
        """
        limit = self._max_concurrent if max_concurrent is None else max_concurrent
        if limit < 1:
            raise InvalidInputException(
                field="max_concurrent",
                reason=f"must be a positive integer, got {limit}",
            )

        if total_count == 0:
            self._logger.info("No emails to fetch")
            return RunSummary.empty()

        ranges = FetchRange.partition(total_count, self._batch_size)
        self._logger.info(
            f"Fetching {total_count} emails in {len(ranges)} batches of {self._batch_size} "
            f"with {limit} concurrent connections..."
        )

        semaphore = asyncio.Semaphore(limit)
        executor = ThreadPoolExecutor(max_workers=limit, thread_name_prefix="imap-fetch-")
        try:
            tasks: List[asyncio.Task] = []
            for index, fetch_range in enumerate(ranges):
                if index > 0 and self._launch_delay > 0:
                    await asyncio.sleep(self._launch_delay)
                tasks.append(
                    asyncio.create_task(
                        self._fetch_batch_with_limit(
                            semaphore, executor, fetch_range, credentials, Path(destination)
                        )
                    )
                )

            outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        finally:
            # 超时的批次仍可能在线程中运行，不阻塞事件循环等待它们
            executor.shutdown(wait=False)

        results = [
            self._to_batch_result(fetch_range, outcome)
            for fetch_range, outcome in zip(ranges, outcomes)
        ]
        summary = RunSummary.from_results(results)

        self._logger.info(f"Total emails fetched: {summary.total_saved}")
        if summary.has_errors:
            self._logger.warning(f"Encountered {summary.total_errored} errors during fetching")
        return summary

    async def _fetch_batch_with_limit(
        self,
        semaphore: asyncio.Semaphore,
        executor: ThreadPoolExecutor,
        fetch_range: FetchRange,
        credentials: Credentials,
        destination: Path,
    ) -> int:
        """
        带并发控制和超时的单批次下载

        Returns:
            保存的邮件数量

        Raises:
            BatchTaskError: 批次超时
            DomainException: Worker 抛出的错误
        """
        await semaphore.acquire()
        self._logger.debug(f"Acquired slot for range {fetch_range}")
        loop = asyncio.get_running_loop()
        try:
            future = loop.run_in_executor(
                executor,
                self._fetch_service.fetch_range,
                fetch_range,
                credentials,
                destination,
            )
        except BaseException:
            semaphore.release()
            raise

        # 名额在线程结束时才释放，超时的批次继续占用名额直到线程退出
        future.add_done_callback(lambda _: semaphore.release())

        if self._batch_timeout is None:
            return await future

        try:
            return await asyncio.wait_for(asyncio.shield(future), timeout=self._batch_timeout)
        except asyncio.TimeoutError as e:
            raise BatchTaskError(
                f"Range {fetch_range} timed out after {self._batch_timeout}s"
            ) from e

    def _to_batch_result(self, fetch_range: FetchRange, outcome: object) -> BatchResult:
        """
        将任务结果转换为 BatchResult

        失败批次的 saved_count 为 0，即使超时批次的线程之后仍写入了部分文件。
        """
        if isinstance(outcome, BaseException):
            error = outcome
            if not isinstance(error, DomainException):
                error = BatchTaskError(f"Unexpected error: {outcome!r}")
            self._logger.error(
                f"Failed to fetch emails {fetch_range.start} to {fetch_range.end}: {error}"
            )
            return BatchResult.failure(fetch_range, error)

        self._logger.info(
            f"Successfully fetched emails {fetch_range.start} to {fetch_range.end} "
            f"({outcome} emails)"
        )
        return BatchResult.success(fetch_range, outcome)
