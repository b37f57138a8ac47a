"""命令行入口"""

import argparse
import asyncio
import logging
from typing import Optional, Sequence

from application.commands.mail.download_mailbox import DownloadMailboxCommand
from application.handlers.mail.download_mailbox_handler import (
    DownloadMailboxHandler,
    DownloadMailboxResult,
)
from domain.common.exceptions import DomainException
from infrastructure.config.logging_config import configure_logging
from infrastructure.config.settings import Settings, get_settings
from infrastructure.containers import bootstrap
from interfaces.cli.prompts import PromptedConfig, prompt_config

logger = logging.getLogger(__name__)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mailbox-downloader",
        description="Download every message of an IMAP mailbox as .eml files.",
    )
    parser.add_argument(
        "--max-concurrent",
        type=int,
        default=settings.fetch_max_concurrent,
        help=f"maximum simultaneous IMAP connections (default: {settings.fetch_max_concurrent})",
    )
    return parser


def report(result: DownloadMailboxResult) -> None:
    """打印运行结果"""
    if not result.success:
        print(f"Failed to fetch emails: {result.message}")
        print("Please try again.")
        return

    summary = result.summary
    if result.message_count == 0:
        print("No emails found in mailbox")
        return

    print(f"Total emails fetched: {summary.total_saved}")
    if summary.has_errors:
        print(f"Encountered {summary.total_errored} errors during fetching")
        for failed in summary.failed_batches:
            print(
                f"  emails {failed.fetch_range.start} to {failed.fetch_range.end}: "
                f"{failed.error_type}: {failed.error_message}"
            )
    print(result.message)


async def run(
    handler: DownloadMailboxHandler,
    config: PromptedConfig,
    max_concurrent: Optional[int],
) -> DownloadMailboxResult:
    """执行一次下载"""
    command = DownloadMailboxCommand(
        username=config.username,
        password=config.password,
        destination=str(config.destination),
        max_concurrent=max_concurrent,
    )
    return await handler.handle(command)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    命令行主函数

    Returns:
        退出码：运行完成为 0，输入或邮件数量查询失败为 1
    """
    settings = get_settings()
    configure_logging(settings)
    args = build_parser(settings).parse_args(argv)

    print(f"{settings.app_name} {settings.app_version}")
    print("=" * 40)
    print(f"Using {args.max_concurrent} concurrent connections")

    try:
        config = prompt_config()
    except DomainException as e:
        logger.error(f"Failed to get configuration: {e}")
        print("Failed to get IMAP configuration. Please try again.")
        return 1

    boot = bootstrap(settings)
    handler = boot.app.download_mailbox_handler()

    logger.info("Starting IMAP email fetch")
    result = asyncio.run(run(handler, config, args.max_concurrent))
    report(result)
    return 0 if result.success else 1
