"""
应用容器（AppContainer）

管理应用层组件：下载服务、命令处理器。
依赖 InfraContainer 获取基础设施。
"""

from dependency_injector import containers, providers

from application.handlers.mail.download_mailbox_handler import DownloadMailboxHandler
from application.mail.services.async_mailbox_download_service import AsyncMailboxDownloadService


class AppContainer(containers.DeclarativeContainer):
    """应用容器 - 管理应用层服务"""

    # 依赖配置容器
    config = providers.DependenciesContainer()

    # 依赖基础设施容器
    infra = providers.DependenciesContainer()

    # ============ 应用服务 ============

    # 邮箱下载服务（单例，整个应用只需一个实例）
    mailbox_download_service = providers.Singleton(
        AsyncMailboxDownloadService,
        fetch_service=infra.batch_fetch_service,
        batch_size=config.settings.provided.fetch_batch_size,
        max_concurrent_connections=config.settings.provided.fetch_max_concurrent,
        launch_delay=config.settings.provided.fetch_launch_delay,
        batch_timeout=config.settings.provided.fetch_batch_timeout,
    )

    # ============ 命令处理器 ============

    # 下载邮箱 Handler
    download_mailbox_handler = providers.Factory(
        DownloadMailboxHandler,
        fetch_service=infra.batch_fetch_service,
        download_service=mailbox_download_service,
    )
