"""
基础设施容器（InfraContainer）

管理所有基础设施组件：TLS 传输、邮件存储、IMAP 批次收取服务等。
依赖 ConfigContainer 获取配置。
"""

from dependency_injector import containers, providers

from domain.mail.value_objects.command_tags import CommandTags
from infrastructure.imap.transport import TlsTransport
from infrastructure.mail.services.imap_batch_fetch_service_impl import ImapBatchFetchServiceImpl
from infrastructure.mail.storage.eml_message_store import EmlMessageStore


class InfraContainer(containers.DeclarativeContainer):
    """基础设施容器 - 管理技术实现"""

    # 依赖配置容器
    config = providers.DependenciesContainer()

    # ============ IMAP ============

    # 命令标签（每个连接内部使用，可以安全共享）
    command_tags = providers.Singleton(CommandTags)

    # TLS 传输（无状态，每次 open() 新建连接）
    tls_transport = providers.Singleton(
        TlsTransport,
        host=config.settings.provided.imap_host,
        port=config.settings.provided.imap_port,
        connect_timeout=config.settings.provided.imap_connect_timeout,
        read_timeout=config.settings.provided.imap_read_timeout,
    )

    # ============ 存储 ============

    # 邮件存储（每个批次按目录新建实例）
    message_store = providers.Factory(EmlMessageStore)

    # ============ 邮件服务 ============

    # IMAP 批次收取服务
    # 注意: message_store 使用 .provider 传递工厂，每个批次自行创建存储实例
    batch_fetch_service = providers.Singleton(
        ImapBatchFetchServiceImpl,
        transport=tls_transport,
        mailbox=config.settings.provided.imap_mailbox,
        tags=command_tags,
        message_store_factory=message_store.provider,
    )
