"""邮件领域服务模块"""

from domain.mail.services.batch_fetch_service import BatchFetchService

__all__ = ["BatchFetchService"]
