"""
配置容器（ConfigContainer）

提供全局 Settings 单例，其他容器通过 DependenciesContainer 依赖它。
"""

from dependency_injector import containers, providers

from infrastructure.config.settings import get_settings


class ConfigContainer(containers.DeclarativeContainer):
    """配置容器"""

    settings = providers.Singleton(get_settings)
