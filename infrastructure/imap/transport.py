"""IMAP TLS 传输层"""

import logging
import socket
import ssl
from typing import Optional, Protocol

from domain.common.exceptions import ImapConnectionError, ImapTlsError


class ImapStream(Protocol):
    """
    双向字节流

    ssl.SSLSocket 天然满足该协议，测试中可以用内存实现替代。
    """

    def sendall(self, data: bytes) -> None:
        ...

    def recv(self, bufsize: int) -> bytes:
        ...

    def close(self) -> None:
        ...


class ImapTransport(Protocol):
    """可以打开 ImapStream 的传输层"""

    def open(self) -> ImapStream:
        ...


class TlsTransport:
    """
    隐式 TLS 传输（IMAPS，默认端口 993）

    每次 open() 只尝试一次：
    1. 建立 TCP 连接，失败抛出 ImapConnectionError
    2. 使用系统信任根完成 TLS 握手并校验主机名，失败抛出 ImapTlsError
    3. 为后续每次阻塞读取设置超时，服务器无响应时以 ImapTimeoutError 结束
    """

    DEFAULT_CONNECT_TIMEOUT = 30.0  # 秒
    DEFAULT_READ_TIMEOUT = 60.0  # 秒

    def __init__(
        self,
        host: str,
        port: int = 993,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: Optional[float] = DEFAULT_READ_TIMEOUT,
        ssl_context: Optional[ssl.SSLContext] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化传输层

        Args:
            host: IMAP 服务器地址
            port: IMAP 服务器端口
            connect_timeout: TCP 连接与 TLS 握手超时（秒）
            read_timeout: 单次读取超时（秒），None 表示无限等待
            ssl_context: 可选的 SSL 上下文，默认 ssl.create_default_context()
            logger: 可选的日志记录器
        """
        self._host = host
        self._port = port
        self._connect_timeout = connect_timeout
        self._read_timeout = read_timeout
        self._ssl_context = ssl_context
        self._logger = logger or logging.getLogger(__name__)

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    def open(self) -> ssl.SSLSocket:
        """
        打开一个 TLS 连接

        Returns:
            已完成握手的 SSLSocket

        Raises:
            ImapConnectionError: 域名解析或 TCP 连接失败
            ImapTlsError: TLS 握手或证书校验失败
        """
        self._logger.debug(f"Connecting to {self._host}:{self._port}")

        try:
            raw_sock = socket.create_connection(
                (self._host, self._port),
                timeout=self._connect_timeout,
            )
        except socket.gaierror as e:
            raise ImapConnectionError(
                message=f"Failed to resolve hostname: {e}",
                server=self._host,
                port=self._port,
            ) from e
        except (socket.timeout, TimeoutError) as e:
            raise ImapConnectionError(
                message=f"Connection timed out after {self._connect_timeout} seconds",
                server=self._host,
                port=self._port,
            ) from e
        except OSError as e:
            raise ImapConnectionError(
                message=str(e),
                server=self._host,
                port=self._port,
            ) from e

        context = self._ssl_context or ssl.create_default_context()
        try:
            tls_sock = context.wrap_socket(raw_sock, server_hostname=self._host)
        except (ssl.SSLError, ssl.CertificateError) as e:
            raw_sock.close()
            raise ImapTlsError(
                message=f"SSL/TLS error: {e}",
                server=self._host,
                port=self._port,
            ) from e
        except OSError as e:
            raw_sock.close()
            raise ImapConnectionError(
                message=f"Connection lost during TLS handshake: {e}",
                server=self._host,
                port=self._port,
            ) from e

        tls_sock.settimeout(self._read_timeout)
        self._logger.debug(
            f"TLS established with {self._host}:{self._port} ({tls_sock.version()})"
        )
        return tls_sock
