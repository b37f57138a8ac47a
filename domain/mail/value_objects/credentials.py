"""登录凭证值对象"""

from dataclasses import dataclass, field

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


@dataclass(frozen=True)
class Credentials(BaseValueObject):
    """
    IMAP 登录凭证

    所有批次 Worker 共享同一只读实例。密码不参与 repr，
    避免出现在日志或异常信息中。

    Attributes:
        username: 邮箱地址/用户名
        password: 密码（通常是应用专用密码）
    """

    username: str
    password: str = field(repr=False)

    def validate(self) -> None:
        """验证凭证非空"""
        if not self.username or not self.username.strip():
            raise InvalidValueObjectException(
                value_object_type="Credentials",
                value=self.username,
                reason="Username cannot be empty"
            )

        if not self.password:
            raise InvalidValueObjectException(
                value_object_type="Credentials",
                value="***",
                reason="Password cannot be empty"
            )
