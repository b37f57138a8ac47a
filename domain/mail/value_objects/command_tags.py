"""IMAP 命令标签值对象"""

from dataclasses import dataclass

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


@dataclass(frozen=True)
class CommandTags(BaseValueObject):
    """
    每种命令使用的固定标签

    标签只在单个连接内部用于匹配完成行，不同连接可以复用相同的标签，
    因此这里不需要进程级的计数器。

    Attributes:
        login: LOGIN 命令标签
        select: SELECT 命令标签
        fetch: FETCH 命令标签
        logout: LOGOUT 命令标签
    """

    login: str = "A001"
    select: str = "A002"
    fetch: str = "A003"
    logout: str = "A999"

    def validate(self) -> None:
        """标签必须是非空且不含空白的 ASCII 字符串，且互不相同"""
        tags = (self.login, self.select, self.fetch, self.logout)
        for tag in tags:
            if not tag or not tag.isascii() or any(c.isspace() for c in tag) or tag in ("*", "+"):
                raise InvalidValueObjectException(
                    value_object_type="CommandTags",
                    value=tag,
                    reason=f"Invalid command tag: {tag!r}"
                )

        if len(set(tags)) != len(tags):
            raise InvalidValueObjectException(
                value_object_type="CommandTags",
                value=tags,
                reason="Command tags must be distinct"
            )
