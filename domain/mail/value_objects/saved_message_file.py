"""已保存邮件文件值对象"""

from dataclasses import dataclass
from pathlib import Path

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


@dataclass(frozen=True)
class SavedMessageFile(BaseValueObject):
    """
    单封邮件对应的目标文件

    文件名为 email_<序号补零到 5 位>.eml，内容为服务器返回的原始字节。
    同一序号重复下载时覆盖已有文件。

    Attributes:
        destination: 保存目录
        message_id: 消息序号
    """

    destination: Path
    message_id: int

    def validate(self) -> None:
        """验证消息序号"""
        if self.message_id < 1:
            raise InvalidValueObjectException(
                value_object_type="SavedMessageFile",
                value=self.message_id,
                reason=f"Message id must be >= 1, got {self.message_id}"
            )

    @property
    def filename(self) -> str:
        """文件名"""
        return f"email_{self.message_id:05d}.eml"

    @property
    def path(self) -> Path:
        """完整路径"""
        return Path(self.destination) / self.filename
