"""批次消息范围值对象"""

from dataclasses import dataclass
from typing import List

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


@dataclass(frozen=True)
class FetchRange(BaseValueObject):
    """
    一个批次负责的连续消息序号区间（闭区间）

    Attributes:
        start: 起始序号（>= 1）
        end: 结束序号（>= start）
    """

    start: int
    end: int

    def validate(self) -> None:
        """验证区间有效性"""
        if self.start < 1:
            raise InvalidValueObjectException(
                value_object_type="FetchRange",
                value=self.start,
                reason=f"Range start must be >= 1, got {self.start}"
            )

        if self.end < self.start:
            raise InvalidValueObjectException(
                value_object_type="FetchRange",
                value=(self.start, self.end),
                reason=f"Range end {self.end} is before start {self.start}"
            )

    @property
    def size(self) -> int:
        """区间内的消息数量"""
        return self.end - self.start + 1

    def to_sequence_set(self) -> str:
        """转换为 IMAP 序号集合语法，例如 11:20"""
        return f"{self.start}:{self.end}"

    def __str__(self) -> str:
        return f"[{self.start}, {self.end}]"

    @classmethod
    def partition(cls, total_count: int, batch_size: int) -> List["FetchRange"]:
        """
        将 [1, total_count] 划分为升序、连续、互不重叠的区间

        每个区间大小不超过 batch_size，最后一个区间可能更短。
        total_count 为 0 时返回空列表。

        Args:
            total_count: 邮箱中的消息总数
            batch_size: 每个批次的最大消息数

        Returns:
            区间列表，长度为 ceil(total_count / batch_size)

        Raises:
            InvalidValueObjectException: 参数无效
        """
        if batch_size < 1:
            raise InvalidValueObjectException(
                value_object_type="FetchRange",
                value=batch_size,
                reason=f"Batch size must be >= 1, got {batch_size}"
            )

        if total_count < 0:
            raise InvalidValueObjectException(
                value_object_type="FetchRange",
                value=total_count,
                reason=f"Total count cannot be negative, got {total_count}"
            )

        return [
            cls(start=start, end=min(start + batch_size - 1, total_count))
            for start in range(1, total_count + 1, batch_size)
        ]
