"""批次结果与运行汇总值对象"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from domain.common.base_value_object import BaseValueObject
from domain.mail.value_objects.fetch_range import FetchRange


@dataclass(frozen=True)
class BatchResult(BaseValueObject):
    """
    单个批次的执行结果

    成功时携带保存数量，失败时携带错误类型和错误消息。创建后不再修改。

    Attributes:
        fetch_range: 批次区间
        saved_count: 成功保存的邮件数量
        error_type: 错误类型名称（失败时）
        error_message: 错误消息（失败时）
    """

    fetch_range: FetchRange
    saved_count: int = 0
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        """批次是否成功"""
        return self.error_type is None

    @classmethod
    def success(cls, fetch_range: FetchRange, saved_count: int) -> "BatchResult":
        """工厂方法：成功结果"""
        return cls(fetch_range=fetch_range, saved_count=saved_count)

    @classmethod
    def failure(cls, fetch_range: FetchRange, error: BaseException) -> "BatchResult":
        """工厂方法：失败结果"""
        return cls(
            fetch_range=fetch_range,
            error_type=type(error).__name__,
            error_message=str(error) or type(error).__name__,
        )


@dataclass(frozen=True)
class RunSummary(BaseValueObject):
    """
    一次下载运行的汇总

    Attributes:
        total_saved: 所有成功批次保存的邮件总数
        total_errored: 失败批次数量
        failed_batches: 失败批次的结果（用于向用户报告失败区间）
    """

    total_saved: int = 0
    total_errored: int = 0
    failed_batches: Tuple[BatchResult, ...] = ()

    @classmethod
    def empty(cls) -> "RunSummary":
        """空汇总（邮箱中没有邮件）"""
        return cls()

    @classmethod
    def from_results(cls, results: Iterable[BatchResult]) -> "RunSummary":
        """
        汇总所有批次结果

        Args:
            results: 批次结果（顺序任意）

        Returns:
            RunSummary 实例
        """
        total_saved = 0
        failed = []
        for result in results:
            if result.succeeded:
                total_saved += result.saved_count
            else:
                failed.append(result)

        failed.sort(key=lambda r: r.fetch_range.start)
        return cls(
            total_saved=total_saved,
            total_errored=len(failed),
            failed_batches=tuple(failed),
        )

    @property
    def has_errors(self) -> bool:
        """是否有失败批次"""
        return self.total_errored > 0
