"""值对象基类"""

from dataclasses import dataclass


@dataclass(frozen=True)
class BaseValueObject:
    """
    值对象基类

    值对象不可变（frozen dataclass），按属性值判断相等性。
    子类可覆盖 validate() 实现自身的不变量校验，
    构造完成后会自动调用。
    """

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """验证值对象的有效性，默认不做任何校验"""
