"""交互式输入"""

import getpass
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from domain.common.exceptions import DomainException, InvalidInputException

InputFunc = Callable[[str], str]


class DirectoryError(DomainException):
    """保存目录创建失败"""

    default_code = "DIRECTORY_ERROR"


@dataclass
class PromptedConfig:
    """
    交互式收集到的配置

    Attributes:
        username: 邮箱地址
        password: 应用专用密码
        destination: 保存目录（已确保存在）
    """

    username: str
    password: str = field(repr=False)
    destination: Path


def prompt_email(input_func: InputFunc = input) -> str:
    """提示输入邮箱地址并做基本格式校验"""
    value = _read_non_empty(input_func, "Enter your Gmail address: ", "email")
    if "@" not in value or "." not in value:
        raise InvalidInputException(field="email", reason="Invalid email format")
    return value


def prompt_password(input_func: InputFunc = getpass.getpass) -> str:
    """提示输入应用专用密码（不回显）"""
    return _read_non_empty(input_func, "Enter your app password: ", "password")


def prompt_directory_path(input_func: InputFunc = input) -> Path:
    """提示输入保存目录，不存在时创建"""
    value = _read_non_empty(input_func, "Enter absolute path for saving emails: ", "directory")
    return ensure_directory(Path(value))


def ensure_directory(path: Path) -> Path:
    """
    确保目录存在

    Raises:
        DirectoryError: 创建失败或路径已存在但不是目录
    """
    if path.is_dir():
        print(f"Directory exists: {path}")
        return path

    print(f"Directory doesn't exist. Creating: {path}")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryError(f"Directory creation failed: {e}") from e
    return path


def prompt_config(
    input_func: InputFunc = input,
    password_func: InputFunc = getpass.getpass,
) -> PromptedConfig:
    """依次提示输入邮箱、密码和保存目录"""
    username = prompt_email(input_func)
    password = prompt_password(password_func)
    destination = prompt_directory_path(input_func)
    return PromptedConfig(username=username, password=password, destination=destination)


def _read_non_empty(input_func: InputFunc, prompt: str, field_name: str) -> str:
    value = input_func(prompt).strip()
    if not value:
        raise InvalidInputException(field=field_name, reason="Empty input provided")
    return value
