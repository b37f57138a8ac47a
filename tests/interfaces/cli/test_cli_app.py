"""命令行入口单元测试"""

from unittest.mock import AsyncMock, Mock, patch

from application.handlers.mail.download_mailbox_handler import DownloadMailboxResult
from domain.common.exceptions import InvalidInputException
from domain.mail.value_objects.batch_result import BatchResult, RunSummary
from domain.mail.value_objects.fetch_range import FetchRange
from infrastructure.config.settings import Settings
from interfaces.cli.app import build_parser, main, report
from interfaces.cli.prompts import PromptedConfig


class TestBuildParser:
    """参数解析测试"""

    def test_default_max_concurrent_from_settings(self):
        """测试并发上限默认取自配置"""
        parser = build_parser(Settings(_env_file=None, fetch_max_concurrent=7))

        assert parser.parse_args([]).max_concurrent == 7
        assert parser.parse_args(["--max-concurrent", "2"]).max_concurrent == 2


class TestReport:
    """结果输出测试"""

    def test_failure(self, capsys):
        """测试失败结果"""
        report(DownloadMailboxResult(success=False, message="Authentication failed"))

        out = capsys.readouterr().out
        assert "Failed to fetch emails: Authentication failed" in out

    def test_empty_mailbox(self, capsys):
        """测试空邮箱"""
        report(DownloadMailboxResult(success=True, message_count=0, summary=RunSummary.empty()))

        assert "No emails found in mailbox" in capsys.readouterr().out

    def test_partial_failure_lists_failed_ranges(self, capsys):
        """测试列出失败区间"""
        summary = RunSummary.from_results([
            BatchResult.success(FetchRange(1, 10), 10),
            BatchResult.failure(FetchRange(11, 20), TimeoutError("read timed out")),
        ])
        report(DownloadMailboxResult(success=True, message_count=20, summary=summary, message="Saved 10 of 20"))

        out = capsys.readouterr().out
        assert "Total emails fetched: 10" in out
        assert "Encountered 1 errors during fetching" in out
        assert "emails 11 to 20: TimeoutError: read timed out" in out


class TestMain:
    """主函数测试"""

    def _patches(self, settings, config=None, prompt_error=None, result=None):
        handler = Mock()
        handler.handle = AsyncMock(return_value=result)
        boot = Mock()
        boot.app.download_mailbox_handler.return_value = handler

        prompt = Mock(return_value=config, side_effect=prompt_error)
        return handler, [
            patch("interfaces.cli.app.get_settings", return_value=settings),
            patch("interfaces.cli.app.configure_logging"),
            patch("interfaces.cli.app.prompt_config", prompt),
            patch("interfaces.cli.app.bootstrap", return_value=boot),
        ]

    def _run(self, patches, argv):
        for p in patches:
            p.start()
        try:
            return main(argv)
        finally:
            for p in patches:
                p.stop()

    def test_success(self, tmp_path):
        """测试运行完成时退出码为 0"""
        config = PromptedConfig(username="user@gmail.com", password="pw", destination=tmp_path)
        result = DownloadMailboxResult(
            success=True, message_count=3, summary=RunSummary(total_saved=3), message="Saved 3 of 3"
        )
        handler, patches = self._patches(Settings(_env_file=None), config=config, result=result)

        assert self._run(patches, ["--max-concurrent", "4"]) == 0

        command = handler.handle.await_args.args[0]
        assert command.username == "user@gmail.com"
        assert command.destination == str(tmp_path)
        assert command.max_concurrent == 4

    def test_failed_run_returns_one(self, tmp_path):
        """测试数量查询失败时退出码为 1"""
        config = PromptedConfig(username="user@gmail.com", password="pw", destination=tmp_path)
        result = DownloadMailboxResult(success=False, message="refused", error_code="IMAP_CONNECTION_ERROR")
        _, patches = self._patches(Settings(_env_file=None), config=config, result=result)

        assert self._run(patches, []) == 1

    def test_prompt_error_returns_one(self, capsys):
        """测试输入错误时不建立连接"""
        error = InvalidInputException(field="email", reason="Invalid email format")
        handler, patches = self._patches(Settings(_env_file=None), prompt_error=error)

        assert self._run(patches, []) == 1
        handler.handle.assert_not_called()
        assert "Failed to get IMAP configuration" in capsys.readouterr().out
