"""
Mailbox Downloader - 命令行入口

运行：
    python main.py [--max-concurrent N]

配置（环境变量或 .env）：
    IMAP_HOST, IMAP_PORT, IMAP_MAILBOX, FETCH_BATCH_SIZE, FETCH_MAX_CONCURRENT,
    IMAP_READ_TIMEOUT, LOG_LEVEL, LOG_FILE
"""

import sys

from interfaces.cli import main


if __name__ == "__main__":
    sys.exit(main())
