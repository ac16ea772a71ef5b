#!/usr/bin/env python3
"""3proxy 一键安装入口。Entry point for the one-shot 3proxy installer.

支持 Ubuntu/Debian/CentOS/RHEL。直接以 root 运行即部署本机；
传入 ``--host`` 则通过 SSH 部署到一台远端服务器。
"""

from __future__ import annotations

import sys

if sys.version_info < (3, 9):
    raise SystemExit(
        "当前 Python 解释器版本过低。本工具至少需要 Python 3.9，请改用 python3 运行。"
    )

from proxy_installer.cli import main


if __name__ == "__main__":
    sys.exit(main())
