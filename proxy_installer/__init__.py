"""proxy-installer：3proxy SOCKS5 代理一键部署工具。

功能概览：
1. 检测系统、安装构建依赖、清理端口冲突。
2. 编译安装固定版本的 3proxy，生成带新凭证的配置文件。
3. 注册 systemd 服务、放行防火墙端口、启动并验证代理可用。

One-shot provisioning of a 3proxy SOCKS5 server on a single host, either the
local machine or one server reached over SSH.
"""

from __future__ import annotations

__version__ = "0.1.0"

from proxy_installer.cli import main

__all__ = ["main", "__version__"]
