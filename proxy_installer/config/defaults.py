"""proxy-installer 的默认参数。Project-wide default values for proxy-installer.

These constants describe the baseline 3proxy deployment. Keeping them in one
place makes it easy to audit which paths and ports a provisioning run touches.
"""

SERVICE_NAME = "3proxy"
DEFAULT_PROXY_PORT = 1080
DEFAULT_SSH_PORT = 22
PROXY_PROTOCOL = "SOCKS5"

# 源码构建
DEFAULT_PROXY_VERSION = "0.9.4"
DOWNLOAD_URL_TEMPLATE = "https://github.com/3proxy/3proxy/archive/{version}.tar.gz"
WORK_DIR = "/tmp/3proxy_install"
BUILD_MAKEFILE = "Makefile.Linux"
REQUIRED_TOOLS = ("gcc", "make", "wget", "tar")
BINARY_CANDIDATES = ("/usr/bin/3proxy", "/bin/3proxy")

# 配置文件
CONFIG_DIR = "/usr/local/3proxy/conf"
CONFIG_PATH = f"{CONFIG_DIR}/3proxy.cfg"
LOG_PATH = "/var/log/3proxy.log"
LOG_FILE_MODE = 0o666
DEFAULT_NAMESERVERS = ("8.8.8.8", "1.1.1.1")
DEFAULT_NSCACHE = 65536
DEFAULT_TIMEOUTS = (1, 5, 30, 60, 180, 1800, 15, 60)
DEFAULT_LOG_FORMAT = "- +_L%t.%. %N.%p %E %U %C:%c %R:%r %O %I %h %T"
PRIMARY_USERNAME = "proxyuser"
SECONDARY_USERNAME = "testuser"
PASSWORD_BYTES = 12

# systemd
UNIT_PATH = f"/etc/systemd/system/{SERVICE_NAME}.service"

# 等待时间（秒）
PORT_SETTLE_SECONDS = 2
SERVICE_SETTLE_SECONDS = 3

# 验证
DEFAULT_CHECK_URL = "http://httpbin.org/ip"
CHECK_TIMEOUT_SECONDS = 15
