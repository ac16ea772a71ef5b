"""模块入口，使其可通过 ``python -m proxy_installer`` 直接运行。Module entry point for ``python -m``."""

from __future__ import annotations

import sys

from proxy_installer.cli import main


def run() -> None:
    """Dispatch to :func:`proxy_installer.cli.main`."""

    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover - module execution hook
    run()
