from __future__ import annotations

import sys

from bpm_sdk.cli import main as run_cli
from bpm_sdk.configuration import load_settings
from plugins.polkadot import build_plugin


def main() -> None:
    plugin = build_plugin(settings=load_settings())
    sys.exit(run_cli(plugin))


if __name__ == "__main__":
    main()
