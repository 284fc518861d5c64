import sys

from methods_bridge.main import run

sys.exit(run())
