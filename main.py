"""
CoughScan - Main Entry Point

Example usage:
    python main.py path/to/cough.wav
    python main.py --config config/config.yaml --batch recordings/
"""

import sys

from coughscan.cli import main


if __name__ == "__main__":
    sys.exit(main())
