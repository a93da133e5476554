import sys

from src.attachments.cli import main

sys.exit(main())
