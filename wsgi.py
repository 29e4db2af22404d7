"""WSGI entry point for production server."""

import os
import sys

# Ensure the project root is in the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from intake import create_app

# Capture the full traceback during early startup so a worker that fails to
# boot leaves a readable log
try:
    app = create_app()
except Exception:
    import traceback

    print("\nFATAL: Failed to create Flask application during startup:\n", file=sys.stderr)
    traceback.print_exc()
    raise

if __name__ == "__main__":
    app.run()
