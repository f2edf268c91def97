#!/usr/bin/env python
"""Script to run the Task Tracker API server."""
import sys
from pathlib import Path

# Make the task_tracker package importable when run from a checkout
script_dir = Path(__file__).resolve().parent
sys.path.insert(0, str(script_dir))

import uvicorn

from task_tracker.config import DEBUG, HOST, PORT


def main():
    uvicorn.run(
        "task_tracker.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG
    )


if __name__ == "__main__":
    main()
