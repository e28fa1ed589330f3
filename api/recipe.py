"""
Serverless function entrypoint for the Recipe service.

The platform's Python runtime imports this file once per cold start and
serves the module-level ASGI `app`. Bootstrap runs during that import, so a
configuration error fails the cold start before any request is accepted.
"""
from __future__ import annotations

import os
import sys

# Add src/ to the Python path; the working directory is the project root
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
src_path = os.path.join(project_root, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from api.app import create_app
from core.variants import RECIPE

app = create_app(RECIPE)

__all__ = ["app"]
