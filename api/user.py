"""
Serverless function entrypoint for the User service.

Same contract as api/recipe.py: the runtime serves the module-level ASGI
`app`, and bootstrap (including seeding) runs during the cold-start import.
"""
from __future__ import annotations

import os
import sys

project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
src_path = os.path.join(project_root, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from api.app import create_app
from core.variants import USER

app = create_app(USER)

__all__ = ["app"]
