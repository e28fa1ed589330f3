"""HTTP layer: application factory, request pipeline and routes."""
from __future__ import annotations
