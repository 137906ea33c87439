"""
Centralized path helpers (flat layout).
"""
from __future__ import annotations
from pathlib import Path

# This file lives at pokebattle/core/paths.py
ROOT = Path(__file__).resolve().parents[2]
ASSETS = ROOT / "assets"
CATALOG = ASSETS / "catalog"
ENCOUNTERS = ASSETS / "encounters"
SCHEMA = ROOT / "schema"
