"""
ASGI entry point for deployment (Railway, Render, any uvicorn host).
Deploy: uvicorn app:app --port $PORT

This file re-exports the proxy API for platforms that expect app.py at project root.
"""

import sys
from pathlib import Path

# Ensure project root in path
sys.path.insert(0, str(Path(__file__).resolve().parent))

# Delegate to real app; missing settings abort startup here
from src.api.drive import create_app

app = create_app()
