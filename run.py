"""
Opsboard — Standalone Server

Boots the API from a single Python command:
  python run.py

Starts:
  - FastAPI API on port 8000
  - In-memory demo data unless DATA_SOURCE=postgres

Usage:
  pip install -e .
  python run.py
"""
import os
import sys

# Set working directory
project_root = os.path.dirname(os.path.abspath(__file__))
os.chdir(project_root)

# Add service paths
sys.path.insert(0, os.path.join(project_root, "services", "api"))

if __name__ == "__main__":
    import uvicorn
    from config import settings

    print("=" * 60)
    print("  OPSBOARD — City Operations Dashboard API")
    print("=" * 60)
    print(f"  API:      http://localhost:{settings.APP_PORT}/docs")
    print(f"  Health:   http://localhost:{settings.APP_PORT}/health")
    print(f"  Metrics:  http://localhost:{settings.APP_PORT}/metrics")
    print(f"  Source:   {settings.DATA_SOURCE}")
    print("=" * 60)

    uvicorn.run(
        "main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=settings.APP_DEBUG,
        reload_dirs=[os.path.join(project_root, "services", "api")],
    )
