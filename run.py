"""
Drive - Quick Start Script
Run this to start the development server
"""

import uvicorn
from app.config import settings

if __name__ == "__main__":
    print("=" * 60)
    print(f"Starting {settings.APP_NAME} API Server")
    print("=" * 60)
    print(f"Environment: {settings.ENVIRONMENT}")
    print(f"Server: http://{settings.HOST}:{settings.PORT}")
    print(f"Storage backend: {settings.STORAGE_BACKEND}")
    if settings.DEBUG:
        print(f"API Docs: http://{settings.HOST}:{settings.PORT}/docs")
    print("=" * 60)
    print("\nMake sure you have:")
    print("  - PostgreSQL running")
    print("  - .env file configured (DATABASE_URL, IDENTITY_JWT_KEY, BLOB_*)")
    print("  - Database migrations run (alembic upgrade head) or AUTO_CREATE_TABLES=true")
    print("\nPress CTRL+C to stop\n")

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
