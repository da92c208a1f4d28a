import uvicorn
import os
import sys


def is_venv():
    return (hasattr(sys, 'real_prefix') or
            (hasattr(sys, 'base_prefix') and sys.base_prefix != sys.prefix))


if __name__ == "__main__":
    if not is_venv():
        print("⚠️ Warning: not running inside a virtual environment. Using system Python.")

    # Ensure backend is in path
    backend_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "backend")
    sys.path.insert(0, backend_dir)

    from app.core.config import settings

    print("🚀 Starting Command Center Backend...")
    print(f"🐍 Python: {sys.executable}")

    uvicorn.run(
        "app.main:socket_app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development,
        reload_dirs=[backend_dir],
        app_dir=backend_dir,
        log_level=settings.LOG_LEVEL.lower(),
    )
