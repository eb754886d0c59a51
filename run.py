"""
Simple script to run the Medical Report Structuring service
"""
import os
import sys

from medreport.settings import Settings

def check_dependencies():
    try:
        import fitz  # noqa
        import numpy  # noqa
        import fastapi  # noqa
        import multipart  # noqa
        print("✅ All Python dependencies found")
        return True
    except ImportError as e:
        print(f"❌ Missing dependency: {e}")
        print("Please run: pip install -e .")
        return False

def create_directories(settings):
    if settings.debug_dump_dir:
        os.makedirs(settings.debug_dump_dir, exist_ok=True)
        print(f"✅ Debug dumps will be written to {settings.debug_dump_dir}")

def main():
    print("Medical Report Structuring Service")
    print("=" * 40)

    if not check_dependencies():
        return 1

    settings = Settings.from_env()
    create_directories(settings)

    print("🚀 Starting FastAPI server...")
    print(f"📱 Web interface: http://{settings.host}:{settings.port}")
    print(f"📚 API docs: http://{settings.host}:{settings.port}/docs")
    print("Press Ctrl+C to stop")

    try:
        import uvicorn
        uvicorn.run("main:app", host=settings.host, port=settings.port, reload=True)
    except KeyboardInterrupt:
        print("\n👋 Server stopped")
    except Exception as e:
        print(f"❌ Error starting server: {e}")
        return 1

    return 0

if __name__ == "__main__":
    sys.exit(main())
