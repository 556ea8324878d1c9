# makerchip/asgi.py
"""
ASGI entrypoint para Uvicorn.

Exportamos tanto `fastapi_app` como `app`:
  - uvicorn makerchip.asgi:fastapi_app ...
  - uvicorn makerchip.asgi:app ...
"""
from .app import app as fastapi_app

app = fastapi_app
