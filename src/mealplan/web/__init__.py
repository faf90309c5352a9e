"""HTTP surface — the FastAPI board app served by uvicorn.

The web layer may import from services, domain, and infrastructure.
Handlers translate ServiceResult failures into HTTP statuses.
"""
