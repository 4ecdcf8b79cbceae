# sales_dashboard/api/v1/routers.py
from fastapi import APIRouter
from sales_dashboard.api.v1.endpoints import dashboard

api_router = APIRouter()
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
