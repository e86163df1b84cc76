# abattoir/handlers/__init__.py

from .month_reports import router as month_reports_router


routers = [
    month_reports_router,
]
