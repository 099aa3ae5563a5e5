from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from app.core.settings import get_settings
from app.services.finance_service import FinanceChartService
from app.services.gemini_service import GeminiService


@lru_cache
def get_gemini_service() -> GeminiService:
    return GeminiService(settings=get_settings())


def get_finance_service(
    gemini_service: GeminiService = Depends(get_gemini_service),
) -> FinanceChartService:
    return FinanceChartService(gemini_service=gemini_service)
