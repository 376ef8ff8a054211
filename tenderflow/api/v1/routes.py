from fastapi import APIRouter
from tenderflow.api.v1.endpoints import company, comparison, documents, evaluations, health

router = APIRouter(prefix="/v1")

router.include_router(company.router, prefix="/company", tags=["Company"])
router.include_router(comparison.router, prefix="/compare", tags=["Comparison"])
router.include_router(documents.router, prefix="/documents", tags=["Documents"])
router.include_router(evaluations.router, prefix="/documents", tags=["Evaluations"])
router.include_router(health.router, prefix="/health", tags=["Health"])
