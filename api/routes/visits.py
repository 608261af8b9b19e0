"""
Visit Routes - the greeting page that counts its own visits
"""
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from api.dependencies import get_visit_service
from services.visits import VisitService, format_greeting
from utils.errors import handle_api_errors

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
@handle_api_errors
async def visit(visit_service: VisitService = Depends(get_visit_service)):
    """
    Increment the shared visit counter and greet with its new value

    Responds 503 when the cache fails or does not answer in time.
    """
    visits = await visit_service.record_visit()
    return PlainTextResponse(format_greeting(visits))
