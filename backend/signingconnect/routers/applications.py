from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from signingconnect.database import get_db
from signingconnect.limiter import application_limit
from signingconnect.schemas.application import (
    ApplicationStatusResponse,
    ApplicationSubmit,
    ApplicationSubmitResponse,
)
from signingconnect.services.application_service import application_service

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post("/submit", response_model=ApplicationSubmitResponse, status_code=201)
@application_limit
async def submit_application(request: Request, req: ApplicationSubmit, db: Session = Depends(get_db)):
    application = application_service.submit(db, req)
    return ApplicationSubmitResponse(
        application_id=application.application_id,
        message="Application submitted successfully",
    )


@router.get("/status/{application_id}", response_model=ApplicationStatusResponse)
async def get_application_status(application_id: str, db: Session = Depends(get_db)):
    return ApplicationStatusResponse(application=application_service.get_status(db, application_id))
