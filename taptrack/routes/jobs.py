from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.security import get_current_user
from ..schemas.jobs import JobCreate, JobOut
from ..services import jobs as job_service


router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("")
def list_jobs(db: Session = Depends(get_db), _=Depends(get_current_user)):
    return {"jobs": [JobOut.model_validate(j).to_json() for j in job_service.list_jobs(db)]}


@router.post("", status_code=201)
def create_job(payload: JobCreate, db: Session = Depends(get_db), _=Depends(get_current_user)):
    job = job_service.create_job(db, payload.model_dump())
    return {"job": JobOut.model_validate(job).to_json()}
