from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.models.school_class import ClassGroup, SchoolClass
from app.models.subject import Subject
from app.models.term import Term
from app.schemas.reference import (
    ClassGroupCreate,
    ClassGroupOut,
    SchoolClassCreate,
    SchoolClassOut,
    SubjectCreate,
    SubjectOut,
    TermCreate,
    TermOut,
)

router = APIRouter()


@router.get("/terms", response_model=list[TermOut])
def list_terms(db: Session = Depends(get_db)) -> list[TermOut]:
    return list(db.execute(select(Term).order_by(Term.name.asc())).scalars())


@router.post("/terms", response_model=TermOut, status_code=status.HTTP_201_CREATED)
def create_term(payload: TermCreate, db: Session = Depends(get_db)) -> TermOut:
    term = Term(**payload.model_dump())
    db.add(term)
    db.commit()
    db.refresh(term)
    return term


@router.get("/terms/{term_id}", response_model=TermOut)
def get_term(term_id: str, db: Session = Depends(get_db)) -> TermOut:
    term = db.get(Term, term_id)
    if term is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Term not found")
    return term


@router.get("/class-groups", response_model=list[ClassGroupOut])
def list_class_groups(db: Session = Depends(get_db)) -> list[ClassGroupOut]:
    return list(db.execute(select(ClassGroup).order_by(ClassGroup.name.asc())).scalars())


@router.post("/class-groups", response_model=ClassGroupOut, status_code=status.HTTP_201_CREATED)
def create_class_group(payload: ClassGroupCreate, db: Session = Depends(get_db)) -> ClassGroupOut:
    existing = db.execute(select(ClassGroup).where(ClassGroup.name == payload.name)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Class group name already exists")
    group = ClassGroup(**payload.model_dump())
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


@router.get("/class-groups/{group_id}", response_model=ClassGroupOut)
def get_class_group(group_id: str, db: Session = Depends(get_db)) -> ClassGroupOut:
    group = db.get(ClassGroup, group_id)
    if group is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class group not found")
    return group


@router.get("/classes", response_model=list[SchoolClassOut])
def list_classes(db: Session = Depends(get_db)) -> list[SchoolClassOut]:
    return list(db.execute(select(SchoolClass).order_by(SchoolClass.name.asc())).scalars())


@router.post("/classes", response_model=SchoolClassOut, status_code=status.HTTP_201_CREATED)
def create_class(payload: SchoolClassCreate, db: Session = Depends(get_db)) -> SchoolClassOut:
    if payload.class_group_id and db.get(ClassGroup, payload.class_group_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class group not found")
    school_class = SchoolClass(**payload.model_dump())
    db.add(school_class)
    db.commit()
    db.refresh(school_class)
    return school_class


@router.get("/classes/{class_id}", response_model=SchoolClassOut)
def get_class(class_id: str, db: Session = Depends(get_db)) -> SchoolClassOut:
    school_class = db.get(SchoolClass, class_id)
    if school_class is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return school_class


@router.get("/subjects", response_model=list[SubjectOut])
def list_subjects(db: Session = Depends(get_db)) -> list[SubjectOut]:
    return list(db.execute(select(Subject).order_by(Subject.code.asc())).scalars())


@router.post("/subjects", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(payload: SubjectCreate, db: Session = Depends(get_db)) -> SubjectOut:
    existing = db.execute(select(Subject).where(Subject.code == payload.code)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject code already exists")
    subject = Subject(**payload.model_dump())
    db.add(subject)
    db.commit()
    db.refresh(subject)
    return subject


@router.get("/subjects/{subject_id}", response_model=SubjectOut)
def get_subject(subject_id: str, db: Session = Depends(get_db)) -> SubjectOut:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
    return subject
