from sqlalchemy.orm import Session
from typing import List, Optional

from ..core.security import UserRole
from ..models.user import User

def find_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()

def list_doctors(db: Session) -> List[User]:
    return (
        db.query(User)
        .filter(User.role == UserRole.DOCTOR)
        .order_by(User.name)
        .all()
    )

def get_doctor(db: Session, doctor_id: int) -> Optional[User]:
    """Return the user only if it exists and holds the doctor role."""
    user = find_user_by_id(db, doctor_id)
    if user is None or not user.is_doctor:
        return None
    return user
