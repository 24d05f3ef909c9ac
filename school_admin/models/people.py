from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from school_admin.database import Base

# Teachers (every login account is a teacher row, admins included)
class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(Text, nullable=False)
    gender = Column(String(20))
    primary_role = Column(String(50), default="subject_teacher")
    all_roles = Column(ARRAY(String), default=list)
    classes = Column(ARRAY(String), default=list)
    subjects = Column(ARRAY(String), default=list)
    form_class = Column(String(50))
    requires_password_change = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

# Students
class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    id_number = Column(String(50), unique=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    class_name = Column(String(50), index=True)
    gender = Column(String(20))
    academic_year = Column(String(20))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    marks = relationship("Mark", back_populates="student")
    remarks = relationship("Remark", back_populates="student")
