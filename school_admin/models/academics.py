from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from school_admin.database import Base

# Subject marks for one student in one term
class Mark(Base):
    __tablename__ = "marks"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    subject = Column(String(100), nullable=False)
    term = Column(String(50), nullable=False)
    class_name = Column(String(50), index=True)
    academic_year = Column(String(20))
    test1 = Column(Numeric(5, 2))
    test2 = Column(Numeric(5, 2))
    test3 = Column(Numeric(5, 2))
    test4 = Column(Numeric(5, 2))
    exam = Column(Numeric(5, 2))
    class_score = Column(Numeric(5, 2))
    exam_score = Column(Numeric(5, 2))
    total = Column(Numeric(5, 2))
    remark = Column(String(50))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # One mark row per student, subject and term
    __table_args__ = (
        UniqueConstraint("student_id", "subject", "term", name="uq_marks_student_subject_term"),
    )

    # Relationships
    student = relationship("Student", back_populates="marks")

# Form master remarks for one student in one term
class Remark(Base):
    __tablename__ = "remarks"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    class_name = Column(String(50), index=True)
    term = Column(String(50), nullable=False)
    academic_year = Column(String(20))
    attitude = Column(String(100))
    interest = Column(String(100))
    conduct = Column(String(100))
    attendance = Column(String(50))
    comments = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("student_id", "term", "academic_year", name="uq_remarks_student_term_year"),
    )

    # Relationships
    student = relationship("Student", back_populates="remarks")
