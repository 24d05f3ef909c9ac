# Import all models to ensure they're registered with SQLAlchemy
from school_admin.database import Base
from school_admin.models.people import Teacher, Student
from school_admin.models.academics import Mark, Remark
