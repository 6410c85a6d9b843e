from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Text, text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Users(Base):
    __tablename__ = 'users'

    name = Column(Text, nullable=False)
    role = Column(Enum('admin', 'teacher', 'student', name='user_role'), nullable=False, server_default=text("'student'"))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    email = Column(Text, unique=True)
    phone = Column(Text)
    notes = Column(Text)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    availability = relationship('Availability', uselist=False, back_populates='user')


class Availability(Base):
    __tablename__ = 'availability'

    user_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)
    # [{"day": 0..6, "start": "HH:MM", "end": "HH:MM"}], day 0 = Sunday
    weekly_rules = Column(Text, nullable=False, server_default=text("'[]'"))
    # [{"date": "YYYY-MM-DD", "slots": [{"start": iso, "end": iso}]}]
    exceptions = Column(Text, nullable=False, server_default=text("'[]'"))
    id = Column(Integer, primary_key=True)
    timezone = Column(Text)
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    user = relationship('Users', back_populates='availability')


class Holidays(Base):
    __tablename__ = 'holidays'

    date = Column(Date, nullable=False, unique=True)
    id = Column(Integer, primary_key=True)
    title = Column(Text)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))


class GlobalSettings(Base):
    __tablename__ = 'global_settings'

    open_hour = Column(Integer, nullable=False, server_default=text('9'))
    close_hour = Column(Integer, nullable=False, server_default=text('21'))
    # "0,1,2,3,4,5,6", 0 = Sunday
    days_open = Column(Text, nullable=False, server_default=text("'0,1,2,3,4,5,6'"))
    id = Column(Integer, primary_key=True)
    updated_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))


class Lessons(Base):
    __tablename__ = 'lessons'

    title = Column(Text, nullable=False)
    teacher_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    starts_at = Column(DateTime, nullable=False, index=True)
    ends_at = Column(DateTime, nullable=False)
    duration_minutes = Column(Integer, nullable=False, server_default=text('60'))
    status = Column(Text, nullable=False, server_default=text("'scheduled'"))
    id = Column(Integer, primary_key=True)
    student_id = Column(ForeignKey('users.id', ondelete='SET NULL'), index=True)
    attended = Column(Integer, nullable=False, server_default=text('0'))
    series_id = Column(ForeignKey('recurring_series.id', ondelete='SET NULL'), index=True)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    teacher = relationship('Users', foreign_keys=[teacher_id])
    student = relationship('Users', foreign_keys=[student_id])
    series = relationship('RecurringSeries', back_populates='lessons')


class RecurringSeries(Base):
    __tablename__ = 'recurring_series'

    title = Column(Text, nullable=False)
    teacher_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    starts_at = Column(DateTime, nullable=False)
    duration_minutes = Column(Integer, nullable=False, server_default=text('60'))
    freq = Column(Text, nullable=False, server_default=text("'weekly'"))
    interval = Column(Integer, nullable=False, server_default=text('1'))
    count = Column(Integer, nullable=False, server_default=text('10'))
    id = Column(Integer, primary_key=True)
    student_id = Column(ForeignKey('users.id', ondelete='SET NULL'), index=True)
    # "1,3", 0 = Sunday; empty = weekday of starts_at
    by_day = Column(Text, nullable=False, server_default=text("''"))
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    lessons = relationship('Lessons', back_populates='series')


class LessonRequests(Base):
    __tablename__ = 'lesson_requests'

    teacher_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    student_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    starts_at = Column(DateTime, nullable=False)
    duration_minutes = Column(Integer, nullable=False, server_default=text('60'))
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    id = Column(Integer, primary_key=True)
    title = Column(Text, nullable=False, server_default=text("'Scheduled Lesson'"))
    lesson_id = Column(ForeignKey('lessons.id', ondelete='SET NULL'))
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    teacher = relationship('Users', foreign_keys=[teacher_id])
    student = relationship('Users', foreign_keys=[student_id])
    lesson = relationship('Lessons')


class SchedulingLogs(Base):
    __tablename__ = 'scheduling_logs'

    algorithm = Column(Text, nullable=False)
    teacher_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    student_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    id = Column(Integer, primary_key=True)
    window_start = Column(DateTime)
    window_end = Column(DateTime)
    # [{"start": iso, "end": iso, "duration": minutes}]
    suggestions = Column(Text, nullable=False, server_default=text("'[]'"))
    meta = Column(Text)
    created_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'), index=True)
