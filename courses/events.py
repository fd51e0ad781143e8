"""Signals published by the courses app when enrollment or staffing changes.

Every signal is sent with ``sender=Course`` and the keyword arguments listed
next to it.
"""
from django.dispatch import Signal

# course_id, course_name, mentor_ids, student_id, is_accepted
new_course_mate = Signal()

# course_id, course_name, mentor_ids, student_id
lecturer_accepted_to_course = Signal()

# course_id, course_name, mentor_ids, student_id
lecturer_rejected_to_course = Signal()

# course_id, course_name, mentor_id, mentor_email
lecturer_invited_to_course = Signal()
