from .course import Course
from .staff import CourseStaff, CourseRole
from .module import CourseModule
from .lesson import Lesson

from .enrollment import CourseEnrollment
from .progress import LessonProgress
from .assignment import Assignment, Submission
from .certificate import CourseCertificate
from .comment import LessonComment
