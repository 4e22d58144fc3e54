import logging

from creatorpay.models import Course, CourseEnrollment


logger = logging.getLogger(__name__)


class CourseService:
    """Enrollment bookkeeping for purchasable courses"""

    def enroll(self, user, course):
        """
        Idempotently enroll ``user`` in ``course``

        Returns:
            tuple: (CourseEnrollment, created)
        """
        enrollment, created = CourseEnrollment.objects.get_or_create(user=user, course=course)
        if created:
            logger.info(f"Enrolled user {user.pk} in course {course.pk}")
        return enrollment, created

    def enroll_by_id(self, user, course_id):
        """Enroll from a stored course id; returns None if the course is gone"""
        course = Course.objects.filter(pk=course_id).first()
        if course is None:
            logger.error(f"Cannot enroll user {user.pk}: course {course_id} does not exist")
            return None
        enrollment, _created = self.enroll(user, course)
        return enrollment

    def list_enrollments(self, user):
        return CourseEnrollment.objects.filter(user=user).select_related('course').order_by('-enrolled_at')

    def list_courses(self):
        return Course.objects.filter(is_published=True)
