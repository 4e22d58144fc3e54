"""
CreatorPay - Course API Views
"""
import logging

from rest_framework import viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.request import Request

from creatorpay.serializers.course_serializer import (
    CourseSerializer,
    CourseEnrollmentSerializer,
    CoursePurchaseSerializer,
)
from creatorpay.services.course_service import CourseService
from creatorpay.services.payment_service import PaymentService
from creatorpay.apis.common import service_error_response


logger = logging.getLogger(__name__)


class CourseViewSet(viewsets.ReadOnlyModelViewSet):
    """
    List: GET /api/courses/
    Purchase: POST /api/courses/{id}/purchase/ {"phone_number": "0712345678"}
    Enrollments: GET /api/courses/enrollments/
    """

    serializer_class = CourseSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return CourseService().list_courses()

    def get_serializer_class(self):
        if self.action == 'purchase':
            return CoursePurchaseSerializer
        return self.serializer_class

    @action(detail=True, methods=['post'])
    def purchase(self, request: Request, pk=None) -> Response:
        """
        Free courses enroll immediately. Paid ones send an STK push and
        enroll once PayHero confirms the payment.
        """
        course = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = PaymentService().initiate_course_payment(
                request.user,
                course,
                phone_number=serializer.validated_data.get('phone_number'),
            )
        except Exception as e:
            return service_error_response(e, f"purchase of course {course.id}")

        logger.info(f"User {request.user.pk} purchase of course {course.id}: enrolled={result.get('enrolled')}")
        return Response(result, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'])
    def enrollments(self, request: Request) -> Response:
        enrollments = CourseService().list_enrollments(request.user)
        return Response(CourseEnrollmentSerializer(enrollments, many=True).data, status=status.HTTP_200_OK)
