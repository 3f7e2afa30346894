import logging

from django.db import transaction
from rest_framework import viewsets, permissions, filters, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend

from core.events import EventPublishingMixin
from core.permissions import IsLabStaff, HasRole
from lab.models import TestTemplate
from .models import Patient, PatientResult
from .serializers import (
    PatientSerializer, PatientSearchSerializer, PatientRegistrationSerializer,
    PatientUpdateSerializer, PaymentUpdateSerializer, ResultSubmissionSerializer
)

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10

CanEnterResults = HasRole('SENIOR_LAB_TECH', 'JUNIOR_LAB_TECH')


class PatientViewSet(EventPublishingMixin, viewsets.ModelViewSet):
    queryset = Patient.objects.all().order_by('-created_at')
    serializer_class = PatientSerializer
    permission_classes = [IsLabStaff]
    pagination_class = None

    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ['payment_status', 'result_status', 'referenced_by']
    search_fields = ['name', 'phone', 'ref_no', 'case_no']

    def get_queryset(self):
        return Patient.objects.prefetch_related('tests__test', 'results__test').order_by('-created_at')

    def get_serializer_class(self):
        if self.action == 'create':
            return PatientRegistrationSerializer
        if self.action in ('update', 'partial_update'):
            return PatientUpdateSerializer
        return PatientSerializer

    def get_permissions(self):
        if self.action == 'destroy':
            return [HasRole('SENIOR_RECEPTIONIST')()]
        if self.action in ('save_results', 'reset_results'):
            return [CanEnterResults()]
        return super().get_permissions()

    def _announce(self, event, patient, **extra):
        self.publish_event(event, {'patientId': str(patient.id), 'patientName': patient.name, **extra})

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        patient = serializer.save()
        logger.info(f"Patient registered: {patient.name} ({patient.ref_no}) referred by {patient.referenced_by}")
        self._announce('patientRegistered', patient)
        return Response(PatientSerializer(patient).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        patient = self.get_object()
        serializer = self.get_serializer(patient, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        patient = serializer.save()
        return Response(PatientSerializer(self.get_queryset().get(pk=patient.pk)).data)

    def perform_destroy(self, instance):
        snapshot = {'patientId': str(instance.id), 'patientName': instance.name}
        instance.delete()
        logger.info(f"Patient deleted: {snapshot['patientName']}")
        self.publish_event('patientDeleted', snapshot)

    @action(detail=False, methods=['get'])
    def search(self, request):
        q = (request.query_params.get('q') or '').strip()
        if not q:
            return Response([])
        patients = Patient.objects.filter(name__icontains=q).order_by('-created_at')[:SEARCH_LIMIT]
        return Response(PatientSearchSerializer(patients, many=True).data)

    @action(detail=True, methods=['patch'])
    def payment(self, request, pk=None):
        patient = self.get_object()
        serializer = PaymentUpdateSerializer(patient, data=request.data)
        serializer.is_valid(raise_exception=True)
        patient = serializer.save()
        self._announce('paymentUpdated', patient, paymentStatus=patient.payment_status)
        return Response({'success': True, 'updatedPatient': PatientSerializer(patient).data})

    @action(detail=True, methods=['delete'], url_path=r'tests/(?P<test_id>[0-9a-fA-F-]+)')
    def remove_test(self, request, pk=None, test_id=None):
        """
        Drop one ordered test and rebalance. The discount amount is kept as is.
        """
        patient = self.get_object()
        with transaction.atomic():
            deleted, _ = patient.tests.filter(test_id=test_id).delete()
            if not deleted:
                return Response({'error': 'Test not found for this patient'}, status=status.HTTP_404_NOT_FOUND)
            patient.results.filter(test_id=test_id).delete()
            patient.recalculate_totals()
            patient.save()
        self._announce('testDeleted', patient)
        patient = self.get_queryset().get(pk=patient.pk)
        return Response({'message': 'Test deleted successfully', 'patient': PatientSerializer(patient).data})

    # Result entry

    @action(detail=False, methods=['get'], url_path='results/pending')
    def pending_results(self, request):
        patients = self.get_queryset().filter(
            result_status__in=[Patient.ResultStatus.PENDING, Patient.ResultStatus.ADDED]
        )
        pending = [p for p in patients if p.has_pending_results]
        return Response(PatientSerializer(pending, many=True).data)

    @action(detail=False, methods=['get'], url_path='results/added')
    def added_results(self, request):
        patients = self.get_queryset().filter(result_status=Patient.ResultStatus.ADDED)
        return Response(PatientSerializer(patients, many=True).data)

    @action(detail=True, methods=['get'], url_path='tests-with-fields')
    def tests_with_fields(self, request, pk=None):
        """
        The patient's tests with their catalog fields, saved values filled in.
        """
        patient = self.get_object()
        saved = {r.test_id: r for r in patient.results.all()}
        tests = []
        for line in patient.tests.all():
            template = line.test
            if template is None:
                continue
            result = saved.get(template.id)
            saved_values = {v.get('fieldName'): v for v in (result.values if result else [])}
            fields = []
            for field in template.result_fields or []:
                saved_field = saved_values.get(field.get('fieldName'))
                fields.append({
                    **field,
                    'defaultValue': saved_field.get('defaultValue') if saved_field else (field.get('defaultValue') or ''),
                })
            tests.append({
                'test_id': str(template.id),
                'test_name': line.test_name,
                'test_type': line.test_type,
                'price': str(line.price),
                'specimen': template.specimen,
                'category': template.category,
                'is_diagnostic_test': template.is_diagnostic_test,
                'report_extras': template.report_extras,
                'scale_config': template.scale_config,
                'fields': fields,
            })
        data = PatientSerializer(patient).data
        data['tests'] = tests
        return Response(data)

    @action(detail=True, methods=['patch'], url_path='results')
    def save_results(self, request, pk=None):
        patient = self.get_object()
        serializer = ResultSubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        wanted = [entry['test_id'] for entry in data['tests']]
        templates = {t.id: t for t in TestTemplate.objects.filter(id__in=wanted)}
        unknown = [str(t) for t in wanted if t not in templates]
        if unknown:
            return Response({'error': f"Unknown test(s): {', '.join(unknown)}"}, status=status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            for entry in data['tests']:
                template = templates[entry['test_id']]
                PatientResult.objects.update_or_create(
                    patient=patient,
                    test=template,
                    defaults={
                        'test_name': entry.get('test_name') or template.test_name,
                        'values': [dict(v) for v in entry['values']],
                    },
                )
            if PatientResult.objects.filter(patient=patient).exists():
                patient.result_status = Patient.ResultStatus.ADDED
            else:
                patient.result_status = Patient.ResultStatus.PENDING
            patient.result_added_by = data['result_added_by']
            patient.save()

        self._announce(
            'resultAdded', patient,
            resultStatus=patient.result_status,
            triggeredBySocketId=data['socket_id'],
        )
        return Response({'message': 'Results saved successfully'})

    @action(detail=True, methods=['post'], url_path='results/reset')
    def reset_results(self, request, pk=None):
        patient = self.get_object()
        with transaction.atomic():
            patient.results.all().delete()
            patient.result_status = Patient.ResultStatus.PENDING
            patient.result_added_by = None
            patient.save()
        self._announce('resultReset', patient)
        patient = self.get_queryset().get(pk=patient.pk)
        return Response({'message': 'Results reset successfully', 'patient': PatientSerializer(patient).data})


class PublicReportView(APIView):
    """
    Report lookup for patients scanning the QR code on their receipt.
    No login; the patient number and phone act as the key.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        patient_number = (request.data.get('patientNumber') or '').strip()
        phone = (request.data.get('phone') or '').strip()
        name = (request.data.get('name') or '').strip()

        if not patient_number or not phone:
            return Response(
                {'success': False, 'message': 'Patient number and phone are required'},
                status=status.HTTP_400_BAD_REQUEST
            )

        patients = Patient.objects.filter(ref_no=patient_number, phone=phone)
        if name:
            patients = patients.filter(name__iexact=name)
        patient = patients.prefetch_related('tests__test', 'results').first()
        if patient is None:
            return Response(
                {'success': False, 'message': 'No matching patient found. Please check your details.'},
                status=status.HTTP_404_NOT_FOUND
            )

        visible = [t for t in patient.tests.all() if not (t.test and t.test.is_diagnostic_test)]
        registration_report = {
            **self._header(patient),
            'tests': [
                {
                    'testName': t.test_name,
                    'price': float(t.price),
                    'testCode': t.test.test_code if t.test else None,
                    'specimen': t.test.specimen if t.test else None,
                }
                for t in visible
            ],
            'total': float(patient.total),
            'discountPercentage': float(patient.discount_percentage),
            'discountAmount': float(patient.discount_amount),
            'netTotal': float(patient.net_total),
            'paidAmount': float(patient.paid_amount),
            'dueAmount': float(patient.due_amount),
        }

        final_report = None
        results = {r.test_id: r for r in patient.results.all()}
        if patient.result_status == Patient.ResultStatus.ADDED and results:
            tests_with_results = [
                {
                    'testName': t.test_name,
                    'testCode': t.test.test_code,
                    'category': t.test.category,
                    'specimen': t.test.specimen,
                    'performed': t.test.performed,
                    'reported': t.test.reported,
                    'reportExtras': t.test.report_extras,
                    'fields': results[t.test_id].values,
                }
                for t in visible if t.test_id in results
            ]
            if tests_with_results:
                final_report = {
                    **self._header(patient),
                    'resultAddedBy': patient.result_added_by,
                    'updatedAt': patient.updated_at,
                    'tests': tests_with_results,
                }

        return Response({
            'success': True,
            'registrationReport': registration_report,
            'finalReport': final_report,
            'hasResults': final_report is not None,
        })

    def _header(self, patient):
        return {
            'refNo': patient.ref_no,
            'caseNo': patient.case_no,
            'name': patient.name,
            'age': patient.age,
            'gender': patient.gender,
            'phone': patient.phone,
            'fatherHusbandName': patient.father_husband_name,
            'nicNo': patient.nic_no,
            'specimen': patient.specimen,
            'referencedBy': patient.referenced_by,
            'createdAt': patient.created_at,
        }
