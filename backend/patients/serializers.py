import logging

from django.conf import settings
from django.db import transaction
from rest_framework import serializers

from doctors.models import Doctor
from lab.models import TestTemplate
from .models import Patient, PatientTest, PatientResult, next_ref_no, next_case_no

logger = logging.getLogger(__name__)


def commission_snapshot_for(referenced_by):
    """
    Freeze the referring doctor's current rates. Self referrals and names that
    match no doctor earn nothing.
    """
    if not referenced_by or referenced_by == settings.SELF_REFERRAL_LABEL:
        return {'routine': 0.0, 'special': 0.0}
    doctor = Doctor.objects.filter(name=referenced_by).order_by('created_at').first()
    if doctor is None:
        logger.warning(f"No doctor named {referenced_by!r}; commission snapshot set to zero")
        return {'routine': 0.0, 'special': 0.0}
    return doctor.commission_snapshot()


class PatientTestSerializer(serializers.ModelSerializer):
    test_id = serializers.UUIDField(source='test.id', read_only=True, allow_null=True)

    class Meta:
        model = PatientTest
        fields = ['id', 'test_id', 'test_name', 'test_type', 'price']


class PatientResultSerializer(serializers.ModelSerializer):
    test_id = serializers.UUIDField(source='test.id', read_only=True)

    class Meta:
        model = PatientResult
        fields = ['id', 'test_id', 'test_name', 'values', 'updated_at']


class PatientSerializer(serializers.ModelSerializer):
    p_id = serializers.UUIDField(source='id', read_only=True)
    tests = PatientTestSerializer(many=True, read_only=True)
    results = PatientResultSerializer(many=True, read_only=True)

    class Meta:
        model = Patient
        fields = [
            'id', 'p_id', 'ref_no', 'case_no', 'name', 'age', 'gender', 'phone',
            'father_husband_name', 'nic_no', 'specimen', 'payment_status', 'result_status',
            'referenced_by', 'doctor_commission_snapshot', 'patient_registered_by',
            'payment_status_updated_by', 'result_added_by', 'final_report_approved_by',
            'tests', 'results', 'total', 'discount_percentage', 'discount_amount',
            'net_total', 'paid_amount', 'due_amount', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class PatientSearchSerializer(serializers.ModelSerializer):
    class Meta:
        model = Patient
        fields = ['id', 'name', 'age', 'phone', 'gender', 'referenced_by']


class SelectedTestSerializer(serializers.Serializer):
    test_id = serializers.UUIDField()


class PatientRegistrationSerializer(serializers.ModelSerializer):
    selected_tests = SelectedTestSerializer(many=True, write_only=True)
    referenced_by = serializers.CharField(required=False, allow_blank=True)
    paid_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)

    class Meta:
        model = Patient
        fields = [
            'name', 'age', 'gender', 'phone', 'father_husband_name', 'nic_no', 'specimen',
            'payment_status', 'result_status', 'referenced_by', 'patient_registered_by',
            'payment_status_updated_by', 'discount_percentage', 'discount_amount',
            'paid_amount', 'selected_tests'
        ]

    def validate_phone(self, value):
        cleaned = value.strip()
        if not cleaned:
            raise serializers.ValidationError("This field is required.")
        return cleaned

    def validate_selected_tests(self, value):
        if not value:
            raise serializers.ValidationError("Please select at least one test")
        return value

    def validate_referenced_by(self, value):
        return value.strip() or settings.SELF_REFERRAL_LABEL

    @transaction.atomic
    def create(self, validated_data):
        selected = validated_data.pop('selected_tests')
        discount_percentage = validated_data.pop('discount_percentage', None)
        discount_amount = validated_data.pop('discount_amount', None)

        # Names, prices and types come from the catalog, never from the client
        wanted = [s['test_id'] for s in selected]
        templates = {t.id: t for t in TestTemplate.objects.filter(id__in=wanted)}
        missing = [str(t) for t in wanted if t not in templates]
        if missing:
            raise serializers.ValidationError({'selected_tests': [f"Unknown test(s): {', '.join(missing)}"]})

        referenced_by = validated_data.get('referenced_by') or settings.SELF_REFERRAL_LABEL
        validated_data['referenced_by'] = referenced_by

        patient = Patient(
            ref_no=next_ref_no(),
            case_no=next_case_no(),
            doctor_commission_snapshot=commission_snapshot_for(referenced_by),
            **validated_data
        )
        patient.save()

        for position, test_id in enumerate(wanted):
            template = templates[test_id]
            PatientTest.objects.create(
                patient=patient,
                test=template,
                test_name=template.test_name,
                test_type=template.test_type,
                price=template.test_price,
                position=position,
            )

        patient.recalculate_totals()
        patient.apply_discount(percentage=discount_percentage, amount=discount_amount)
        patient.refresh_balances()
        patient.save()
        return patient


class PatientUpdateSerializer(serializers.ModelSerializer):
    """
    Demographics, referral and discount. Money derived from the line items is
    recomputed, never accepted.
    """

    class Meta:
        model = Patient
        fields = [
            'name', 'age', 'gender', 'phone', 'father_husband_name', 'nic_no', 'specimen',
            'referenced_by', 'final_report_approved_by', 'discount_percentage', 'discount_amount'
        ]

    def validate_referenced_by(self, value):
        return value.strip() or settings.SELF_REFERRAL_LABEL

    @transaction.atomic
    def update(self, instance, validated_data):
        discount_percentage = validated_data.pop('discount_percentage', None)
        discount_amount = validated_data.pop('discount_amount', None)

        referenced_by = validated_data.get('referenced_by')
        if referenced_by is not None and referenced_by != instance.referenced_by:
            instance.doctor_commission_snapshot = commission_snapshot_for(referenced_by)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)

        instance.apply_discount(percentage=discount_percentage, amount=discount_amount)
        instance.refresh_balances()
        instance.save()
        return instance


class PaymentUpdateSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=Patient.PaymentStatus.choices)
    payment_status_updated_by = serializers.CharField()
    paid_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)

    def update(self, instance, validated_data):
        instance.payment_status = validated_data['payment_status']
        instance.payment_status_updated_by = validated_data['payment_status_updated_by']
        if 'paid_amount' in validated_data:
            instance.paid_amount = validated_data['paid_amount']
        instance.refresh_balances()
        instance.save()
        return instance


class ResultValueSerializer(serializers.Serializer):
    fieldName = serializers.CharField()
    defaultValue = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')
    unit = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')
    range = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')


class ResultEntrySerializer(serializers.Serializer):
    test_id = serializers.UUIDField()
    test_name = serializers.CharField(required=False, allow_blank=True)
    values = ResultValueSerializer(many=True)


class ResultSubmissionSerializer(serializers.Serializer):
    tests = ResultEntrySerializer(many=True)
    result_added_by = serializers.CharField(required=False, allow_blank=True, default='')
    socket_id = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
