import uuid
from django.db import models, transaction


class BaseModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class RefCounter(models.Model):
    """
    Named monotonically increasing sequence (e.g. "patient_ref").
    """
    name = models.CharField(max_length=100, unique=True)
    seq = models.PositiveBigIntegerField(default=0)

    def __str__(self):
        return f"{self.name}: {self.seq}"

    @classmethod
    def next_value(cls, name, start=0):
        """
        Increment and return the sequence, creating it at ``start`` on first use.
        The row is locked for the duration of the increment.
        """
        with transaction.atomic():
            counter, _ = cls.objects.select_for_update().get_or_create(
                name=name, defaults={'seq': start}
            )
            counter.seq = models.F('seq') + 1
            counter.save(update_fields=['seq'])
            counter.refresh_from_db(fields=['seq'])
            return counter.seq
