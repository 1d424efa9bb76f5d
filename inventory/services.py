import logging
from dataclasses import dataclass, field
from typing import List

from django.conf import settings
from django.db import IntegrityError, transaction

from .codes import CODE_LENGTH, CodeImportError, clean_code, split_codes, validate_codes
from .models import Code

logger = logging.getLogger(__name__)


def get_config(key, default=None):
    return getattr(settings, 'CODESTORE_CONFIG', {}).get(key, default)


@dataclass
class CodeImportResult:
    created: int = 0
    valid_codes: List[str] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    system_duplicates: List[str] = field(default_factory=list)

    def as_dict(self):
        return {
            'created': self.created,
            'valid_codes': self.valid_codes,
            'duplicates': self.duplicates,
            'system_duplicates': self.system_duplicates,
        }


def import_codes(app, raw_codes, batch_size=None):
    """
    Import a batch of redemption codes for `app`.

    `raw_codes` is a block of text with one code per line or a list of
    strings. If any entry is not a 16-digit code the whole batch is refused
    and nothing is stored. Codes repeated inside the batch or already stored
    (for any app) are reported and skipped; the rest are inserted in one
    transaction.
    """
    entries = split_codes(raw_codes)
    if not entries:
        raise CodeImportError("No codes provided")

    invalid = [entry for entry in entries if len(clean_code(entry)) != CODE_LENGTH]
    if invalid:
        raise CodeImportError(
            f"All codes must have {CODE_LENGTH} digits ({len(invalid)} invalid)",
            invalid_codes=invalid,
        )

    cleaned = [clean_code(entry) for entry in entries]
    batch_size = batch_size or get_config('CODE_IMPORT_BATCH_SIZE', 500)

    # The stored-code lookup and the insert share one transaction; a
    # concurrent import can still win the race, which the unique index reports.
    try:
        with transaction.atomic():
            existing = Code.objects.filter(code__in=set(cleaned)).values_list('code', flat=True)
            validation = validate_codes(cleaned, existing)
            created = []
            if validation.valid_codes:
                created = Code.objects.bulk_create(
                    [Code(app=app, code=code) for code in validation.valid_codes],
                    batch_size=batch_size,
                )
    except IntegrityError as e:
        logger.warning(f"[CODE IMPORT] App: {app.name} (#{app.pk}) | Concurrent import collided: {e}")
        raise CodeImportError(
            "Some codes were stored by another import at the same time; try again"
        ) from e

    result = CodeImportResult(
        created=len(created),
        valid_codes=validation.valid_codes,
        duplicates=validation.duplicates,
        system_duplicates=validation.system_duplicates,
    )

    logger.info(
        f"[CODE IMPORT] App: {app.name} (#{app.pk}) | "
        f"Received: {len(entries)} | Created: {result.created} | "
        f"Batch duplicates: {len(result.duplicates)} | "
        f"Already stored: {len(result.system_duplicates)}"
    )
    return result
