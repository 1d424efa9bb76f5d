from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
from django.conf import settings
from .models import App, Code
import logging

logger = logging.getLogger(__name__)


# ============================================
# APP SIGNALS
# ============================================

@receiver(post_save, sender=App)
def app_post_save(sender, instance, created, **kwargs):
    if created:
        logger.info(f"App created: #{instance.pk} {instance.name} (Price: {instance.price})")
    else:
        logger.debug(f"App updated: #{instance.pk} {instance.name} (Price: {instance.price})")


# ============================================
# CODE SIGNALS
# ============================================

@receiver(post_delete, sender=Code)
def log_used_code_deletion(sender, instance, **kwargs):
    """
    Used codes were delivered to a customer; removing them loses that trail.
    """
    if instance.used:
        logger.warning(
            f"[AUDIT ALERT] Used code DELETED: "
            f"ID: {instance.id} | "
            f"App ID: {instance.app_id} | "
            f"Used at: {instance.used_at}"
        )


# ============================================
# LOW CODE STOCK ALERTS
# ============================================

def warn_if_low_on_codes(app):
    """
    Log a warning when an app is running out of unused codes.

    Called after codes are consumed; queryset updates do not fire
    post_save so this is not wired as a receiver.
    """
    threshold = getattr(settings, 'CODESTORE_CONFIG', {}).get('LOW_CODES_THRESHOLD', 5)
    available = app.codes.filter(used=False).count()

    if available == 0:
        logger.error(f"OUT OF CODES: {app.name} (#{app.pk}) has no unused codes left")
    elif available <= threshold:
        logger.warning(
            f"LOW CODES ALERT: {app.name} (#{app.pk}) has only {available} unused codes remaining"
        )
    return available
