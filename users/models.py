from django.db import models
from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver


class Profile(models.Model):
    ROLE_ADMIN = "admin"
    ROLE_SELLER = "seller"
    ROLE_CHOICES = [
        (ROLE_ADMIN, "Admin"),
        (ROLE_SELLER, "Seller"),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_SELLER)
    phone = models.CharField(max_length=20, blank=True)

    # Credentials for the external messaging account, kept per seller
    whatsapp_secret = models.CharField(max_length=255, blank=True)
    whatsapp_account = models.CharField(max_length=255, blank=True)

    def __str__(self):
        return f"{self.user.username} - {self.role}"

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN or self.user.is_staff


# SIGNALS: auto-create Profile for new users
@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    if created:
        Profile.objects.create(user=instance)


@receiver(post_save, sender=User)
def save_user_profile(sender, instance, **kwargs):
    # ensures the profile is saved whenever the user is saved
    if hasattr(instance, 'profile'):
        instance.profile.save()
