# users/mixins.py
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import ProtectedError, RestrictedError
from django.forms.models import BaseInlineFormSet
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response


class OwnedQuerysetMixin:
    """Limit a viewset to rows owned by the requesting user and stamp new rows with it."""

    owner_field = "owner"

    def get_queryset(self):
        qs = super().get_queryset()
        return qs.filter(**{self.owner_field: self.request.user})

    def perform_create(self, serializer):
        serializer.save(**{self.owner_field: self.request.user})


class GuardedDestroyMixin:
    """Turn a refused cascade (object still referenced by sales) into a 400."""

    protected_message = "This record is referenced by existing sales and cannot be deleted."

    def destroy(self, request, *args, **kwargs):
        try:
            return super().destroy(request, *args, **kwargs)
        except (ProtectedError, RestrictedError):
            return Response({
                'success': False,
                'message': self.protected_message,
            }, status=status.HTTP_400_BAD_REQUEST)


def int_query_param(request, name):
    """
    Read an optional integer filter from the query string.

    Returns None when the parameter is absent or blank; anything that is
    not a whole number is a 400, not a database error.
    """
    value = request.query_params.get(name, '').strip()
    if not value:
        return None
    if not value.isdigit():
        raise ValidationError({name: f"'{value}' is not a valid id"})
    return int(value)


class OwnedInlineFormSet(BaseInlineFormSet):
    """
    Inline formset that refuses rows pointing at another seller's catalog.

    `owned_fields` lists the foreign keys on the inline model whose target
    must share the parent's owner.
    """

    owned_fields = ()

    def clean(self):
        super().clean()
        owner_id = getattr(self.instance, 'owner_id', None)
        if owner_id is None:
            return
        for form in self.forms:
            if not hasattr(form, 'cleaned_data') or form.cleaned_data.get('DELETE'):
                continue
            for name in self.owned_fields:
                target = form.cleaned_data.get(name)
                if target is not None and target.owner_id != owner_id:
                    raise DjangoValidationError(
                        f"{target} belongs to another seller."
                    )


class OwnedInlineMixin:
    """Narrow an inline's catalog choices to the parent object's owner."""

    formset = OwnedInlineFormSet
    owned_fields = ()

    def get_formset(self, request, obj=None, **kwargs):
        formset = super().get_formset(request, obj, **kwargs)
        formset.owned_fields = self.owned_fields
        if obj is not None:
            for name in self.owned_fields:
                field = formset.form.base_fields.get(name)
                if field is not None:
                    field.queryset = field.queryset.filter(owner_id=obj.owner_id)
        return formset
